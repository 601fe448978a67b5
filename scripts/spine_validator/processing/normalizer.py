"""
Document normalization for skeleton-definition exports.

Exports come in several shapes. Each document is classified into one of a
closed set of variants and given the same canonical view, whose
``animations`` field is always a sequence of animation records.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Tuple, Union

logger = logging.getLogger(__name__)


class DocumentVariant(Enum):
    """Shapes a skeleton-definition document can take."""
    STANDARD = "standard"
    LEGACY = "legacy"
    OBJECT_ANIMATIONS = "object-animations"
    COMPLEX = "complex"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CanonicalView:
    """Shape-independent, read-only view of a document."""
    variant: DocumentVariant
    animations: Tuple[Any, ...]
    skins: Any = None
    slots: Any = None
    data: Mapping = field(default_factory=lambda: MappingProxyType({}))

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a top-level field of the view."""
        return self.data.get(key, default)


class InvalidDocumentError(Exception):
    """Raised when input is not a well-formed structured mapping."""

    def __init__(self, message: str):
        super().__init__(f"Invalid document: {message}")
        self.reason = message


def is_set(value: Any) -> bool:
    """
    Check whether a field counts as present.

    Containers count even when empty; ``None``, ``False``, zero and the empty
    string do not.
    """
    if value is None or value is False:
        return False
    if isinstance(value, (Mapping, list, tuple)):
        return True
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float)):
        return value != 0
    return True


def is_sequence(value: Any) -> bool:
    """Check if value is a JSON array."""
    return isinstance(value, (list, tuple))


def usable_name(value: Any) -> bool:
    """Check if value can serve as a name."""
    return isinstance(value, str) and value != ""


def load_document(text: Union[str, bytes]) -> Dict[str, Any]:
    """
    Parse JSON text into a document.

    Raises:
        InvalidDocumentError: If the text is not JSON or not an object
    """
    if isinstance(text, bytes):
        text = text.decode('utf-8-sig')
    elif text.startswith('\ufeff'):
        text = text[1:]

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidDocumentError(str(e))

    if not isinstance(document, Mapping):
        raise InvalidDocumentError(f"expected a JSON object, got {type(document).__name__}")

    return document


def animations_to_records(animations: Any) -> List[Any]:
    """
    Convert a name -> animation mapping into a list of records.

    The mapping key is injected as ``name`` unless the entry carries its own.
    Entries left without a usable name are dropped.
    """
    if is_sequence(animations):
        return list(animations)
    if not isinstance(animations, Mapping):
        return []

    records = []
    for key, value in animations.items():
        record = {"name": key}
        if isinstance(value, Mapping):
            record.update(value)
        if usable_name(record.get("name")):
            records.append(record)
    return records


def _has_content(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple)) and len(value) > 0


def _normalize_standard(document: Mapping) -> Tuple[Any, ...]:
    return tuple(document["animations"])


def _normalize_legacy(document: Mapping) -> Tuple[Any, ...]:
    return tuple(animations_to_records(document.get("animations")))


def _normalize_object_animations(document: Mapping) -> Tuple[Any, ...]:
    return tuple(animations_to_records(document["animations"]))


def _normalize_probed(document: Mapping) -> Tuple[Any, ...]:
    animations = document.get("animations")
    return tuple(animations) if is_sequence(animations) else ()


_NORMALIZERS: Dict[DocumentVariant, Callable[[Mapping], Tuple[Any, ...]]] = {
    DocumentVariant.STANDARD: _normalize_standard,
    DocumentVariant.LEGACY: _normalize_legacy,
    DocumentVariant.OBJECT_ANIMATIONS: _normalize_object_animations,
    DocumentVariant.COMPLEX: _normalize_probed,
    DocumentVariant.UNKNOWN: _normalize_probed,
}


def classify(document: Mapping) -> DocumentVariant:
    """Decide which variant a document belongs to."""
    animations = document.get("animations")

    if is_set(document.get("skeleton")) and is_sequence(animations):
        return DocumentVariant.STANDARD
    if is_set(document.get("bones")) and is_set(document.get("slots")) and is_set(document.get("skins")):
        return DocumentVariant.LEGACY
    if is_set(animations) and not is_sequence(animations):
        return DocumentVariant.OBJECT_ANIMATIONS

    if _has_content(document.get("skins")) and _has_content(animations):
        return DocumentVariant.COMPLEX
    return DocumentVariant.UNKNOWN


def normalize(document: Mapping) -> CanonicalView:
    """
    Classify a document and build its canonical view.

    The input document is never mutated; the view holds a shallow copy whose
    ``animations`` entry is replaced by the normalized sequence.

    Args:
        document: Parsed skeleton-definition document

    Returns:
        CanonicalView tagged with the detected variant

    Raises:
        InvalidDocumentError: If document is not a mapping
    """
    if not isinstance(document, Mapping):
        raise InvalidDocumentError(f"expected a mapping, got {type(document).__name__}")

    logger.debug(f"Document keys: {', '.join(str(k) for k in document.keys())}")

    variant = classify(document)
    animations = _NORMALIZERS[variant](document)

    data = dict(document)
    data["animations"] = list(animations)

    return CanonicalView(
        variant=variant,
        animations=animations,
        skins=document.get("skins"),
        slots=document.get("slots"),
        data=MappingProxyType(data),
    )
