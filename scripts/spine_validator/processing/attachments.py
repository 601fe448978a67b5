"""
Attachment requirement extraction.

Discovers every attachment name a document requires by scanning skins, slot
default attachments, animation keyframe tracks and deform tracks, and records
for each name the contexts that reference it. Each scanning stage is a pure
function returning an immutable record; ``AttachmentExtractor`` merges them.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from .normalizer import CanonicalView, is_sequence, usable_name
from ..config import ValidatorConfig, DEFAULT_NON_TEXTURE_TYPES
from ..utils.tree import DEFAULT_MAX_DEPTH, PathSegment, walk_tree

logger = logging.getLogger(__name__)

UNDEFINED_ATTACHMENT_REFERENCE = "undefined_attachment_reference"

# Animation timelines keyed skin -> slot -> attachment
DEFORM_TIMELINE_KEYS = ("deform", "ffd", "attachments")

# Fields that name the atlas region of an attachment, in priority order
NAME_FIELDS = ("path", "name", "image")


class AttachmentKind(Enum):
    """Whether an attachment is drawn from an atlas region."""
    TEXTURE = "texture"
    NON_TEXTURE = "non-texture"


@dataclass(frozen=True)
class AttachmentDeclaration:
    """An attachment declared by a skin for one slot."""
    skin: str
    slot: str
    key: str
    name: str
    kind: AttachmentKind
    raw: Any = None

    @property
    def is_texture(self) -> bool:
        return self.kind == AttachmentKind.TEXTURE


@dataclass(frozen=True)
class Reference:
    """One place in the document that refers to an attachment name."""
    name: str
    context: str


@dataclass(frozen=True)
class UndefinedReference:
    """An animation refers to an attachment no skin or slot declares."""
    attachment: str
    contexts: Tuple[str, ...]
    kind: str = UNDEFINED_ATTACHMENT_REFERENCE

    @property
    def message(self) -> str:
        return (
            f"Attachment '{self.attachment}' is referenced by animations but never "
            f"declared in a skin or slot default ({', '.join(self.contexts)})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "attachment": self.attachment,
            "contexts": list(self.contexts),
            "message": self.message,
        }


@dataclass(frozen=True)
class SkinScan:
    """Result of walking the skins subtree."""
    declarations: Tuple[AttachmentDeclaration, ...] = ()
    structure: Mapping = field(default_factory=lambda: MappingProxyType({}))

    @property
    def references(self) -> Tuple[Reference, ...]:
        return tuple(
            Reference(d.name, f"skin:{d.skin}.{d.slot}")
            for d in self.declarations if d.is_texture
        )

    @property
    def defined_names(self) -> FrozenSet[str]:
        names = set()
        for declaration in self.declarations:
            names.add(declaration.key)
            names.add(declaration.name)
        return frozenset(names)

    @property
    def non_texture_names(self) -> FrozenSet[str]:
        names = set()
        for declaration in self.declarations:
            if not declaration.is_texture:
                names.add(declaration.key)
                names.add(declaration.name)
        return frozenset(names)


@dataclass(frozen=True)
class DeclaredScan:
    """Result of the generic deep scan for name-like fields under skins."""
    references: Tuple[Reference, ...] = ()
    non_texture_names: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class ExtractionResult:
    """Everything the extractor learned about attachment requirements."""
    atlas_requirements: Tuple[str, ...]
    defined_attachments: Tuple[str, ...]
    requirements_map: Mapping
    skin_structure: Mapping
    errors: Tuple[UndefinedReference, ...]
    declarations: Tuple[AttachmentDeclaration, ...] = ()
    slot_names: FrozenSet[str] = frozenset()
    non_texture_names: FrozenSet[str] = frozenset()
    skin_textures: Mapping = field(default_factory=lambda: MappingProxyType({}))


def resolve_attachment_name(declaration: Any, key: Optional[str]) -> Optional[str]:
    """
    Name of the region an attachment declaration points at.

    An explicit ``path``, ``name`` or ``image`` wins over the declaration key.
    """
    if usable_name(declaration):
        return declaration
    if isinstance(declaration, Mapping):
        for field_name in NAME_FIELDS:
            value = declaration.get(field_name)
            if usable_name(value):
                return value
    return key if usable_name(key) else None


def classify_attachment(declaration: Any, non_texture_types: Iterable[str]) -> AttachmentKind:
    """Classify a declaration by its ``type`` discriminator."""
    if isinstance(declaration, Mapping):
        attachment_type = declaration.get("type")
        if isinstance(attachment_type, str) and attachment_type.lower() in non_texture_types:
            return AttachmentKind.NON_TEXTURE
    return AttachmentKind.TEXTURE


def iter_skins(skins: Any) -> Iterator[Tuple[str, Mapping, bool]]:
    """
    Yield ``(skin_name, attachment_root, root_is_skin)`` for every skin.

    Handles both the mapping form (skin name -> slots) and the list form
    (objects carrying ``name`` plus ``attachments``/``slots`` or the slots
    themselves).
    """
    if isinstance(skins, Mapping):
        entries = [(name, content) for name, content in skins.items()]
    elif is_sequence(skins):
        entries = []
        for content in skins:
            if not isinstance(content, Mapping):
                continue
            name = content.get("name") or content.get("skin")
            entries.append((name if usable_name(name) else "default", content))
    else:
        return

    for name, content in entries:
        if not isinstance(content, Mapping):
            continue
        for root_key in ("attachments", "slots"):
            root = content.get(root_key)
            if isinstance(root, Mapping):
                yield str(name) or "default", root, False
                break
        else:
            yield str(name) or "default", content, is_sequence(skins)


def iter_slot_attachments(value: Any) -> Iterator[Tuple[str, Any]]:
    """Yield ``(attachment_key, declaration)`` pairs of one skin slot."""
    if isinstance(value, Mapping):
        for key, declaration in value.items():
            if usable_name(key):
                yield key, declaration
    elif is_sequence(value):
        for declaration in value:
            key = resolve_attachment_name(declaration, None)
            if key is not None:
                yield key, declaration
    elif usable_name(value):
        yield value, value


def iter_slots(slots: Any) -> Iterator[Tuple[str, Mapping]]:
    """Yield ``(slot_name, slot)`` for array-of-objects or mapping slots."""
    if is_sequence(slots):
        for slot in slots:
            if isinstance(slot, Mapping):
                name = slot.get("name")
                yield (name if usable_name(name) else "unknown"), slot
    elif isinstance(slots, Mapping):
        for key, slot in slots.items():
            if isinstance(slot, Mapping):
                name = slot.get("name")
                yield (name if usable_name(name) else str(key)), slot


def index_slot_names(slots: Any) -> FrozenSet[str]:
    """Lower-cased names of every declared slot."""
    names = set()
    if is_sequence(slots):
        for slot in slots:
            if isinstance(slot, Mapping) and usable_name(slot.get("name")):
                names.add(slot["name"].lower())
    elif isinstance(slots, Mapping):
        for key, slot in slots.items():
            if isinstance(slot, Mapping) and usable_name(slot.get("name")):
                names.add(slot["name"].lower())
            elif usable_name(key):
                names.add(key.lower())
    return frozenset(names)


def scan_skins(skins: Any, non_texture_types: Iterable[str]) -> SkinScan:
    """Walk skin -> slot -> attachment and classify every declaration."""
    non_texture_types = frozenset(t.lower() for t in non_texture_types)
    declarations: List[AttachmentDeclaration] = []
    structure: Dict[str, Dict[str, List[str]]] = {}

    for skin_name, root, root_is_skin in iter_skins(skins):
        skin_entry = structure.setdefault(skin_name, {})
        for slot_name, slot_value in root.items():
            if root_is_skin and slot_name in ("name", "skin"):
                continue
            slot_entry = skin_entry.setdefault(str(slot_name), [])
            for key, raw in iter_slot_attachments(slot_value):
                name = resolve_attachment_name(raw, key) or key
                declarations.append(AttachmentDeclaration(
                    skin=skin_name,
                    slot=str(slot_name),
                    key=key,
                    name=name,
                    kind=classify_attachment(raw, non_texture_types),
                    raw=raw,
                ))
                slot_entry.append(key)

    frozen_structure = MappingProxyType({
        skin: MappingProxyType({slot: tuple(keys) for slot, keys in slots.items()})
        for skin, slots in structure.items()
    })
    return SkinScan(declarations=tuple(declarations), structure=frozen_structure)


def scan_slot_defaults(slots: Any) -> Tuple[Reference, ...]:
    """References made by slots' setup-pose ``attachment`` fields."""
    references = []
    for slot_name, slot in iter_slots(slots):
        value = slot.get("attachment")
        if isinstance(value, Mapping) or usable_name(value):
            name = resolve_attachment_name(value, None)
            if name is not None:
                references.append(Reference(name, f"slot:{slot_name}_default"))
    return tuple(references)


def scan_animation_tracks(animations: Iterable[Any]) -> Tuple[Reference, ...]:
    """References made by attachment keyframes and deform timelines."""
    references = []
    for animation in animations:
        if not isinstance(animation, Mapping) or not usable_name(animation.get("name")):
            continue
        animation_name = animation["name"]

        slot_tracks = animation.get("slots")
        if isinstance(slot_tracks, Mapping):
            for slot_name, track in slot_tracks.items():
                if not isinstance(track, Mapping):
                    continue
                keyframes = track.get("attachment")
                if not is_sequence(keyframes):
                    continue
                for keyframe in keyframes:
                    # A keyframe naming null hides the slot
                    name = keyframe.get("name") if isinstance(keyframe, Mapping) else keyframe
                    if usable_name(name):
                        references.append(Reference(name, f"animation:{animation_name}.{slot_name}"))

        for timeline_key in DEFORM_TIMELINE_KEYS:
            timeline = animation.get(timeline_key)
            if not isinstance(timeline, Mapping):
                continue
            for skin_name, skin_slots in timeline.items():
                if not isinstance(skin_slots, Mapping):
                    continue
                for slot_name, slot_attachments in skin_slots.items():
                    if not isinstance(slot_attachments, Mapping):
                        continue
                    for attachment_name in slot_attachments:
                        if usable_name(attachment_name):
                            references.append(Reference(
                                attachment_name,
                                f"deform:{animation_name}.{skin_name}.{slot_name}",
                            ))
    return tuple(references)


def scan_declared_fields(skins: Any, non_texture_types: Iterable[str],
                         max_depth: int = DEFAULT_MAX_DEPTH) -> DeclaredScan:
    """
    Deep scan of the skins subtree for objects exposing a name-like field.

    Picks up attachment shapes the targeted skin walk does not enumerate,
    such as deeply nested mesh variants.
    """
    non_texture_types = frozenset(t.lower() for t in non_texture_types)
    references: List[Reference] = []
    non_texture = set()

    def visit(node: Any, path: Tuple[PathSegment, ...], key: PathSegment, depth: int) -> bool:
        if not isinstance(node, Mapping):
            return True
        if not any(usable_name(node.get(f)) for f in NAME_FIELDS):
            return True
        name = resolve_attachment_name(node, None)
        parent_key = _nearest_key(path, key)
        if classify_attachment(node, non_texture_types) == AttachmentKind.NON_TEXTURE:
            non_texture.add(name)
            non_texture.add(parent_key)
        else:
            references.append(Reference(name, f"declared:{parent_key}"))
        return True

    for _, root, _ in iter_skins(skins):
        walk_tree(root, visit, max_depth)

    return DeclaredScan(references=tuple(references), non_texture_names=frozenset(non_texture))


def _nearest_key(path: Tuple[PathSegment, ...], key: PathSegment) -> str:
    if isinstance(key, str):
        return key
    for segment in reversed(path):
        if isinstance(segment, str):
            return segment
    return str(key)


def merge_references(*groups: Iterable[Reference]) -> Mapping:
    """
    Merge reference groups into name -> ordered unique contexts.

    Names with no reference never appear, so no context tuple is empty.
    """
    merged: Dict[str, Dict[str, None]] = {}
    for group in groups:
        for reference in group:
            if not usable_name(reference.name):
                continue
            merged.setdefault(reference.name, {})[reference.context] = None
    return MappingProxyType({
        name: tuple(merged[name]) for name in sorted(merged)
    })


class AttachmentExtractor:
    """Builds attachment requirements for a normalized document."""

    def __init__(self, config: Optional[ValidatorConfig] = None):
        """Initialize extractor with configuration."""
        self.config = config or ValidatorConfig()
        self.non_texture_types = frozenset(
            t.lower() for t in (self.config.non_texture_types or DEFAULT_NON_TEXTURE_TYPES)
        )

    def extract(self, view: CanonicalView) -> ExtractionResult:
        """
        Extract attachment requirements from a canonical view.

        Args:
            view: Canonical view produced by the normalizer

        Returns:
            ExtractionResult with requirements, definitions and errors
        """
        slot_names = index_slot_names(view.slots)
        skin_scan = scan_skins(view.skins, self.non_texture_types)
        slot_defaults = scan_slot_defaults(view.slots)
        animation_refs = scan_animation_tracks(view.animations)
        declared_scan = scan_declared_fields(view.skins, self.non_texture_types, self.config.max_walk_depth)

        requirements = merge_references(
            skin_scan.references, slot_defaults, animation_refs, declared_scan.references
        )
        non_texture = skin_scan.non_texture_names | declared_scan.non_texture_names

        def is_required(name: str) -> bool:
            return self._is_atlas_requirement(name, slot_names, non_texture)

        atlas_requirements = tuple(sorted(name for name in requirements if is_required(name)))

        defined = skin_scan.defined_names | frozenset(ref.name for ref in slot_defaults)
        errors = tuple(
            UndefinedReference(name, requirements[name])
            for name in atlas_requirements
            if name not in defined
            and any(context.startswith("animation:") for context in requirements[name])
        )

        skin_textures: Dict[str, List[Tuple[str, str]]] = {skin: [] for skin in skin_scan.structure}
        for declaration in skin_scan.declarations:
            if declaration.is_texture and is_required(declaration.name):
                entry = (declaration.slot, declaration.name)
                if entry not in skin_textures[declaration.skin]:
                    skin_textures[declaration.skin].append(entry)

        logger.debug(
            f"Attachment extraction complete: {len(skin_scan.declarations)} declared, "
            f"{len(atlas_requirements)} require atlas regions, {len(errors)} undefined references"
        )

        return ExtractionResult(
            atlas_requirements=atlas_requirements,
            defined_attachments=tuple(sorted(skin_scan.defined_names)),
            requirements_map=requirements,
            skin_structure=skin_scan.structure,
            errors=errors,
            declarations=skin_scan.declarations,
            slot_names=slot_names,
            non_texture_names=non_texture,
            skin_textures=MappingProxyType({
                skin: tuple(entries) for skin, entries in skin_textures.items()
            }),
        )

    def _is_atlas_requirement(self, name: str, slot_names: FrozenSet[str],
                              non_texture: FrozenSet[str]) -> bool:
        """Check if a required name must resolve to an atlas region."""
        if not usable_name(name) or name.strip().lower() == "null":
            return False
        prefix = self.config.empty_marker_prefix
        if prefix and name.startswith(prefix):
            return False
        if name.lower() in slot_names:
            return False
        return name not in non_texture
