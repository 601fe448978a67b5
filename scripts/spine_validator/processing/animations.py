"""
Animation name discovery over a normalized document.
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Tuple

from .normalizer import CanonicalView, DocumentVariant, is_sequence, usable_name
from ..utils.tree import DEFAULT_MAX_DEPTH, PathSegment, format_path, walk_tree

logger = logging.getLogger(__name__)


class AnimationCollector:
    """Collects the distinct animation names a document defines."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        """Initialize collector with the fallback walk depth limit."""
        self.max_depth = max_depth

    def collect(self, view: CanonicalView) -> Tuple[str, ...]:
        """
        Collect animation names, first occurrence first.

        Args:
            view: Canonical view produced by the normalizer

        Returns:
            Tuple of unique animation names
        """
        if view.variant in (DocumentVariant.STANDARD, DocumentVariant.LEGACY):
            names = self._from_sequence(view.animations)
        elif view.variant == DocumentVariant.OBJECT_ANIMATIONS:
            names = self._from_records(view.animations)
        elif view.variant == DocumentVariant.COMPLEX:
            names = self._from_candidate_locations(view)
        else:
            logger.warning("Unknown document format, trying fallback animation extraction")
            names = self._from_tree(view.data)

        unique = tuple(dict.fromkeys(names))
        logger.debug(f"Collected {len(unique)} animation names from {view.variant.value} document")
        return unique

    def _from_sequence(self, entries: Iterable[Any]) -> List[str]:
        names = []
        for entry in entries:
            name = _entry_name(entry)
            if name is not None:
                names.append(name)
        return names

    def _from_records(self, entries: Iterable[Any]) -> List[str]:
        return [
            entry["name"] for entry in entries
            if isinstance(entry, Mapping) and usable_name(entry.get("name"))
        ]

    def _from_candidate_locations(self, view: CanonicalView) -> List[str]:
        """Probe every place a complex export may keep its animations."""
        data = view.get("data")
        skeleton = view.get("skeleton")
        locations = [
            view.animations,
            view.get("animation"),
            data.get("animations") if isinstance(data, Mapping) else None,
            skeleton.get("animations") if isinstance(skeleton, Mapping) else None,
        ]

        names = []
        for location in locations:
            if is_sequence(location):
                names.extend(self._from_sequence(location))
            elif isinstance(location, Mapping):
                for key, entry in location.items():
                    if entry is None:
                        continue
                    own_name = entry.get("name") if isinstance(entry, Mapping) else None
                    if usable_name(own_name):
                        names.append(own_name)
                    elif usable_name(key):
                        names.append(key)
        return names

    def _from_tree(self, root: Any) -> List[str]:
        """
        Fallback discovery over the whole view.

        Any object exposing ``name`` or ``animation`` counts as an animation
        and is not descended into.
        """
        names: List[str] = []

        def visit(node: Any, path: Tuple[PathSegment, ...], key: PathSegment, depth: int) -> bool:
            if not isinstance(node, Mapping):
                return True
            label = node.get("name") or node.get("animation")
            if not label:
                return True
            if usable_name(label):
                names.append(label)
            elif isinstance(key, int):
                names.append(f"anim_{format_path(path)}_{key}")
            else:
                names.append(str(key))
            return False

        walk_tree(root, visit, self.max_depth)
        return names


def _entry_name(entry: Any) -> Optional[str]:
    if usable_name(entry):
        return entry
    if isinstance(entry, Mapping) and usable_name(entry.get("name")):
        return entry["name"]
    return None


def collect_animations(view: CanonicalView, max_depth: int = DEFAULT_MAX_DEPTH) -> Tuple[str, ...]:
    """Convenience wrapper around AnimationCollector.collect."""
    return AnimationCollector(max_depth).collect(view)
