"""
Cross-referencing of required attachments against atlas regions.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import AbstractSet, Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MissingAttachment:
    """A texture attachment of a skin with no matching atlas region."""
    skin: str
    slot: str
    attachment: str

    def to_dict(self) -> Dict[str, str]:
        return {"skin": self.skin, "slot": self.slot, "attachment": self.attachment}


def cross_reference(atlas_requirements: Iterable[str],
                    region_index: AbstractSet[str]) -> Tuple[str, ...]:
    """
    Names whose lower-cased form is absent from the region index.

    Args:
        atlas_requirements: Attachment names that must resolve to a region
        region_index: Lower-cased atlas region names

    Returns:
        Missing names, in requirement order
    """
    missing = tuple(name for name in atlas_requirements if name.lower() not in region_index)
    logger.debug(f"Cross-reference complete: {len(missing)} missing")
    return missing


def missing_by_skin(skin_textures: Mapping,
                    region_index: AbstractSet[str]) -> Tuple[MissingAttachment, ...]:
    """
    Per-skin missing attachments.

    Each skin is checked on its own declarations, whether or not another skin
    shares the same attachment name.

    Args:
        skin_textures: Skin name -> sequence of (slot, attachment) pairs
        region_index: Lower-cased atlas region names

    Returns:
        MissingAttachment entries, grouped by skin
    """
    entries: List[MissingAttachment] = []
    for skin, pairs in skin_textures.items():
        for slot, attachment in pairs:
            if attachment.lower() not in region_index:
                entries.append(MissingAttachment(skin=skin, slot=slot, attachment=attachment))
    return tuple(entries)


def group_missing(entries: Iterable[MissingAttachment], skins: Iterable[str] = ()) -> Mapping:
    """Skin name -> unique missing attachment names; listed skins always appear."""
    grouped: Dict[str, Dict[str, None]] = {skin: {} for skin in skins}
    for entry in entries:
        grouped.setdefault(entry.skin, {})[entry.attachment] = None
    return MappingProxyType({skin: tuple(names) for skin, names in grouped.items()})
