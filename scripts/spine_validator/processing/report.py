"""
Validation report assembly and serialization.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Tuple

from .normalizer import DocumentVariant
from .attachments import ExtractionResult, UndefinedReference
from .crossref import MissingAttachment, group_missing


@dataclass(frozen=True)
class ReportStats:
    """Summary counters of a validation run."""
    total_attachments: int = 0
    total_skins: int = 0
    total_errors: int = 0
    total_warnings: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalAttachments": self.total_attachments,
            "totalSkins": self.total_skins,
            "totalErrors": self.total_errors,
            "totalWarnings": self.total_warnings,
        }


@dataclass(frozen=True)
class ValidationReport:
    """Immutable result of validating a document against its atlases."""
    document_type: DocumentVariant
    defined_attachments: Tuple[str, ...] = ()
    atlas_requirements: Tuple[str, ...] = ()
    requirements_map: Mapping = field(default_factory=lambda: MappingProxyType({}))
    skin_structure: Mapping = field(default_factory=lambda: MappingProxyType({}))
    missing_attachments: Tuple[str, ...] = ()
    missing_entries: Tuple[MissingAttachment, ...] = ()
    errors: Tuple[UndefinedReference, ...] = ()
    animations: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    skin_texture_counts: Mapping = field(default_factory=lambda: MappingProxyType({}))
    stats: ReportStats = field(default_factory=ReportStats)

    @property
    def is_complete(self) -> bool:
        """Check if every required attachment resolved to an atlas region."""
        return len(self.missing_attachments) == 0

    @property
    def is_valid(self) -> bool:
        """Check if the document has no missing assets and no structural errors."""
        return self.is_complete and len(self.errors) == 0

    @property
    def skins(self) -> Tuple[str, ...]:
        return tuple(self.skin_structure)

    @property
    def missing_by_skin(self) -> Mapping:
        """Skin name -> missing attachment names (every skin listed)."""
        return group_missing(self.missing_entries, self.skin_structure)

    def skin_has_missing(self, skin: str) -> bool:
        return len(self.missing_by_skin.get(skin, ())) > 0

    def can_play_with_skin(self, skin: str) -> bool:
        """
        Check if animations are expected to display with a skin.

        True for skins the report does not know, skins with no texture
        attachments, and skins where at least one texture attachment resolved.
        """
        total = self.skin_texture_counts.get(skin)
        if not total:
            return True
        missing = sum(1 for entry in self.missing_entries if entry.skin == skin)
        return total - missing > 0

    def default_skin_name(self) -> str:
        """The skin a viewer should start with."""
        if "default" in self.skin_structure or not self.skin_structure:
            return "default"
        return next(iter(self.skin_structure))

    def format_missing_details(self) -> List[str]:
        """Human-readable ``skin.slot: attachment`` lines."""
        return [f"{m.skin}.{m.slot}: {m.attachment}" for m in self.missing_entries]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the report's public field names."""
        return {
            "documentType": self.document_type.value,
            "definedAttachments": list(self.defined_attachments),
            "atlasRequirements": list(self.atlas_requirements),
            "requirementsMap": {name: list(ctx) for name, ctx in self.requirements_map.items()},
            "skinStructure": {
                skin: {slot: list(keys) for slot, keys in slots.items()}
                for skin, slots in self.skin_structure.items()
            },
            "missingAttachments": list(self.missing_attachments),
            "skinMissing": {skin: list(names) for skin, names in self.missing_by_skin.items()},
            "errors": [error.to_dict() for error in self.errors],
            "warnings": list(self.warnings),
            "animations": list(self.animations),
            "stats": self.stats.to_dict(),
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def assemble_report(document_type: DocumentVariant,
                    animations: Iterable[str],
                    extraction: ExtractionResult,
                    missing_attachments: Iterable[str],
                    missing_entries: Iterable[MissingAttachment] = (),
                    warnings: Iterable[str] = ()) -> ValidationReport:
    """
    Merge every stage's output into one report.

    Args:
        document_type: Variant detected by the normalizer
        animations: Animation names from the collector
        extraction: Attachment extractor output
        missing_attachments: Cross-referencer output for atlas requirements
        missing_entries: Cross-referencer output per skin
        warnings: Informational notes gathered during the run

    Returns:
        ValidationReport
    """
    warnings = tuple(warnings)
    errors = tuple(extraction.errors)

    stats = ReportStats(
        total_attachments=len(extraction.defined_attachments),
        total_skins=len(extraction.skin_structure),
        total_errors=len(errors),
        total_warnings=len(warnings),
    )

    return ValidationReport(
        document_type=document_type,
        defined_attachments=tuple(extraction.defined_attachments),
        atlas_requirements=tuple(extraction.atlas_requirements),
        requirements_map=extraction.requirements_map,
        skin_structure=extraction.skin_structure,
        missing_attachments=tuple(missing_attachments),
        missing_entries=tuple(missing_entries),
        errors=errors,
        animations=tuple(animations),
        warnings=warnings,
        skin_texture_counts=MappingProxyType({
            skin: len(pairs) for skin, pairs in extraction.skin_textures.items()
        }),
        stats=stats,
    )
