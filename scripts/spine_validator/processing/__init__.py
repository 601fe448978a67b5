"""
Validation stages: document normalization, animation collection, attachment
extraction, atlas parsing, cross-referencing and report assembly.
"""

from .normalizer import (
    DocumentVariant,
    CanonicalView,
    InvalidDocumentError,
    load_document,
    normalize,
)
from .animations import AnimationCollector, collect_animations
from .attachments import (
    AttachmentExtractor,
    AttachmentKind,
    AttachmentDeclaration,
    ExtractionResult,
    UndefinedReference,
)
from .atlas import AtlasParser, AtlasIndex, AtlasPage, AtlasParseError, build_region_index
from .crossref import MissingAttachment, cross_reference, missing_by_skin
from .report import ValidationReport, ReportStats, assemble_report

__all__ = [
    "DocumentVariant",
    "CanonicalView",
    "InvalidDocumentError",
    "load_document",
    "normalize",
    "AnimationCollector",
    "collect_animations",
    "AttachmentExtractor",
    "AttachmentKind",
    "AttachmentDeclaration",
    "ExtractionResult",
    "UndefinedReference",
    "AtlasParser",
    "AtlasIndex",
    "AtlasPage",
    "AtlasParseError",
    "build_region_index",
    "MissingAttachment",
    "cross_reference",
    "missing_by_skin",
    "ValidationReport",
    "ReportStats",
    "assemble_report",
]
