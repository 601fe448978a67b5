"""
Skeleton Asset Validator

Checks a skeletal-animation export (skeleton JSON, atlas descriptors and page
images) before rendering: every attachment the skeleton needs must resolve to
a region of the supplied atlases.
"""

__version__ = "0.1.0"
__author__ = "Spine Validator Development Team"

from .config import ValidatorConfig
from .sources.base import AssetSource, AtlasFile
from .processing.normalizer import DocumentVariant, InvalidDocumentError, normalize
from .processing.report import ValidationReport
from .pipeline import ValidationPipeline, validate_document

__all__ = [
    "ValidatorConfig",
    "AssetSource",
    "AtlasFile",
    "DocumentVariant",
    "InvalidDocumentError",
    "normalize",
    "ValidationReport",
    "ValidationPipeline",
    "validate_document",
]
