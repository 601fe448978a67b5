"""
Asset sources for the validator.
Handles reading skeleton documents, atlas descriptors and page images.
"""

from .base import (
    AssetSource, AtlasFile, SourceError, SourceNotFoundError, AmbiguousSourceError,
    read_text
)
from .local import LocalFileSource, DirectorySource

__all__ = [
    # Base classes
    "AssetSource",
    "AtlasFile",
    "read_text",

    # Exceptions
    "SourceError",
    "SourceNotFoundError",
    "AmbiguousSourceError",

    # Concrete sources
    "LocalFileSource",
    "DirectorySource",
]
