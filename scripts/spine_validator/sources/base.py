"""
Abstract base classes for asset sources.
Defines the interface that every source of skeleton documents, atlas
descriptors and page images must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Union


@dataclass(frozen=True)
class AtlasFile:
    """Raw text of one atlas descriptor file."""
    name: str
    text: str


class AssetSource(ABC):
    """Abstract base class for asset sources."""

    @property
    @abstractmethod
    def document_name(self) -> str:
        """Display name of the skeleton-definition document."""
        pass

    @abstractmethod
    def read_document(self) -> str:
        """
        Read the skeleton-definition document text.

        Returns:
            Decoded document text

        Raises:
            SourceNotFoundError: If the document cannot be found
            SourceError: If the document cannot be read
        """
        pass

    @abstractmethod
    def read_atlases(self) -> List[AtlasFile]:
        """
        Read every atlas descriptor of this source.

        Returns:
            List of AtlasFile objects, in a stable order

        Raises:
            SourceNotFoundError: If a descriptor cannot be found
        """
        pass

    @abstractmethod
    def list_images(self) -> Dict[str, Path]:
        """
        List the image files of this source.

        Returns:
            Dictionary mapping file names to paths
        """
        pass

    def describe(self) -> Dict[str, int]:
        """Summarize how many files the source provides."""
        return {
            "atlases": len(self.read_atlases()),
            "images": len(self.list_images()),
        }


def read_text(path: Union[str, Path]) -> str:
    """
    Read a UTF-8 text file, tolerating a byte-order mark.

    Raises:
        SourceNotFoundError: If the file does not exist
        SourceError: If the file cannot be read or decoded
    """
    path = Path(path)
    if not path.is_file():
        raise SourceNotFoundError(f"File not found: {path}")
    try:
        return path.read_text(encoding='utf-8-sig')
    except (OSError, UnicodeDecodeError) as e:
        raise SourceError(f"Failed to read {path}: {e}")


class SourceError(Exception):
    """Base exception for source errors."""
    pass


class SourceNotFoundError(SourceError):
    """Raised when a requested file or directory cannot be found."""
    pass


class AmbiguousSourceError(SourceError):
    """Raised when a directory does not hold exactly one document."""
    pass
