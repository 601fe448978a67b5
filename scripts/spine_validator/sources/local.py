"""
Sources reading skeleton exports from the local file system.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from .base import AssetSource, AtlasFile, SourceNotFoundError, AmbiguousSourceError, read_text
from ..config import ValidatorConfig

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class LocalFileSource(AssetSource):
    """Source built from explicitly selected files."""

    def __init__(self, document_path: PathLike, atlas_paths: Iterable[PathLike] = (),
                 image_paths: Iterable[PathLike] = ()):
        """
        Initialize source with file paths.

        Args:
            document_path: Skeleton-definition JSON file
            atlas_paths: Atlas descriptor files
            image_paths: Atlas page image files
        """
        self.document_path = Path(document_path)
        self.atlas_paths = [Path(p) for p in atlas_paths]
        self.image_paths = [Path(p) for p in image_paths]

    @property
    def document_name(self) -> str:
        return self.document_path.name

    def read_document(self) -> str:
        return read_text(self.document_path)

    def read_atlases(self) -> List[AtlasFile]:
        return [AtlasFile(name=path.name, text=read_text(path)) for path in self.atlas_paths]

    def list_images(self) -> Dict[str, Path]:
        images = {}
        for path in self.image_paths:
            if not path.is_file():
                logger.warning(f"Image file not found: {path}")
                continue
            images[path.name] = path
        return images

    @classmethod
    def beside_document(cls, document_path: PathLike,
                        config: Optional[ValidatorConfig] = None) -> "LocalFileSource":
        """Create a source using the atlases and images next to a document."""
        config = config or ValidatorConfig()
        document_path = Path(document_path)
        if not document_path.is_file():
            raise SourceNotFoundError(f"File not found: {document_path}")
        directory = document_path.parent
        return cls(
            document_path,
            _find_files(directory, config.atlas_extensions),
            _find_files(directory, config.image_extensions),
        )


class DirectorySource(AssetSource):
    """Source discovering a single export inside a directory."""

    def __init__(self, directory: PathLike, config: Optional[ValidatorConfig] = None):
        """
        Initialize source with a directory.

        Raises:
            SourceNotFoundError: If the directory does not exist
        """
        self.directory = Path(directory)
        self.config = config or ValidatorConfig()

        if not self.directory.is_dir():
            raise SourceNotFoundError(f"Directory not found: {self.directory}")

    @property
    def document_path(self) -> Path:
        """
        The only JSON document in the directory.

        Raises:
            AmbiguousSourceError: If there is no document or more than one
        """
        documents = _find_files(self.directory, [".json"])
        if not documents:
            raise AmbiguousSourceError(f"No skeleton JSON found in {self.directory}")
        if len(documents) > 1:
            names = ", ".join(p.name for p in documents)
            raise AmbiguousSourceError(f"Several JSON files found in {self.directory}: {names}")
        return documents[0]

    @property
    def document_name(self) -> str:
        return self.document_path.name

    def read_document(self) -> str:
        return read_text(self.document_path)

    def read_atlases(self) -> List[AtlasFile]:
        return [
            AtlasFile(name=path.name, text=read_text(path))
            for path in _find_files(self.directory, self.config.atlas_extensions)
        ]

    def list_images(self) -> Dict[str, Path]:
        return {path.name: path for path in _find_files(self.directory, self.config.image_extensions)}


def _find_files(directory: Path, extensions: Sequence[str]) -> List[Path]:
    """Files directly inside directory whose name ends with one of extensions."""
    suffixes = tuple(ext.lower() for ext in extensions)
    return sorted(
        path for path in directory.iterdir()
        if path.is_file() and path.name.lower().endswith(suffixes)
    )
