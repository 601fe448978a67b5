"""
Texture atlas descriptor parsing and region index construction.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from ..sources.base import AtlasFile
from ..utils.image import ImageUtils

logger = logging.getLogger(__name__)


@dataclass
class AtlasRegion:
    """A named sub-image of an atlas page."""
    name: str
    page: str
    properties: Dict[str, str] = field(default_factory=dict)


@dataclass
class AtlasPage:
    """One packed texture sheet and the regions it holds."""
    name: str
    properties: Dict[str, str] = field(default_factory=dict)
    regions: List[AtlasRegion] = field(default_factory=list)

    @property
    def declared_size(self) -> Optional[Tuple[int, int]]:
        """Page size as declared by the descriptor."""
        return ImageUtils.parse_size(self.properties.get("size"))


@dataclass
class AtlasDescriptor:
    """Parsed contents of one atlas descriptor file."""
    source: str
    pages: List[AtlasPage] = field(default_factory=list)

    @property
    def regions(self) -> List[AtlasRegion]:
        return [region for page in self.pages for region in page.regions]


@dataclass(frozen=True)
class AtlasIndex:
    """Merged, lower-cased region names from every parsed descriptor."""
    regions: frozenset = frozenset()
    pages: Tuple[AtlasPage, ...] = ()
    warnings: Tuple[str, ...] = ()
    descriptor_count: int = 0
    region_counts: Tuple[int, ...] = ()

    def __contains__(self, name: str) -> bool:
        return name.lower() in self.regions

    def __len__(self) -> int:
        return len(self.regions)


class AtlasParser:
    """Parses the line-oriented atlas descriptor format."""

    def parse(self, text: str, source: str = "<atlas>") -> AtlasDescriptor:
        """
        Parse atlas descriptor text.

        A page starts at the first non-blank line and after each blank line.
        ``key: value`` lines belong to the current region, or to the page when
        no region has been read yet. Every other line names a region.

        Args:
            text: Descriptor text
            source: Name used in error messages

        Returns:
            AtlasDescriptor with pages and regions

        Raises:
            AtlasParseError: If the text has no page or a property precedes
                every page
        """
        if text.startswith('\ufeff'):
            text = text[1:]

        descriptor = AtlasDescriptor(source=source)
        page: Optional[AtlasPage] = None
        region: Optional[AtlasRegion] = None
        expecting_page = True

        for line_number, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line:
                expecting_page = True
                continue

            if ':' in line:
                if page is None:
                    raise AtlasParseError(
                        f"{source}:{line_number}: property '{line}' appears before any page"
                    )
                key, value = line.split(':', 1)
                target = region.properties if region is not None else page.properties
                target[key.strip()] = value.strip()
                continue

            if expecting_page:
                page = AtlasPage(name=line)
                descriptor.pages.append(page)
                region = None
                expecting_page = False
            else:
                region = AtlasRegion(name=line, page=page.name)
                page.regions.append(region)

        if not descriptor.pages:
            raise AtlasParseError(f"{source}: atlas contains no pages")

        return descriptor


def check_page_images(pages: Iterable[AtlasPage], images: Dict[str, Path]) -> List[str]:
    """
    Check that every page image was supplied and matches its declared size.

    Args:
        pages: Atlas pages to check
        images: Supplied image files keyed by file name

    Returns:
        Warning messages (empty if every page image is present and consistent)
    """
    warnings = []
    for page in pages:
        image_path = images.get(page.name) or images.get(Path(page.name).name)
        if image_path is None:
            warnings.append(f"Atlas page image not supplied: {page.name}")
            continue

        try:
            actual_size = ImageUtils.read_size(image_path)
        except ValueError as e:
            warnings.append(f"Could not read atlas page image {page.name}: {e}")
            continue

        declared = page.declared_size
        if declared is not None and declared != actual_size:
            warnings.append(
                f"Atlas page image {page.name} is {actual_size[0]}x{actual_size[1]} "
                f"but atlas declares {declared[0]}x{declared[1]}"
            )
    return warnings


def build_region_index(atlas_files: Iterable[AtlasFile],
                       images: Optional[Dict[str, Path]] = None,
                       check_images: bool = True) -> AtlasIndex:
    """
    Parse atlas descriptors and merge their regions into one index.

    A descriptor that fails to parse contributes no regions; processing
    continues with the rest and the failure is reported as a warning.

    Args:
        atlas_files: Descriptor files to parse
        images: Supplied image files keyed by file name
        check_images: Whether to verify page images

    Returns:
        AtlasIndex with lower-cased region names
    """
    parser = AtlasParser()
    regions = set()
    pages: List[AtlasPage] = []
    warnings: List[str] = []
    region_counts: List[int] = []

    for atlas_file in atlas_files:
        try:
            descriptor = parser.parse(atlas_file.text, atlas_file.name)
        except AtlasParseError as e:
            logger.warning(f"Could not parse atlas - {e}")
            warnings.append(f"Could not parse atlas {atlas_file.name}: {e}")
            continue

        region_counts.append(len(descriptor.regions))
        pages.extend(descriptor.pages)
        for region in descriptor.regions:
            if region.name:
                regions.add(region.name.lower())
        logger.debug(f"Parsed {atlas_file.name}: {len(descriptor.pages)} pages")

    if check_images and images is not None:
        for warning in check_page_images(pages, images):
            logger.warning(warning)
            warnings.append(warning)

    logger.debug(f"Merged {len(region_counts)} descriptors into {len(regions)} regions")

    return AtlasIndex(
        regions=frozenset(regions),
        pages=tuple(pages),
        warnings=tuple(warnings),
        descriptor_count=len(region_counts),
        region_counts=tuple(region_counts),
    )


class AtlasParseError(Exception):
    """Exception raised when an atlas descriptor cannot be parsed."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
