"""
Image utilities for atlas page inspection.
"""

from pathlib import Path
from typing import Optional, Tuple, Union
from PIL import Image, UnidentifiedImageError
import io


class ImageUtils:
    """Utility class for reading atlas page image properties."""

    @staticmethod
    def load_image(data: Union[bytes, str, Path, Image.Image]) -> Image.Image:
        """
        Load image from various sources.

        Pixel data is decoded lazily by Pillow, so opening an image only
        reads its header.

        Args:
            data: Image data as bytes, file path, or PIL Image

        Returns:
            PIL Image object

        Raises:
            ValueError: If data cannot be loaded as image
        """
        if isinstance(data, Image.Image):
            return data
        elif isinstance(data, bytes):
            try:
                return Image.open(io.BytesIO(data))
            except (UnidentifiedImageError, OSError) as e:
                raise ValueError(f"Cannot load image from bytes: {e}")
        elif isinstance(data, (str, Path)):
            try:
                return Image.open(data)
            except (UnidentifiedImageError, OSError) as e:
                raise ValueError(f"Cannot load image from path '{data}': {e}")
        else:
            raise ValueError(f"Unsupported image data type: {type(data)}")

    @staticmethod
    def read_size(path: Union[str, Path]) -> Tuple[int, int]:
        """Read pixel dimensions of an image file without decoding pixels."""
        with ImageUtils.load_image(path) as image:
            return image.size

    @staticmethod
    def parse_size(value: Optional[str]) -> Optional[Tuple[int, int]]:
        """Parse an atlas ``size`` property such as ``"1024, 512"``."""
        if not value:
            return None
        parts = [p.strip() for p in value.split(',')]
        if len(parts) != 2:
            return None
        try:
            return int(parts[0]), int(parts[1])
        except ValueError:
            return None
