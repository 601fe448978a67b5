"""
Utility modules for tree traversal and atlas page image inspection.
"""

from .image import ImageUtils
from .tree import walk_tree, format_path, iter_children

__all__ = [
    "ImageUtils",
    "walk_tree",
    "format_path",
    "iter_children",
]
