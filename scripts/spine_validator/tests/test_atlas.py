"""
Tests for atlas descriptor parsing and region indexing.
"""

import tempfile
import unittest
from pathlib import Path
from PIL import Image

from ..processing.atlas import AtlasParser, AtlasParseError, build_region_index, check_page_images
from ..sources.base import AtlasFile
from ..utils.image import ImageUtils


LEGACY_ATLAS = """
hero.png
size: 64,32
format: RGBA8888
filter: Linear,Linear
repeat: none
Hero_Head
  rotate: false
  xy: 0, 0
  size: 32, 32
  orig: 32, 32
  offset: 0, 0
  index: -1
torso
  rotate: false
  xy: 32, 0
  size: 32, 32
  orig: 32, 32
  offset: 0, 0
  index: -1
"""

MODERN_ATLAS = """hero.png
size:64,32
filter:Linear,Linear
arm
bounds:0,0,16,16
leg
bounds:16,0,16,16

hero2.png
size:32,32
tail
bounds:0,0,32,32
"""


class TestAtlasParser(unittest.TestCase):
    """Test cases for AtlasParser."""

    def setUp(self):
        self.parser = AtlasParser()

    def test_parse_legacy_format(self):
        descriptor = self.parser.parse(LEGACY_ATLAS, "hero.atlas")

        self.assertEqual(len(descriptor.pages), 1)
        page = descriptor.pages[0]
        self.assertEqual(page.name, "hero.png")
        self.assertEqual(page.declared_size, (64, 32))
        self.assertEqual([r.name for r in descriptor.regions], ["Hero_Head", "torso"])
        self.assertEqual(descriptor.regions[1].properties["xy"], "32, 0")

    def test_parse_multiple_pages(self):
        descriptor = self.parser.parse(MODERN_ATLAS)

        self.assertEqual([p.name for p in descriptor.pages], ["hero.png", "hero2.png"])
        self.assertEqual([r.name for r in descriptor.regions], ["arm", "leg", "tail"])
        self.assertEqual(descriptor.regions[2].page, "hero2.png")

    def test_byte_order_mark(self):
        descriptor = self.parser.parse("\ufeff" + MODERN_ATLAS)
        self.assertEqual(descriptor.pages[0].name, "hero.png")

    def test_property_before_page(self):
        with self.assertRaises(AtlasParseError):
            self.parser.parse("size: 1,1\nregion\n")

    def test_empty_text(self):
        with self.assertRaises(AtlasParseError):
            self.parser.parse("\n\n")


class TestBuildRegionIndex(unittest.TestCase):
    """Test region index construction."""

    def test_merges_and_lowercases(self):
        index = build_region_index(
            [AtlasFile("a.atlas", LEGACY_ATLAS), AtlasFile("b.atlas", MODERN_ATLAS)],
            check_images=False
        )

        self.assertEqual(index.regions, frozenset({"hero_head", "torso", "arm", "leg", "tail"}))
        self.assertEqual(index.descriptor_count, 2)
        self.assertIn("HERO_HEAD", index)
        self.assertEqual(len(index), 5)

    def test_unparseable_atlas_is_skipped(self):
        index = build_region_index(
            [AtlasFile("bad.atlas", "key: value\n"), AtlasFile("good.atlas", MODERN_ATLAS)],
            check_images=False
        )

        self.assertEqual(len(index), 3)
        self.assertEqual(len(index.warnings), 1)
        self.assertIn("bad.atlas", index.warnings[0])

    def test_no_atlases(self):
        index = build_region_index([])
        self.assertEqual(index.regions, frozenset())
        self.assertEqual(index.warnings, ())


class TestPageImages(unittest.TestCase):
    """Test page image verification with Pillow."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.pages = AtlasParser().parse(LEGACY_ATLAS).pages

    def tearDown(self):
        self.temp_dir.cleanup()

    def create_image(self, name: str, size: tuple) -> Path:
        path = self.root / name
        Image.new('RGBA', size, (0, 0, 0, 0)).save(path)
        return path

    def test_matching_image(self):
        path = self.create_image("hero.png", (64, 32))
        self.assertEqual(check_page_images(self.pages, {"hero.png": path}), [])

    def test_size_mismatch(self):
        path = self.create_image("hero.png", (128, 32))
        warnings = check_page_images(self.pages, {"hero.png": path})

        self.assertEqual(len(warnings), 1)
        self.assertIn("128x32", warnings[0])
        self.assertIn("64x32", warnings[0])

    def test_missing_image(self):
        warnings = check_page_images(self.pages, {})
        self.assertEqual(warnings, ["Atlas page image not supplied: hero.png"])

    def test_unreadable_image(self):
        path = self.root / "hero.png"
        path.write_bytes(b"not an image")

        warnings = check_page_images(self.pages, {"hero.png": path})

        self.assertEqual(len(warnings), 1)
        self.assertIn("Could not read", warnings[0])

    def test_index_collects_image_warnings(self):
        index = build_region_index([AtlasFile("hero.atlas", LEGACY_ATLAS)], images={})
        self.assertEqual(index.warnings, ("Atlas page image not supplied: hero.png",))


class TestImageUtils(unittest.TestCase):
    """Test image helpers used by the page check."""

    def test_parse_size(self):
        self.assertEqual(ImageUtils.parse_size("1024, 512"), (1024, 512))
        self.assertIsNone(ImageUtils.parse_size("wide"))
        self.assertIsNone(ImageUtils.parse_size(None))

    def test_load_image_rejects_bad_bytes(self):
        with self.assertRaises(ValueError):
            ImageUtils.load_image(b"garbage")


if __name__ == '__main__':
    unittest.main()
