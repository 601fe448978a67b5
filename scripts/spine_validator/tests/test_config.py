"""
Tests for validator configuration loading.
"""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from ..config import ValidatorConfig, DEFAULT_NON_TEXTURE_TYPES


class TestValidatorConfig(unittest.TestCase):
    """Test cases for ValidatorConfig."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_defaults(self):
        config = ValidatorConfig()
        self.assertEqual(config.non_texture_types, DEFAULT_NON_TEXTURE_TYPES)
        self.assertEqual(config.empty_marker_prefix, "__empty")
        self.assertEqual(config.max_walk_depth, 512)
        self.assertIn(".atlas", config.atlas_extensions)
        self.assertTrue(config.check_page_images)
        self.assertFalse(config.strict)
        self.assertEqual(config.validate(), [])

    def test_from_json(self):
        path = self.root / "config.json"
        path.write_text(json.dumps({
            "extraction": {"non_texture_types": ["Clipping"], "max_walk_depth": 64},
            "output": {"strict": True, "log_level": "debug"},
        }))

        config = ValidatorConfig.from_file(path)

        self.assertEqual(config.non_texture_types, ["clipping"])
        self.assertEqual(config.max_walk_depth, 64)
        self.assertTrue(config.strict)
        self.assertEqual(config.log_level, "DEBUG")

    def test_from_toml(self):
        path = self.root / "config.toml"
        path.write_text(
            "[extraction]\n"
            "empty_marker_prefix = \"__none\"\n"
            "\n"
            "[atlas]\n"
            "check_page_images = false\n"
        )

        config = ValidatorConfig.from_file(path)

        self.assertEqual(config.empty_marker_prefix, "__none")
        self.assertFalse(config.check_page_images)

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            ValidatorConfig.from_file(self.root / "absent.toml")

    def test_unsupported_format(self):
        path = self.root / "config.yaml"
        path.write_text("strict: true")
        with self.assertRaises(ValueError):
            ValidatorConfig.from_file(path)

    @patch.dict(os.environ, {
        "SPINE_VALIDATOR_NON_TEXTURE_TYPES": "clipping, Point",
        "SPINE_VALIDATOR_STRICT": "true",
        "SPINE_VALIDATOR_MAX_WALK_DEPTH": "32",
    })
    def test_env_overrides(self):
        config = ValidatorConfig.from_env()
        self.assertEqual(config.non_texture_types, ["clipping", "point"])
        self.assertTrue(config.strict)
        self.assertEqual(config.max_walk_depth, 32)

    def test_validate_reports_problems(self):
        config = ValidatorConfig(max_walk_depth=0, non_texture_types=[], log_level="LOUD")
        errors = config.validate()
        self.assertEqual(len(errors), 3)
        self.assertTrue(any("max_walk_depth" in e for e in errors))


if __name__ == '__main__':
    unittest.main()
