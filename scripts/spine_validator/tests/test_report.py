"""
Tests for report assembly and the report helpers.
"""

import json
import unittest

from ..config import ValidatorConfig
from ..processing.normalizer import DocumentVariant, normalize
from ..processing.attachments import AttachmentExtractor
from ..processing.crossref import cross_reference, missing_by_skin
from ..processing.report import ValidationReport, assemble_report


def two_skin_document():
    return {
        "skeleton": {},
        "slots": [{"name": "body"}, {"name": "head"}],
        "skins": {
            "default": {"body": {"torso": {}}, "head": {"face": {}}},
            "gold": {"body": {"torso_gold": {}}},
            "ghost": {"head": {"mask": {"type": "boundingbox"}}},
        },
        "animations": [{"name": "idle"}],
    }


def build_report(document, regions, warnings=()):
    view = normalize(document)
    extraction = AttachmentExtractor(ValidatorConfig()).extract(view)
    missing = cross_reference(extraction.atlas_requirements, regions)
    entries = missing_by_skin(extraction.skin_textures, regions)
    return assemble_report(view.variant, ("idle",), extraction, missing, entries, warnings)


class TestValidationReport(unittest.TestCase):
    """Test cases for ValidationReport."""

    def setUp(self):
        self.report = build_report(two_skin_document(), frozenset({"torso", "face"}), ["note"])

    def test_stats(self):
        stats = self.report.stats
        self.assertEqual(stats.total_attachments, len(self.report.defined_attachments))
        self.assertEqual(stats.total_skins, 3)
        self.assertEqual(stats.total_errors, 0)
        self.assertEqual(stats.total_warnings, 1)

    def test_missing_by_skin(self):
        self.assertEqual(dict(self.report.missing_by_skin), {
            "default": (), "gold": ("torso_gold",), "ghost": (),
        })
        self.assertTrue(self.report.skin_has_missing("gold"))
        self.assertFalse(self.report.skin_has_missing("default"))

    def test_per_skin_missing_is_subset_of_missing(self):
        for names in self.report.missing_by_skin.values():
            for name in names:
                self.assertIn(name, self.report.missing_attachments)

    def test_can_play_with_skin(self):
        self.assertTrue(self.report.can_play_with_skin("default"))
        self.assertFalse(self.report.can_play_with_skin("gold"))
        # only non-texture attachments
        self.assertTrue(self.report.can_play_with_skin("ghost"))
        self.assertTrue(self.report.can_play_with_skin("unknown"))

    def test_default_skin_name(self):
        self.assertEqual(self.report.default_skin_name(), "default")
        report = ValidationReport(document_type=DocumentVariant.UNKNOWN)
        self.assertEqual(report.default_skin_name(), "default")

    def test_format_missing_details(self):
        self.assertEqual(self.report.format_missing_details(), ["gold.body: torso_gold"])

    def test_validity(self):
        self.assertFalse(self.report.is_complete)
        self.assertFalse(self.report.is_valid)

        complete = build_report(two_skin_document(), frozenset({"torso", "face", "torso_gold"}))
        self.assertTrue(complete.is_complete)
        self.assertTrue(complete.is_valid)

    def test_to_dict_keys(self):
        data = self.report.to_dict()
        self.assertEqual(set(data), {
            "documentType", "definedAttachments", "atlasRequirements", "requirementsMap",
            "skinStructure", "missingAttachments", "skinMissing", "errors", "warnings",
            "animations", "stats",
        })
        self.assertEqual(data["documentType"], "standard")
        self.assertEqual(data["missingAttachments"], ["torso_gold"])
        self.assertEqual(data["stats"]["totalSkins"], 3)

    def test_to_json_round_trip(self):
        data = json.loads(self.report.to_json())
        self.assertEqual(data["skinStructure"]["gold"], {"body": ["torso_gold"]})

    def test_report_is_immutable(self):
        with self.assertRaises(AttributeError):
            self.report.missing_attachments = ()
        with self.assertRaises(TypeError):
            self.report.requirements_map["x"] = ("y",)


if __name__ == '__main__':
    unittest.main()
