"""
Tests for animation name discovery.
"""

import unittest

from ..processing.normalizer import normalize
from ..processing.animations import AnimationCollector, collect_animations


class TestAnimationCollector(unittest.TestCase):
    """Test cases for AnimationCollector."""

    def setUp(self):
        self.collector = AnimationCollector()

    def test_standard_document(self):
        view = normalize({"skeleton": {}, "animations": [{"name": "walk"}, {"name": "run"}]})
        self.assertEqual(self.collector.collect(view), ("walk", "run"))

    def test_standard_accepts_plain_names(self):
        view = normalize({"skeleton": {}, "animations": ["idle", {"name": "jump"}, {"duration": 1}]})
        self.assertEqual(self.collector.collect(view), ("idle", "jump"))

    def test_object_animations(self):
        view = normalize({"animations": {"run": {"slots": {}}, "idle": {}}})
        self.assertEqual(self.collector.collect(view), ("run", "idle"))

    def test_duplicates_removed_keeping_first(self):
        view = normalize({"skeleton": {}, "animations": [{"name": "a"}, {"name": "b"}, {"name": "a"}]})
        self.assertEqual(self.collector.collect(view), ("a", "b"))

    def test_complex_probes_every_location(self):
        view = normalize({
            "skins": [{"name": "default"}],
            "animations": [{"name": "walk"}],
            "animation": {"wave": {}, "key": {"name": "dance"}},
            "data": {"animations": ["run", {"name": "walk"}]},
        })

        names = self.collector.collect(view)

        self.assertEqual(names, ("walk", "wave", "dance", "run"))

    def test_unknown_fallback_scan(self):
        """Objects exposing a name are animations and are not descended into."""
        view = normalize({
            "clips": [
                {"name": "walk", "inner": {"name": "hidden"}},
                {"animation": {"frames": 3}},
            ],
            "extra": {"named": {"animation": "wave"}},
        })

        names = self.collector.collect(view)

        self.assertEqual(names, ("walk", "anim_.clips_1", "wave"))

    def test_unknown_synthesizes_key_for_mapping_child(self):
        view = normalize({"tracks": {"jump": {"animation": 7}}})
        self.assertEqual(self.collector.collect(view), ("jump",))

    def test_fallback_respects_depth_limit(self):
        document = {"a": {"b": {"c": {"name": "deep"}}}}
        self.assertEqual(AnimationCollector(max_depth=2).collect(normalize(document)), ())
        self.assertEqual(collect_animations(normalize(document)), ("deep",))

    def test_empty_document(self):
        self.assertEqual(self.collector.collect(normalize({})), ())


if __name__ == '__main__':
    unittest.main()
