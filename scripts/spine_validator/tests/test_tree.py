"""
Tests for bounded tree traversal.
"""

import unittest

from ..utils.tree import walk_tree, format_path, iter_children, is_container


class TestFormatPath(unittest.TestCase):
    """Test structural path rendering."""

    def test_root_path_is_empty(self):
        self.assertEqual(format_path(()), "")

    def test_mixed_segments(self):
        self.assertEqual(format_path(("skins", 0, "attachments")), ".skins[0].attachments")


class TestIterChildren(unittest.TestCase):
    """Test child enumeration."""

    def test_mapping_children_in_order(self):
        self.assertEqual(list(iter_children({"b": 1, "a": 2})), [("b", 1), ("a", 2)])

    def test_list_children_are_indexed(self):
        self.assertEqual(list(iter_children(["x", "y"])), [(0, "x"), (1, "y")])

    def test_scalars_have_no_children(self):
        self.assertEqual(list(iter_children("text")), [])
        self.assertFalse(is_container("text"))


class TestWalkTree(unittest.TestCase):
    """Test the stack-based pre-order walk."""

    def test_pre_order_visit(self):
        """Containers are visited parent first, in document order."""
        tree = {"a": {"b": {}}, "c": [{}]}
        seen = []

        def visit(node, path, key, depth):
            seen.append((format_path(path + (key,)), depth))
            return True

        count = walk_tree(tree, visit)

        self.assertEqual(seen, [(".a", 1), (".a.b", 2), (".c", 1), (".c[0]", 2)])
        self.assertEqual(count, 4)

    def test_visitor_can_prune(self):
        tree = {"a": {"b": {"c": {}}}}
        seen = []

        def visit(node, path, key, depth):
            seen.append(key)
            return key != "a"

        walk_tree(tree, visit)
        self.assertEqual(seen, ["a"])

    def test_max_depth_bounds_descent(self):
        """Nothing deeper than the limit is entered."""
        tree = {}
        node = tree
        for _ in range(50):
            child = {}
            node["next"] = child
            node = child

        depths = []
        walk_tree(tree, lambda node, path, key, depth: depths.append(depth) or True, max_depth=10)

        self.assertEqual(max(depths), 10)

    def test_deep_nesting_does_not_recurse(self):
        """A document nested far beyond the recursion limit is still walked."""
        tree = []
        node = tree
        for _ in range(5000):
            child = []
            node.append(child)
            node = child

        count = walk_tree(tree, lambda *args: True, max_depth=10000)
        self.assertEqual(count, 5000)

    def test_shared_nodes_entered_once(self):
        shared = {"leaf": {}}
        tree = {"first": shared, "second": shared}
        keys = []

        walk_tree(tree, lambda node, path, key, depth: keys.append(key) or True)

        self.assertEqual(keys, ["first", "leaf"])

    def test_cycle_terminates(self):
        tree = {"child": {}}
        tree["child"]["back"] = tree

        count = walk_tree(tree, lambda *args: True)
        self.assertEqual(count, 1)

    def test_scalar_root(self):
        self.assertEqual(walk_tree(42, lambda *args: True), 0)


if __name__ == '__main__':
    unittest.main()
