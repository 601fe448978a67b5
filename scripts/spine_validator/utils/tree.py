"""
Bounded traversal helpers for JSON-like trees.

Walks use an explicit stack instead of recursion so that deeply nested or
adversarial documents cannot exhaust the interpreter's call stack.
"""

from collections.abc import Mapping
from typing import Any, Callable, Iterator, List, Tuple, Union

PathSegment = Union[str, int]

# Visitor signature: (node, parent_path, key, depth) -> descend?
Visitor = Callable[[Any, Tuple[PathSegment, ...], PathSegment, int], bool]

DEFAULT_MAX_DEPTH = 512


def is_container(value: Any) -> bool:
    """Check if value is a mapping or a list (strings excluded)."""
    return isinstance(value, (Mapping, list, tuple))


def iter_children(node: Any) -> Iterator[Tuple[PathSegment, Any]]:
    """Yield (key, child) pairs of a container in document order."""
    if isinstance(node, Mapping):
        yield from node.items()
    elif isinstance(node, (list, tuple)):
        yield from enumerate(node)


def format_path(path: Tuple[PathSegment, ...]) -> str:
    """
    Render a structural path as ``.key`` / ``[index]`` segments.

    The root path renders as an empty string.
    """
    parts = []
    for segment in path:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        else:
            parts.append(f".{segment}")
    return "".join(parts)


def walk_tree(root: Any, visit: Visitor, max_depth: int = DEFAULT_MAX_DEPTH) -> int:
    """
    Depth-first, pre-order walk over every container below ``root``.

    ``visit`` is called once for each container child with the path of its
    parent and its own key. Returning True descends into that child. The root
    itself is never passed to ``visit``. Nodes already seen (by identity) are
    not entered twice and nothing deeper than ``max_depth`` is entered.

    Args:
        root: Tree to walk
        visit: Callback deciding whether to descend into a child
        max_depth: Maximum nesting depth that will be entered

    Returns:
        Number of containers visited
    """
    if not is_container(root):
        return 0

    visited = {id(root)}
    stack: List[Tuple[Iterator[Tuple[PathSegment, Any]], Tuple[PathSegment, ...], int]] = [
        (iter_children(root), (), 0)
    ]
    count = 0

    while stack:
        children, path, depth = stack[-1]
        try:
            key, child = next(children)
        except StopIteration:
            stack.pop()
            continue

        if not is_container(child) or id(child) in visited:
            continue

        visited.add(id(child))
        count += 1
        if visit(child, path, key, depth + 1) and depth + 1 < max_depth:
            stack.append((iter_children(child), path + (key,), depth + 1))

    return count
