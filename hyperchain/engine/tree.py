"""Ordered n-ary (rose) tree.

Each tree exclusively owns its children; a subtree can be attached to at
most one parent and holds no reference back to it. Attribute reads that the
tree itself does not define fall through to the held data, so a
``RoseTree[Selection]`` can be read as ``tree.multiplier``.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class RoseTree(Generic[T]):
    """A node holding ``data`` and an ordered list of child trees."""

    def __init__(self, data: T) -> None:
        self.data = data
        self._children: list[RoseTree[T]] = []
        self._attached = False

    def __getattr__(self, name: str) -> Any:
        # Private names never fall through; copy/pickle probe them before __init__
        if name.startswith("_") or name == "data":
            raise AttributeError(name)
        return getattr(self.__dict__["data"], name)

    def __repr__(self) -> str:
        return f"RoseTree({self.data!r}, children={len(self._children)})"

    def __len__(self) -> int:
        """Number of nodes in this tree, including the root."""
        return sum(1 for _ in self.walk())

    def insert(self, child: RoseTree[T]) -> None:
        """Append ``child`` as the last child of this node.

        Raises:
            ValueError: If ``child`` is this tree or already has a parent
        """
        if child is self:
            raise ValueError("A tree cannot be its own child")
        if child._attached:
            raise ValueError("Subtree is already attached to another tree")
        child._attached = True
        self._children.append(child)

    def children(self) -> tuple[RoseTree[T], ...]:
        """Children in insertion order."""
        return tuple(self._children)

    def is_leaf(self) -> bool:
        return not self._children

    def walk(self) -> Iterator[RoseTree[T]]:
        """Pre-order, depth-first traversal (children in order)."""
        stack: list[RoseTree[T]] = [self]
        while stack:
            tree = stack.pop()
            yield tree
            stack.extend(reversed(tree._children))

    def depth(self) -> int:
        """Length of the longest root-to-leaf path, counting nodes."""
        deepest = 0
        stack: list[tuple[RoseTree[T], int]] = [(self, 1)]
        while stack:
            tree, level = stack.pop()
            deepest = max(deepest, level)
            stack.extend((child, level + 1) for child in tree._children)
        return deepest
