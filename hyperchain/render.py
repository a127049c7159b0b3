"""Text and JSON renderings of a resolved dependency tree."""

from __future__ import annotations

from typing import Any

from hyperchain.engine.rates import format_rate
from hyperchain.engine.resolver import Selection
from hyperchain.engine.tree import RoseTree

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "|   "
SPACE = "    "


def _label(tree: RoseTree[Selection]) -> str:
    return f"{tree.multiplier}x {tree.payload.builder} -> {tree.payload.name}"


def render_lines(tree: RoseTree[Selection]) -> list[str]:
    """Render a tree as lines, one per node, depth-first.

    The root has no connector. Every other node is prefixed with its
    ancestors' spacers and a branch connector; the last child of a node
    gets the closing connector.
    """
    lines = [_label(tree)]
    # (subtree, prefix inherited from ancestors, is last child)
    stack = [(child, "", False) for child in tree.children()]
    if stack:
        stack[-1] = (stack[-1][0], "", True)
    stack.reverse()
    while stack:
        node, prefix, is_last = stack.pop()
        lines.append(f"{prefix}{LAST_BRANCH if is_last else BRANCH}{_label(node)}")
        children = node.children()
        child_prefix = prefix + (SPACE if is_last else PIPE)
        stack.extend(
            (child, child_prefix, i == len(children) - 1)
            for i, child in reversed(list(enumerate(children)))
        )
    return lines


def render_tree(tree: RoseTree[Selection]) -> str:
    """Render a tree as newline-joined text (no trailing newline)."""
    return "\n".join(render_lines(tree))


def selection_dict(selection: Selection) -> dict[str, Any]:
    payload = selection.payload
    return {
        "widget": selection.widget,
        "recipe": payload.name,
        "builder": payload.builder,
        "multiplier": selection.multiplier,
        "rate": format_rate(selection.rate),
        "capacity": format_rate(selection.capacity),
        "waste": format_rate(selection.waste),
    }


def tree_to_dict(tree: RoseTree[Selection]) -> dict[str, Any]:
    """JSON-ready nested dict; rates are rendered as ``"n/d"`` strings."""
    root = {**selection_dict(tree.data), "children": []}
    stack = [(tree, root)]
    while stack:
        node, out = stack.pop()
        for child in node.children():
            child_out = {**selection_dict(child.data), "children": []}
            out["children"].append(child_out)
            stack.append((child, child_out))
    return root


def totals_lines(counts: dict[Any, int]) -> list[str]:
    """One ``"{count}x {builder} -> {name}"`` line per recipe."""
    return [f"{count}x {payload.builder} -> {payload.name}" for payload, count in counts.items()]
