"""Accessibility tree snapshots.

Accessibility.getFullAXTree returns a flat node list linked by childIds.
This module rebuilds the tree and renders it as an indented outline:

    - heading "Example Domain"
    - link "More information..."
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

INTERACTIVE_ROLES = frozenset(
    {
        "button",
        "link",
        "textbox",
        "checkbox",
        "radio",
        "combobox",
        "listbox",
        "menuitem",
        "menuitemcheckbox",
        "menuitemradio",
        "option",
        "searchbox",
        "slider",
        "spinbutton",
        "switch",
        "tab",
        "treeitem",
    }
)

# structural roles whose children are lifted to the parent's level
TRANSPARENT_ROLES = frozenset({"none", "Ignored", "generic"})

EMPTY_SNAPSHOT = "(empty page)"


def _ax_string(value: Any) -> str:
    if isinstance(value, dict) and isinstance(value.get("value"), str):
        return value["value"]
    return ""


@dataclass
class AXNode:
    """One accessibility node with its resolved children."""

    node_id: str
    role: str = ""
    name: str = ""
    child_ids: List[str] = field(default_factory=list)
    children: List["AXNode"] = field(default_factory=list)

    @classmethod
    def from_cdp(cls, data: Dict[str, Any]) -> "AXNode":
        return cls(
            node_id=str(data.get("nodeId", "")),
            role=_ax_string(data.get("role")),
            name=_ax_string(data.get("name")),
            child_ids=[str(cid) for cid in data.get("childIds") or []],
        )


def build_tree(raw_nodes: List[Dict[str, Any]]) -> List[AXNode]:
    """Link the flat node list into trees.

    Roots are nodes no other node lists as a child; if every node is
    referenced, the first node is the root. Each node is placed at most once.
    """
    nodes = [AXNode.from_cdp(data) for data in raw_nodes]
    if not nodes:
        return []

    referenced = {cid for node in nodes for cid in node.child_ids}
    root_ids = [node.node_id for node in nodes if node.node_id not in referenced]
    if not root_ids:
        root_ids = [nodes[0].node_id]

    by_id = {node.node_id: node for node in nodes}

    def extract(node_id: str) -> Optional[AXNode]:
        node = by_id.pop(node_id, None)
        if node is None:
            return None
        node.children = [
            child for child in map(extract, node.child_ids) if child is not None
        ]
        return node

    return [root for root in map(extract, root_ids) if root is not None]


def format_tree(
    roots: List[AXNode],
    *,
    interactive: bool = False,
    compact: bool = False,
    max_depth: Optional[int] = None,
) -> List[str]:
    """Render nodes as `- role "name"` lines, two spaces per level.

    Args:
        interactive: Keep only interactive roles (their ancestors collapse)
        compact: Collapse unnamed non-interactive nodes
        max_depth: Drop lines nested deeper than this (0 = top level only)
    """
    lines: List[str] = []

    def visit(node: AXNode, depth: int) -> None:
        if max_depth is not None and depth > max_depth:
            return

        collapse = (
            node.role in TRANSPARENT_ROLES
            or (interactive and node.role not in INTERACTIVE_ROLES)
            or (compact and not node.name and node.role not in INTERACTIVE_ROLES)
        )
        if collapse:
            for child in node.children:
                visit(child, depth)
            return

        line = f"{'  ' * depth}- {node.role}"
        if node.name:
            line += f' "{node.name}"'
        lines.append(line)
        for child in node.children:
            visit(child, depth + 1)

    for root in roots:
        visit(root, 0)
    return lines


def render_snapshot(raw_nodes: List[Dict[str, Any]], **options: Any) -> str:
    lines = format_tree(build_tree(raw_nodes), **options)
    return "\n".join(lines) if lines else EMPTY_SNAPSHOT
