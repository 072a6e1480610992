from __future__ import annotations

from typing import Any

from foldertree.core.expansion import ExpansionState
from foldertree.core.nodes import DirectoryNode, Node, Tree


BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "

FOLDER_ICON = "📁"
OPEN_FOLDER_ICON = "📂"
FILE_ICON = "📄"


def _is_open(node: DirectoryNode, expansion: ExpansionState | None) -> bool:
    return expansion is None or expansion.is_expanded(node.path)


def _label(node: Node, icons: bool, expansion: ExpansionState | None) -> str:
    if isinstance(node, DirectoryNode):
        text = f"{node.name}/"
        if not icons:
            return text
        icon = OPEN_FOLDER_ICON if _is_open(node, expansion) else FOLDER_ICON
        return f"{icon} {text}"
    return f"{FILE_ICON} {node.name}" if icons else node.name


def render_lines(
    root: DirectoryNode | Tree,
    *,
    icons: bool = False,
    expansion: ExpansionState | None = None,
) -> list[str]:
    """Render a tree as box-drawing lines.

    Without ``expansion`` every directory is descended into. With it, only
    directories whose path is in the state have their children emitted; a
    collapsed directory still gets its own line.
    """
    if isinstance(root, Tree):
        root = root.root

    root_line = f"{FOLDER_ICON} {root.name}/" if icons else f"{root.name}/"
    lines = [root_line]

    def _walk(node: DirectoryNode, prefix: str) -> None:
        count = len(node.children)
        for idx, child in enumerate(node.children):
            is_last = idx == count - 1
            branch = LAST_BRANCH if is_last else BRANCH
            lines.append(f"{prefix}{branch}{_label(child, icons, expansion)}")
            if isinstance(child, DirectoryNode) and child.children and _is_open(child, expansion):
                _walk(child, f"{prefix}{SPACE if is_last else PIPE}")

    if _is_open(root, expansion):
        _walk(root, SPACE)
    return lines


def render_text(
    root: DirectoryNode | Tree,
    *,
    icons: bool = False,
    expansion: ExpansionState | None = None,
) -> str:
    return "\n".join(render_lines(root, icons=icons, expansion=expansion))


def build_view(tree: Tree, expansion: ExpansionState) -> dict[str, Any]:
    """Nested projection for the interactive tree; collapsed directories carry no children."""

    def _node(node: Node) -> dict[str, Any]:
        if not isinstance(node, DirectoryNode):
            return {"name": node.name, "path": node.path, "kind": node.kind.value}
        expanded = expansion.is_expanded(node.path)
        return {
            "name": node.name,
            "path": node.path,
            "kind": node.kind.value,
            "expanded": expanded,
            "has_children": bool(node.children),
            "children": [_node(child) for child in node.children] if expanded else [],
        }

    return _node(tree.root)
