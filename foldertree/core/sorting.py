from __future__ import annotations

from foldertree.core.nodes import DirectoryNode, Node


def sort_key(node: Node) -> tuple[bool, str, str]:
    """Directories before files, then case-insensitive name; the raw name breaks ties."""
    return (not isinstance(node, DirectoryNode), node.name.casefold(), node.name)


def sort_tree(node: DirectoryNode) -> DirectoryNode:
    """Sort every directory's children in place, at every depth. Returns ``node``."""
    stack = [node]
    while stack:
        current = stack.pop()
        current.children.sort(key=sort_key)
        stack.extend(child for child in current.children if isinstance(child, DirectoryNode))
    return node
