from __future__ import annotations

from collections.abc import Iterable, Iterator

from foldertree.core.nodes import Tree, directory_paths


class ExpansionState:
    """The set of directory paths currently open in the interactive view.

    Kept apart from the tree so one tree can be rendered under several
    expansion policies without being copied.
    """

    def __init__(self, paths: Iterable[str] = ()):
        self._paths: set[str] = set(paths)

    @classmethod
    def for_tree(cls, tree: Tree, *, collapsed: bool = False) -> ExpansionState:
        state = cls()
        if not collapsed:
            state.expand_all(tree)
        return state

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def is_expanded(self, path: str) -> bool:
        return path in self._paths

    def toggle(self, path: str) -> bool:
        """Flip ``path`` and return whether it is now expanded."""
        if path in self._paths:
            self._paths.discard(path)
            return False
        self._paths.add(path)
        return True

    def expand_all(self, tree: Tree) -> None:
        self._paths = set(directory_paths(tree.root))

    def collapse_all(self) -> None:
        self._paths = set()

    def is_fully_expanded(self, tree: Tree | None) -> bool:
        if tree is None:
            return False
        paths = directory_paths(tree.root)
        return bool(paths) and all(path in self._paths for path in paths)

    def toggle_all(self, tree: Tree) -> None:
        if self.is_fully_expanded(tree):
            self.collapse_all()
        else:
            self.expand_all(tree)
