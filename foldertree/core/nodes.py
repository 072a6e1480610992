from __future__ import annotations

import zipfile
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import ClassVar, Union

from foldertree.core.paths import split_segments


class NodeKind(str, Enum):
    DIRECTORY = "directory"
    FILE = "file"


class SourceKind(str, Enum):
    DIRECTORY = "directory"
    ARCHIVE = "archive"


@dataclass(frozen=True)
class LiveFileHandle:
    """A file on the live filesystem, read lazily when its content is asked for."""

    path: Path


@dataclass(frozen=True)
class ArchiveEntryHandle:
    """One member of an opened archive. Valid for as long as the archive is open."""

    archive: zipfile.ZipFile
    info: zipfile.ZipInfo


SourceHandle = Union[LiveFileHandle, ArchiveEntryHandle]


@dataclass
class FileNode:
    name: str
    path: str
    source: SourceHandle | None = None

    kind: ClassVar[NodeKind] = NodeKind.FILE


@dataclass
class DirectoryNode:
    name: str
    path: str
    children: list[Node] = field(default_factory=list)

    kind: ClassVar[NodeKind] = NodeKind.DIRECTORY

    def child(self, name: str) -> Node | None:
        for node in self.children:
            if node.name == name:
                return node
        return None


Node = Union[DirectoryNode, FileNode]


@dataclass
class Tree:
    root: DirectoryNode
    source_kind: SourceKind
    # file path -> archive member; populated for archive trees only
    file_index: dict[str, ArchiveEntryHandle] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.root.name

    def find(self, path: str) -> Node | None:
        if path == self.root.path:
            return self.root
        current: Node = self.root
        for segment in split_segments(path):
            if not isinstance(current, DirectoryNode):
                return None
            found = current.child(segment)
            if found is None:
                return None
            current = found
        return current


def iter_nodes(node: Node) -> Iterator[Node]:
    """Pre-order walk of ``node`` and everything below it."""
    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        yield current
        if isinstance(current, DirectoryNode):
            stack.extend(reversed(current.children))


def directory_paths(node: Node) -> list[str]:
    return [n.path for n in iter_nodes(node) if isinstance(n, DirectoryNode)]


def count_items(node: Node) -> int:
    return sum(1 for _ in iter_nodes(node))
