from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from itertools import islice
from pathlib import Path
from typing import ClassVar, Protocol

from foldertree.core.nodes import DirectoryNode, FileNode, LiveFileHandle, Node, SourceKind, Tree
from foldertree.core.paths import join_path
from foldertree.core.sorting import sort_tree


logger = logging.getLogger("foldertree.directory")

READ_BATCH_SIZE = 100
DEFAULT_CONCURRENCY = 16


class EntryReader(Protocol):
    async def read_entries(self) -> list: ...


class DirectoryHandle(Protocol):
    """A live directory: lists its entries in batches, an empty batch means exhausted.

    Entries expose ``name`` and ``is_directory``. Directory entries are
    themselves ``DirectoryHandle``s; file entries provide ``file_handle()``.
    """

    name: str
    is_directory: bool

    def open_reader(self) -> EntryReader: ...


# --- Local filesystem handles --------------------------------------------------

@dataclass(frozen=True)
class LocalFileEntry:
    path: Path

    is_directory: ClassVar[bool] = False

    @property
    def name(self) -> str:
        return self.path.name

    def file_handle(self) -> LiveFileHandle:
        return LiveFileHandle(self.path)


@dataclass
class LocalEntryReader:
    path: Path
    batch_size: int = READ_BATCH_SIZE
    _it: object = field(default=None, repr=False)
    _done: bool = False

    def _next_batch(self) -> list:
        if self._done:
            return []
        if self._it is None:
            self._it = os.scandir(self.path)
        batch = []
        try:
            for entry in islice(self._it, self.batch_size):
                # symlinked directories are listed as leaves so the walk stays acyclic
                if entry.is_dir(follow_symlinks=False):
                    batch.append(LocalDirectoryHandle(Path(entry.path)))
                else:
                    batch.append(LocalFileEntry(Path(entry.path)))
        except OSError:
            self._it.close()
            self._done = True
            raise
        if not batch:
            self._it.close()
            self._done = True
        return batch

    async def read_entries(self) -> list:
        return await asyncio.to_thread(self._next_batch)


@dataclass(frozen=True)
class LocalDirectoryHandle:
    path: Path

    is_directory: ClassVar[bool] = True

    @property
    def name(self) -> str:
        return self.path.name or str(self.path)

    def open_reader(self) -> LocalEntryReader:
        return LocalEntryReader(self.path)


# --- Builder -------------------------------------------------------------------

async def read_all_entries(handle: DirectoryHandle) -> list:
    reader = handle.open_reader()
    entries: list = []
    while True:
        batch = await reader.read_entries()
        if not batch:
            return entries
        entries.extend(batch)


async def _build_directory(
    handle: DirectoryHandle, path: str, limiter: asyncio.Semaphore
) -> DirectoryNode:
    node = DirectoryNode(name=handle.name, path=path)
    try:
        async with limiter:
            entries = await read_all_entries(handle)
    except OSError as e:
        # listing failures degrade to an empty directory; the build goes on
        logger.warning("could not list %r: %s", path or handle.name, e)
        return node

    # every sibling walk is joined before any failure propagates
    results = await asyncio.gather(
        *(
            _build_directory(entry, join_path(path, entry.name), limiter)
            for entry in entries
            if entry.is_directory
        ),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result

    subdirs = iter(results)
    children: list[Node] = []
    for entry in entries:
        if entry.is_directory:
            children.append(next(subdirs))
        else:
            children.append(
                FileNode(
                    name=entry.name,
                    path=join_path(path, entry.name),
                    source=entry.file_handle(),
                )
            )
    node.children = children
    return node


async def build_directory_tree(
    handle: DirectoryHandle, *, concurrency: int = DEFAULT_CONCURRENCY
) -> Tree:
    """Walk ``handle`` recursively and return the sorted tree.

    Sibling subtrees are listed concurrently, at most ``concurrency`` listings
    at a time; all of them are joined before the sort pass runs.
    """
    root = await _build_directory(handle, "", asyncio.Semaphore(concurrency))
    sort_tree(root)
    logger.info("directory %s: built", root.name)
    return Tree(root=root, source_kind=SourceKind.DIRECTORY)
