from __future__ import annotations

import asyncio
import io
import logging
import stat
import zipfile

from foldertree.core.errors import ArchiveDecodeError, SizeLimitExceededError
from foldertree.core.nodes import ArchiveEntryHandle, DirectoryNode, FileNode, Node, SourceKind, Tree
from foldertree.core.paths import join_path, split_segments, strip_archive_suffix
from foldertree.core.sorting import sort_tree


logger = logging.getLogger("foldertree.archive")

DEFAULT_MAX_ARCHIVE_MB = 50
_DECODE_ERRORS = (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, EOFError, ValueError)
_DOS_DIRECTORY = 0x10


def check_archive_size(size: int, max_mb: int = DEFAULT_MAX_ARCHIVE_MB) -> None:
    if size > max_mb * 1024 * 1024:
        raise SizeLimitExceededError(max_mb, size)


def open_archive(data: bytes) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(io.BytesIO(data))
    except _DECODE_ERRORS as e:
        raise ArchiveDecodeError(str(e) or type(e).__name__) from e


def is_directory_entry(info: zipfile.ZipInfo) -> bool:
    """Trailing slash, or the MS-DOS / unix directory attribute."""
    if info.is_dir() or info.external_attr & _DOS_DIRECTORY:
        return True
    return stat.S_ISDIR(info.external_attr >> 16)


def _add_entry(
    root: DirectoryNode,
    by_path: dict[str, Node],
    file_index: dict[str, ArchiveEntryHandle],
    archive: zipfile.ZipFile,
    info: zipfile.ZipInfo,
) -> None:
    segments = split_segments(info.filename)
    if not segments:
        logger.debug("skipping archive entry with empty path: %r", info.filename)
        return

    current = root
    last = len(segments) - 1
    for i, segment in enumerate(segments):
        path = join_path(current.path, segment)
        existing = by_path.get(path)
        wants_directory = i < last or is_directory_entry(info)

        if wants_directory:
            if existing is None:
                existing = DirectoryNode(name=segment, path=path)
                current.children.append(existing)
                by_path[path] = existing
            elif not isinstance(existing, DirectoryNode):
                raise ArchiveDecodeError(f"'{path}' is both a file and a directory")
            current = existing
            continue

        if existing is None:
            handle = ArchiveEntryHandle(archive=archive, info=info)
            node = FileNode(name=segment, path=path, source=handle)
            current.children.append(node)
            by_path[path] = node
            file_index[path] = handle
        elif isinstance(existing, DirectoryNode):
            raise ArchiveDecodeError(f"'{path}' is both a file and a directory")


def build_archive_tree(
    data: bytes,
    filename: str,
    *,
    size: int | None = None,
    max_mb: int = DEFAULT_MAX_ARCHIVE_MB,
) -> Tree:
    """Build a sorted tree from ZIP bytes.

    ``size`` is the byte length declared by the uploader; the larger of it and
    ``len(data)`` is checked against ``max_mb`` before the archive is opened.
    Any decode problem aborts the whole build with ``ArchiveDecodeError``.
    """
    check_archive_size(max(size or 0, len(data)), max_mb)

    archive = open_archive(data)
    root = DirectoryNode(name=strip_archive_suffix(filename), path="")
    by_path: dict[str, Node] = {}
    file_index: dict[str, ArchiveEntryHandle] = {}
    try:
        # a member name stored twice resolves to its last copy, at the first one's position
        entries = list({info.filename: info for info in archive.infolist()}.values())
    except _DECODE_ERRORS as e:
        raise ArchiveDecodeError(str(e) or type(e).__name__) from e

    for info in entries:
        _add_entry(root, by_path, file_index, archive, info)

    sort_tree(root)
    logger.info(
        "archive %s: %d entries, %d files indexed", filename, len(entries), len(file_index)
    )
    return Tree(root=root, source_kind=SourceKind.ARCHIVE, file_index=file_index)


async def ingest_archive(
    data: bytes,
    filename: str,
    *,
    size: int | None = None,
    max_mb: int = DEFAULT_MAX_ARCHIVE_MB,
) -> Tree:
    check_archive_size(max(size or 0, len(data)), max_mb)
    return await asyncio.to_thread(build_archive_tree, data, filename, size=size, max_mb=max_mb)


async def read_archive_entry(handle: ArchiveEntryHandle) -> bytes:
    try:
        return await asyncio.to_thread(handle.archive.read, handle.info)
    except (*_DECODE_ERRORS, RuntimeError, NotImplementedError) as e:
        raise ArchiveDecodeError(str(e) or type(e).__name__) from e
