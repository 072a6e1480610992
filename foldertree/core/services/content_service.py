from __future__ import annotations

import asyncio
import mimetypes

from foldertree.core import settings
from foldertree.core.archive_builder import read_archive_entry
from foldertree.core.errors import APIError
from foldertree.core.nodes import ArchiveEntryHandle, FileNode, LiveFileHandle, SourceKind, Tree


def media_type_for(name: str) -> str:
    return mimetypes.guess_type(name)[0] or "application/octet-stream"


def _check_preview_size(size: int, max_mb: int) -> None:
    if size > max_mb * 1024 * 1024:
        raise APIError(
            413,
            "preview_too_large",
            f"File too large for preview (max {max_mb}MB)",
            {"limit_mb": max_mb, "size": size},
        )


async def _read_live_file(handle: LiveFileHandle, max_mb: int) -> bytes:
    try:
        size = (await asyncio.to_thread(handle.path.stat)).st_size
    except OSError as e:
        raise APIError(404, "not_found", f"Failed to read file: {e}")
    _check_preview_size(size, max_mb)
    try:
        return await asyncio.to_thread(handle.path.read_bytes)
    except OSError as e:
        raise APIError(404, "not_found", f"Failed to read file: {e}")


async def read_file(tree: Tree, path: str) -> tuple[FileNode, bytes]:
    """Resolve the bytes behind one file leaf.

    Archive trees go through the file index; directory trees read the live
    file. Both are capped at the configured preview size, archive entries by
    their declared uncompressed size before anything is inflated.
    """
    if tree.source_kind is SourceKind.ARCHIVE:
        handle = tree.file_index.get(path)
        node = tree.find(path) if handle is not None else None
    else:
        node = tree.find(path)
        handle = node.source if isinstance(node, FileNode) else None

    if not isinstance(node, FileNode) or handle is None:
        raise APIError(404, "not_found", f"No file at '{path}'")

    max_mb = settings.max_preview_mb()
    if isinstance(handle, ArchiveEntryHandle):
        _check_preview_size(handle.info.file_size, max_mb)
        return node, await read_archive_entry(handle)
    if isinstance(handle, LiveFileHandle):
        return node, await _read_live_file(handle, max_mb)
    raise APIError(422, "unsupported_source", "File source not recognized")
