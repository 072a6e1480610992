from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from foldertree.core import settings
from foldertree.core.archive_builder import check_archive_size, ingest_archive
from foldertree.core.directory_builder import LocalDirectoryHandle, build_directory_tree
from foldertree.core.errors import APIError, IngestionInProgressError, UnsupportedInputError
from foldertree.core.expansion import ExpansionState
from foldertree.core.nodes import Tree, count_items
from foldertree.core.paths import is_archive_filename


logger = logging.getLogger("foldertree.sessions")


@dataclass
class TreeSession:
    id: str
    tree: Tree | None = None
    expansion: ExpansionState = field(default_factory=ExpansionState)
    error: str | None = None
    loading: bool = False

    def require_tree(self) -> Tree:
        if self.tree is None:
            raise APIError(404, "not_found", "No folder or archive has been dropped yet")
        return self.tree

    def summary(self) -> dict[str, Any]:
        tree = self.tree
        return {
            "id": self.id,
            "name": tree.name if tree else None,
            "source": tree.source_kind.value if tree else None,
            "item_count": count_items(tree.root) if tree else 0,
            "loading": self.loading,
            "error": self.error,
            "fully_expanded": self.expansion.is_fully_expanded(tree),
        }


class SessionRegistry:
    """In-memory sessions, bounded by ``FOLDERTREE_MAX_SESSIONS``.

    Creating a session past the bound evicts the least recently used ones.
    """

    def __init__(self) -> None:
        self._sessions: OrderedDict[str, TreeSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> TreeSession:
        limit = settings.max_sessions()
        while len(self._sessions) >= limit:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info("session %s: evicted (limit %d)", evicted_id, limit)
        session = TreeSession(id=uuid.uuid4().hex)
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> TreeSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise APIError(404, "not_found", f"Unknown session '{session_id}'")
        self._sessions.move_to_end(session_id)
        return session

    def delete(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise APIError(404, "not_found", f"Unknown session '{session_id}'")


registry = SessionRegistry()


async def ingest(
    session: TreeSession,
    build: Callable[[], Awaitable[Tree]],
    *,
    collapsed: bool = False,
) -> TreeSession:
    """Run one ingestion for ``session``, replacing its tree wholesale.

    Only one ingestion may be loading per session. The previous tree is
    dropped as soon as a new one starts; on failure the session keeps no
    tree and records the message.
    """
    if session.loading:
        raise IngestionInProgressError()
    session.loading = True
    session.tree = None
    session.error = None
    session.expansion = ExpansionState()
    try:
        tree = await build()
    except Exception as e:
        session.error = getattr(e, "message", None) or str(e)
        logger.warning("session %s: ingestion failed: %s", session.id, session.error)
        raise
    finally:
        session.loading = False

    session.tree = tree
    session.expansion = ExpansionState.for_tree(tree, collapsed=collapsed)
    logger.info(
        "session %s: loaded %s %r (%d items)",
        session.id,
        tree.source_kind.value,
        tree.name,
        count_items(tree.root),
    )
    return session


async def ingest_archive_upload(
    session: TreeSession,
    *,
    filename: str | None,
    size: int | None,
    read: Callable[[], Awaitable[bytes]],
    collapsed: bool = False,
) -> TreeSession:
    async def _build() -> Tree:
        if not is_archive_filename(filename):
            raise UnsupportedInputError()
        max_mb = settings.max_archive_mb()
        # declared size first, so oversized uploads are never read or decoded
        check_archive_size(size or 0, max_mb)
        data = await read()
        return await ingest_archive(data, filename, size=size, max_mb=max_mb)

    return await ingest(session, _build, collapsed=collapsed)


def resolve_browse_path(raw_path: str) -> Path:
    root = settings.browse_root()
    if root is None:
        raise APIError(403, "forbidden_path", "Directory ingestion is disabled")
    target = (root / (raw_path or "").lstrip("/")).resolve()
    if target != root and root not in target.parents:
        raise APIError(403, "forbidden_path", "Path is outside the browse root")
    return target


async def ingest_directory_path(
    session: TreeSession,
    raw_path: str,
    *,
    collapsed: bool = False,
) -> TreeSession:
    async def _build() -> Tree:
        target = resolve_browse_path(raw_path)
        if not target.is_dir():
            raise UnsupportedInputError()
        return await build_directory_tree(LocalDirectoryHandle(target))

    return await ingest(session, _build, collapsed=collapsed)
