from __future__ import annotations

import logging
import os
from pathlib import Path


logger = logging.getLogger("foldertree")

_MAX_ARCHIVE_MB_DEFAULT = 50
_MAX_PREVIEW_MB_DEFAULT = 5
_MAX_SESSIONS_DEFAULT = 64


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("%s=%r is not an integer, using %d", name, raw, default)
        return default
    return value if value > 0 else default


def max_archive_mb() -> int:
    return _int_env("FOLDERTREE_MAX_ARCHIVE_MB", _MAX_ARCHIVE_MB_DEFAULT)


def max_preview_mb() -> int:
    return _int_env("FOLDERTREE_MAX_PREVIEW_MB", _MAX_PREVIEW_MB_DEFAULT)


def max_sessions() -> int:
    return _int_env("FOLDERTREE_MAX_SESSIONS", _MAX_SESSIONS_DEFAULT)


def browse_root() -> Path | None:
    raw = os.getenv("FOLDERTREE_BROWSE_ROOT", "").strip()
    if not raw:
        return None
    return Path(raw).expanduser().resolve()


def api_key() -> str:
    return os.getenv("FOLDERTREE_API_KEY", "")
