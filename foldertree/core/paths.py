from __future__ import annotations

import re


_ARCHIVE_SUFFIX_RE = re.compile(r"\.zip$", re.IGNORECASE)
_FILENAME_BAD_RE = re.compile(r"[^A-Za-z0-9_\s-]")
_WHITESPACE_RE = re.compile(r"\s+")
DEFAULT_EXPORT_FILENAME = "folder-structure.txt"


def join_path(parent: str, name: str) -> str:
    """Canonical path of ``name`` under ``parent``; the root's path is ``""``."""
    return f"{parent}/{name}" if parent else name


def split_segments(raw: str) -> list[str]:
    return [part for part in (raw or "").split("/") if part]


def is_archive_filename(filename: str | None) -> bool:
    return bool(filename and _ARCHIVE_SUFFIX_RE.search(filename))


def strip_archive_suffix(filename: str) -> str:
    segments = split_segments(filename.replace("\\", "/"))
    base = segments[-1] if segments else ""
    return _ARCHIVE_SUFFIX_RE.sub("", base)


def safe_export_filename(name: str | None) -> str:
    if not name:
        return DEFAULT_EXPORT_FILENAME
    clean = _FILENAME_BAD_RE.sub("", name).strip()
    clean = _WHITESPACE_RE.sub("-", clean)
    return f"{clean}-structure.txt" if clean else DEFAULT_EXPORT_FILENAME
