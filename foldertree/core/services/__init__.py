from foldertree.core.services.content_service import read_file
from foldertree.core.services.session_service import (
    SessionRegistry,
    TreeSession,
    ingest,
    ingest_archive_upload,
    ingest_directory_path,
    registry,
)

__all__ = [
    "read_file",
    "SessionRegistry",
    "TreeSession",
    "ingest",
    "ingest_archive_upload",
    "ingest_directory_path",
    "registry",
]
