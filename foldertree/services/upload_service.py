from fastapi import UploadFile

from foldertree.core.services.session_service import TreeSession, ingest_archive_upload
from foldertree.models import SessionSummary
from foldertree.upload_utils import parse_boolish, validate_upload_file


async def upload_archive_workflow(
    *,
    session: TreeSession,
    file: UploadFile | None,
    collapsed: str | None,
) -> SessionSummary:
    validated_file = validate_upload_file(file)
    await ingest_archive_upload(
        session,
        filename=validated_file.filename,
        size=validated_file.size,
        read=validated_file.read,
        collapsed=parse_boolish(collapsed),
    )
    return SessionSummary(**session.summary())
