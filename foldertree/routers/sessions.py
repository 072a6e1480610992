from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from fastapi.responses import PlainTextResponse

from foldertree.core.auth import require_api_key
from foldertree.core.nodes import count_items
from foldertree.core.paths import safe_export_filename
from foldertree.core.render import build_view, render_text
from foldertree.core.services.content_service import media_type_for, read_file
from foldertree.core.services.session_service import (
    SessionRegistry,
    TreeSession,
    ingest_directory_path,
)
from foldertree.deps import get_registry, get_session
from foldertree.models import (
    DirectoryIngestRequest,
    ErrorResponse,
    SessionSummary,
    TreeViewNode,
    TreeViewResponse,
)
from foldertree.services.upload_service import upload_archive_workflow

router = APIRouter(
    prefix="/sessions",
    tags=["sessions"],
    dependencies=[Depends(require_api_key)],
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    413: {"model": ErrorResponse},
    415: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}

SessionDep = Annotated[TreeSession, Depends(get_session)]


def _disposition(kind: str, filename: str) -> str:
    return f"{kind}; filename*=UTF-8''{quote(filename)}"


@router.post("", response_model=SessionSummary, status_code=status.HTTP_201_CREATED)
def create_session(sessions: SessionRegistry = Depends(get_registry)) -> SessionSummary:
    return SessionSummary(**sessions.create().summary())


@router.get("/{session_id}", response_model=SessionSummary, responses=ERROR_RESPONSES)
def session_summary(session: SessionDep) -> SessionSummary:
    return SessionSummary(**session.summary())


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT, responses=ERROR_RESPONSES)
def delete_session(session_id: str, sessions: SessionRegistry = Depends(get_registry)) -> Response:
    sessions.delete(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{session_id}/archive",
    response_model=SessionSummary,
    summary="Drop a ZIP archive",
    description="Accepts multipart/form-data with a .zip file; replaces the session's tree.",
    responses=ERROR_RESPONSES,
)
async def upload_archive(
    session: SessionDep,
    file: UploadFile | None = File(default=None, description="ZIP archive (.zip)"),
    collapsed: str | None = Form(default=None, description="Truthy values: 1,true,yes,on"),
) -> SessionSummary:
    return await upload_archive_workflow(session=session, file=file, collapsed=collapsed)


@router.post(
    "/{session_id}/directory",
    response_model=SessionSummary,
    summary="Drop a folder from the browse root",
    responses=ERROR_RESPONSES,
)
async def ingest_directory(session: SessionDep, payload: DirectoryIngestRequest) -> SessionSummary:
    await ingest_directory_path(session, payload.path, collapsed=payload.collapsed)
    return SessionSummary(**session.summary())


@router.get(
    "/{session_id}/text",
    response_class=PlainTextResponse,
    responses=ERROR_RESPONSES,
)
def tree_text(session: SessionDep, icons: bool = False) -> PlainTextResponse:
    tree = session.require_tree()
    # the plain view is always fully expanded; the icon copy follows the interactive state
    text = render_text(tree, icons=icons, expansion=session.expansion if icons else None)
    return PlainTextResponse(text)


@router.get(
    "/{session_id}/download",
    response_class=PlainTextResponse,
    responses=ERROR_RESPONSES,
)
def download_text(session: SessionDep) -> PlainTextResponse:
    tree = session.require_tree()
    filename = safe_export_filename(tree.name)
    return PlainTextResponse(
        render_text(tree),
        headers={"Content-Disposition": _disposition("attachment", filename)},
    )


@router.get("/{session_id}/view", response_model=TreeViewResponse, responses=ERROR_RESPONSES)
def tree_view(session: SessionDep) -> TreeViewResponse:
    tree = session.require_tree()
    return TreeViewResponse(
        session_id=session.id,
        item_count=count_items(tree.root),
        fully_expanded=session.expansion.is_fully_expanded(tree),
        root=TreeViewNode.model_validate(build_view(tree, session.expansion)),
    )


@router.get("/{session_id}/files", responses=ERROR_RESPONSES)
async def file_content(
    session: SessionDep,
    path: str = Query(..., description="Canonical file path inside the tree"),
) -> Response:
    node, data = await read_file(session.require_tree(), path)
    return Response(
        content=data,
        media_type=media_type_for(node.name),
        headers={"Content-Disposition": _disposition("inline", node.name)},
    )
