from typing import Annotated

from fastapi import APIRouter, Depends

from foldertree.core.auth import require_api_key
from foldertree.core.services.session_service import TreeSession
from foldertree.deps import get_session
from foldertree.models import ErrorResponse, ExpansionResponse, TogglePathRequest

router = APIRouter(
    prefix="/sessions/{session_id}/expansion",
    tags=["expansion"],
    dependencies=[Depends(require_api_key)],
)

ERROR_RESPONSES = {
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}

SessionDep = Annotated[TreeSession, Depends(get_session)]


def _state(session: TreeSession, toggled: bool | None = None) -> ExpansionResponse:
    return ExpansionResponse(
        expanded=list(session.expansion),
        fully_expanded=session.expansion.is_fully_expanded(session.tree),
        toggled=toggled,
    )


@router.get("", response_model=ExpansionResponse, responses=ERROR_RESPONSES)
def expansion_state(session: SessionDep) -> ExpansionResponse:
    return _state(session)


@router.post("/toggle", response_model=ExpansionResponse, responses=ERROR_RESPONSES)
def toggle(session: SessionDep, payload: TogglePathRequest) -> ExpansionResponse:
    session.require_tree()
    return _state(session, toggled=session.expansion.toggle(payload.path))


@router.post("/expand-all", response_model=ExpansionResponse, responses=ERROR_RESPONSES)
def expand_all(session: SessionDep) -> ExpansionResponse:
    session.expansion.expand_all(session.require_tree())
    return _state(session)


@router.post("/collapse-all", response_model=ExpansionResponse, responses=ERROR_RESPONSES)
def collapse_all(session: SessionDep) -> ExpansionResponse:
    session.require_tree()
    session.expansion.collapse_all()
    return _state(session)


@router.post("/toggle-all", response_model=ExpansionResponse, responses=ERROR_RESPONSES)
def toggle_all(session: SessionDep) -> ExpansionResponse:
    session.expansion.toggle_all(session.require_tree())
    return _state(session)
