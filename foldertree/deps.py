from fastapi import Depends

from foldertree.core.auth import require_api_key
from foldertree.core.services.session_service import SessionRegistry, TreeSession, registry


def get_registry() -> SessionRegistry:
    return registry


def get_session(session_id: str, sessions: SessionRegistry = Depends(get_registry)) -> TreeSession:
    return sessions.get(session_id)


__all__ = ["require_api_key", "get_registry", "get_session"]
