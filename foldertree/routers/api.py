from fastapi import APIRouter

from foldertree.routers.expansion import router as expansion_router
from foldertree.routers.health import router as health_router
from foldertree.routers.sessions import router as sessions_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health_router)
api_router.include_router(sessions_router)
api_router.include_router(expansion_router)
