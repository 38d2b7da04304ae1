from fastapi import APIRouter

from script_dispatch.interfaces.http.routers import auth, operations, scripts


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(auth.router, prefix="/auth", tags=["auth"])
    router.include_router(scripts.router, prefix="/scripts", tags=["scripts"])
    router.include_router(operations.router, prefix="/operations", tags=["operations"])
    return router


__all__ = [
    "create_api_router",
]
