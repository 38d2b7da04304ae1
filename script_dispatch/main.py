import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from script_dispatch import __version__
from script_dispatch.core.container import ApplicationContainer, get_container
from script_dispatch.interfaces.http import create_api_router


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[ApplicationContainer] = None) -> FastAPI:
    container = container or get_container()
    settings = container.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        await container.startup()
        try:
            yield
        finally:
            await container.shutdown()

    app = FastAPI(
        title=settings.project_name,
        description="Dispatch approved scripts to managed endpoints and track their results",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health", include_in_schema=False)
    async def health() -> dict:
        return {
            "status": "ok",
            "version": __version__,
            "adminservice_connected": container.adminservice.is_connected,
        }

    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_container().settings
    uvicorn.run(
        "script_dispatch.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.server.reload,
    )
