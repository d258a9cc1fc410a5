"""
argocheck HTTP surface.

FastAPI application with health checks and the hook-ingestion routers
mounted under the hooks prefix. Startup runs the service bootstrap
(application indexing, then webhook reconciliation).
"""
import logging
from contextlib import asynccontextmanager
from typing import Iterable

from fastapi import APIRouter, FastAPI
from pydantic import BaseModel


logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str


def create_app(server, hook_routers: Iterable[APIRouter] = ()) -> FastAPI:
    """
    Build the FastAPI application for a server.

    Args:
        server: argocheck Server; exposed to routes as ``request.app.state.server``
        hook_routers: Hook-ingestion routers, mounted under the hooks prefix

    Returns:
        FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup/shutdown."""
        server.bootstrap()
        logger.info(f"argocheck ready, hooks mounted at {server.hooks_prefix()}")
        yield

    app = FastAPI(
        title="argocheck",
        description="Argo CD webhook bootstrap and hook ingestion",
        lifespan=lifespan
    )
    app.state.server = server
    app.state.config = server.cfg

    @app.get("/ready", response_model=HealthResponse)
    async def ready():
        return HealthResponse(status="ok")

    @app.get("/live", response_model=HealthResponse)
    async def live():
        return HealthResponse(status="ok")

    prefix = server.hooks_prefix()
    for router in hook_routers:
        app.include_router(router, prefix=prefix)

    return app
