"""
FastAPI application factory for the Resource Proxy.

This module creates the FastAPI app with:
- CORS configuration
- Store, peer client and synchronizer wired from explicit Settings
- Error envelope for ProxyError and unexpected exceptions
- Collection and document routes

Each call to create_app() builds an isolated instance; nothing is shared
between apps, so tests can run several side by side.
"""

import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import API_VERSION, Settings
from ..errors import ProxyError
from ..schema import SchemaStore
from ..sync import PeerClient, SchemaSynchronizer
from .routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Close the peer client on shutdown."""
    yield

    await app.state.peer.close()


def create_app(
    settings: Settings | None = None,
    peer: PeerClient | None = None,
    clock: Callable[[], int] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Proxy configuration (loaded from env if not provided)
        peer: Peer client override; built from ``settings`` if not provided
        clock: Epoch-millis clock override for collection name suffixes
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Resource Proxy",
        description=(
            "Admin layer in front of a schema-based document store. "
            "Manages collection configs on disk and mirrors renames to the store."
        ),
        version=str(API_VERSION),
        lifespan=lifespan,
    )

    store = SchemaStore(settings.resources_directory)
    peer = peer or PeerClient(
        settings.peer_base_url,
        timeout=settings.peer_timeout,
        ssh_key=settings.peer_ssh_key,
    )
    synchronizer = SchemaSynchronizer(store, peer, clock=clock)

    app.state.settings = settings
    app.state.store = store
    app.state.peer = peer
    app.state.synchronizer = synchronizer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, settings.error_domain)

    app.include_router(router)

    @app.get("/health")
    async def health():
        return {"status": "healthy", "service": "resource-proxy", "peer": settings.peer_base_url}

    return app


def register_exception_handlers(app: FastAPI, domain: str) -> None:
    """Map ProxyError subclasses to their status codes and the error envelope."""

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
        if exc.code >= 500:
            logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(
            status_code=exc.code,
            content={"apiVersion": API_VERSION, "error": exc.to_dict(domain)},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"HTTP handler error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "apiVersion": API_VERSION,
                "error": {
                    "code": 500,
                    "domain": domain,
                    "message": "An unexpected error occurred",
                    "reason": "InternalError",
                },
            },
        )
