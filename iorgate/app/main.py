"""
iorgate - Address resolution and component persistence gateway

FastAPI application entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from iorgate import __version__
from iorgate.app.api import ior_router, ude_router
from iorgate.app.dependencies import (
    get_resolver,
    get_settings,
    initialize_services,
    shutdown_services,
)
from iorgate.config import AppSettings
from iorgate.errors import GatewayError, NotFound, UnsupportedOperation
from iorgate.runtime import ComponentResolver

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting iorgate services...")
    try:
        await initialize_services()
        logger.info("iorgate services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise

    yield

    # Shutdown
    logger.info("Shutting down iorgate services...")
    try:
        await shutdown_services()
        logger.info("iorgate services shut down successfully")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}", exc_info=True)


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Translate internal failures into JSON responses."""
    logger.warning(f"{request.method} {request.url.path} -> {exc.kind}: {exc.message}")
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


async def routing_error_handler(request: Request, exc: StarletteHTTPException):
    """Report unrouted verbs and paths in the gateway's own error shape."""
    if exc.status_code == 405:
        error: GatewayError = UnsupportedOperation(
            f"{request.method} is not supported on {request.url.path}"
        )
    elif exc.status_code == 404:
        error = NotFound(f"Nothing at {request.url.path}")
    else:
        return await http_exception_handler(request, exc)
    return await gateway_error_handler(request, error)


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (defaults to environment settings)
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="iorgate",
        description="Resolves ior address references and manages persisted components over HTTP",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(StarletteHTTPException, routing_error_handler)

    @app.get("/health", tags=["health"])
    async def health_check(
        resolver: ComponentResolver = Depends(get_resolver),
    ) -> dict[str, Any]:
        """Service status, store backend and live component count."""
        return {
            "status": "healthy",
            "service": settings.service_name,
            "version": __version__,
            "store": resolver.store.name,
            "components": resolver.live_count,
        }

    app.include_router(ude_router)
    app.include_router(ior_router)

    # Must come last: the mount matches every remaining path
    web_root = Path(settings.web_root)
    if web_root.is_dir():
        app.mount("/", StaticFiles(directory=web_root), name="static")
        logger.info(f"Serving static content from {web_root.resolve()}")
    else:
        logger.warning(f"Web root {web_root} does not exist, static content disabled")

    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "iorgate.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
