"""FastAPI application factory for the GitViz visualization API."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from gitviz.api.routers.health import router as health_router
from gitviz.api.routers.repositories import router as repositories_router
from gitviz.api.routers.visualizations import router as visualizations_router
from gitviz.config import Settings, get_settings

API_PREFIX = "/api"

log = logger.bind(module="api.app")


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled error on {} {}: {}", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application instance."""

    settings = settings or get_settings()
    app = FastAPI(
        title=f"{settings.app_name} API",
        version="0.1.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.api_cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(health_router, prefix=API_PREFIX, tags=["health"])
    app.include_router(repositories_router, prefix=API_PREFIX, tags=["repositories"])
    app.include_router(visualizations_router, prefix=API_PREFIX, tags=["visualizations"])
    return app


# Uvicorn default import target: `uvicorn gitviz.api.app:app`
app = create_app()
