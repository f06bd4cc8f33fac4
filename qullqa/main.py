"""Main FastAPI application entry point."""

import logging
import os
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from qullqa import __version__
from qullqa.api import api_router
from qullqa.config import Settings, get_settings
from qullqa.exceptions import (
    ArtifactNotFoundError,
    StorageIOError,
    ValidationFailureError,
    VersionConflictError,
)
from qullqa.logging import configure_logging
from qullqa.services.repository import ArtifactRepository

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle manager."""
    settings: Settings = app.state.settings

    logger.info(f"Starting {settings.app_name}...")
    settings.ensure_directories()
    logger.info(f"Storing artifacts in {settings.artifacts_dir}")
    logger.info(f"{settings.app_name} is running on {settings.public_base_url}")

    yield

    logger.info(f"{settings.app_name} stopped")


def register_exception_handlers(app: FastAPI) -> None:
    """Map repository errors to HTTP responses."""

    @app.exception_handler(ArtifactNotFoundError)
    async def not_found_handler(request: Request, exc: ArtifactNotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc)},
        )

    @app.exception_handler(VersionConflictError)
    async def version_conflict_handler(request: Request, exc: VersionConflictError):
        logger.error(f"Version conflict on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": str(exc)},
        )

    @app.exception_handler(StorageIOError)
    async def storage_error_handler(request: Request, exc: StorageIOError):
        logger.error(f"Storage failure on {request.url.path}: {exc}", exc_info=exc)
        cause = exc.__cause__
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": str(exc),
                "cause": f"{type(cause).__name__}: {cause}" if cause else None,
            },
        )

    @app.exception_handler(ValidationFailureError)
    async def validation_failure_handler(request: Request, exc: ValidationFailureError):
        logger.warning(f"Invalid request on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors with detailed information."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": "Validation error",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions."""
        logger.exception(f"Unhandled exception on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error",
                "type": type(exc).__name__,
                "path": str(request.url.path),
            },
        )


def create_app(
    settings: Settings | None = None,
    repository: ArtifactRepository | None = None,
) -> FastAPI:
    """Build the application with an explicitly constructed repository."""
    settings = settings or get_settings()
    repository = repository or ArtifactRepository(settings.artifacts_dir)

    app = FastAPI(
        title=settings.app_name,
        description="Versioned artifact store",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.repository = repository

    # Artifacts are fetched from arbitrary origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router)

    @app.get("/health")
    async def health_check():
        """Health check reporting whether the artifact store is usable."""
        artifacts_dir = app.state.repository.root
        writable = artifacts_dir.is_dir() and os.access(artifacts_dir, os.W_OK)

        checks = {
            "status": "healthy" if writable else "degraded",
            "app": settings.app_name,
            "version": __version__,
            "timestamp": datetime.now(UTC).isoformat(),
            "components": {
                "storage": "writable" if writable else "unavailable",
            },
        }
        if not writable:
            logger.error(f"Artifact directory {artifacts_dir} is not writable")

        status_code = 200 if writable else 503
        return JSONResponse(content=checks, status_code=status_code)

    return app


def run() -> None:
    """Run the service with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
