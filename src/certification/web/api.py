"""FastAPI application factory.

Main entry point for the Certification Web API.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from certification.core.errors import (
    AuthorizationError,
    CertificationError,
    CourseNotFound,
    ExternalTransferError,
    ValidationError,
)
from certification.core.platform import CertificationPlatform
from certification.store.state_repository import get_data_dir, load_platform
from certification.web.routes import courses_router, health_router, treasury_router

logger = structlog.get_logger(__name__)


def status_for_error(error: CertificationError) -> int:
    """HTTP status code for a domain error."""
    if isinstance(error, ValidationError):
        return 422
    if isinstance(error, AuthorizationError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(error, CourseNotFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, ExternalTransferError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_409_CONFLICT


async def certification_error_handler(request: Request, exc: CertificationError) -> JSONResponse:
    """Render domain errors with their code and offending values."""
    logger.info(
        "api_domain_error",
        path=request.url.path,
        error=exc.code,
        details=exc.to_dict()["details"],
    )
    return JSONResponse(status_code=status_for_error(exc), content=exc.to_dict())


def create_app(
    platform: CertificationPlatform | None = None,
    data_dir: Path | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        platform: Platform to serve. Loaded from data_dir when omitted.
        data_dir: Where state is saved after each change. When a platform is
            passed without data_dir, state is kept in memory only.

    Returns:
        Configured FastAPI app instance
    """
    if platform is None:
        data_dir = data_dir or get_data_dir()
        platform = load_platform(data_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            "api_startup",
            courses=len(platform.course_ids()),
            data_dir=str(data_dir) if data_dir else None,
        )
        yield

    app = FastAPI(
        title="Certification API",
        description="Course places, evaluations and certificates",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.platform = platform
    app.state.data_dir = data_dir

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(CertificationError, certification_error_handler)

    app.include_router(health_router)
    app.include_router(courses_router)
    app.include_router(treasury_router)

    return app


# Default app instance for uvicorn
app = create_app()
