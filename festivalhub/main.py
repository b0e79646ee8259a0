"""ASGI entry point: ``uvicorn festivalhub.main:app``."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from festivalhub.api.v1.router import api_router
from festivalhub.config import settings
from festivalhub.core.exceptions import AppException, ValidationError
from festivalhub.core.logging_config import configure_logging
from festivalhub.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from festivalhub.database import close_db, init_db

logger = logging.getLogger(__name__)


def _error_body(detail, kind: str) -> dict:
    return {"detail": detail, "error": kind}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    if settings.debug:
        # Local runs skip Alembic
        await init_db()
    logger.info("FestivalHub %s ready (%s)", settings.app_version, settings.environment)
    try:
        yield
    finally:
        await close_db()


def create_application() -> FastAPI:
    """Build the app with its error handlers, middleware stack and routes."""
    interactive_docs = settings.debug
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Festival and performance workflow API",
        docs_url="/docs" if interactive_docs else None,
        redoc_url=None,
        openapi_url="/openapi.json" if interactive_docs else None,
        lifespan=lifespan,
    )

    @app.exception_handler(AppException)
    async def workflow_error_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.detail, exc.kind),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def payload_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Schema failures are reported with the same kind as service-level ones
        return JSONResponse(
            status_code=ValidationError.status,
            content=_error_body(jsonable_encoder(exc.errors()), ValidationError.kind),
        )

    # Starlette wraps in reverse order: the last one added runs first
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health", tags=["meta"])
    async def health() -> dict:
        return {"status": "healthy", "service": settings.app_name, "version": settings.app_version}

    @app.get("/", tags=["meta"])
    async def service_info() -> dict:
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "api": settings.api_prefix,
            "docs": "/docs" if interactive_docs else None,
        }

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "festivalhub.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=None if settings.debug else settings.workers,
    )
