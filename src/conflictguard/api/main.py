"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from conflictguard import __version__
from conflictguard.config import get_settings
from conflictguard.exceptions import (
    AIServiceUnavailableError,
    ConflictGuardError,
    GraphStoreError,
    NotFoundError,
    ValidationError,
)
from conflictguard.logging_config import configure_logging
from conflictguard.storage.base import GraphStore

logger = structlog.get_logger(__name__)

STATUS_CODES: dict[type[ConflictGuardError], int] = {
    ValidationError: 422,
    NotFoundError: 404,
    AIServiceUnavailableError: 503,
    GraphStoreError: 503,
}


def error_response(exc: ConflictGuardError) -> JSONResponse:
    """Render a ConflictGuardError as ``{"error": message, "code": ..., ...}``."""
    status_code = next(
        (code for cls, code in STATUS_CODES.items() if isinstance(exc, cls)), 500
    )
    headers = None
    if isinstance(exc, AIServiceUnavailableError):
        headers = {"Retry-After": str(exc.retry_after_seconds)}
    return JSONResponse(
        status_code=status_code,
        content={"error": str(exc), **exc.extensions()},
        headers=headers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.environment == "production")
    logger.info("application_starting")
    logger.info(
        "configuration_loaded",
        environment=settings.environment,
        debug=settings.debug,
        graph_backend=settings.graph_backend,
    )

    yield

    from conflictguard.storage import get_graph_store

    (app.state.graph_store or get_graph_store()).close()
    logger.info("application_shutting_down")


def create_app(store: GraphStore | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    When ``store`` is given every service is built on it instead of the
    configured backend.
    """
    settings = get_settings()

    app = FastAPI(
        title="ConflictGuard API",
        description="Legal document conflict detection over a knowledge graph",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.graph_store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(ConflictGuardError)
    async def conflictguard_exception_handler(
        request: Request,
        exc: ConflictGuardError,
    ) -> JSONResponse:
        logger.warning(
            "request_failed",
            path=request.url.path,
            method=request.method,
            code=exc.code,
            error=str(exc),
        )
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = [str(part) for part in first.get("loc", ()) if part != "body"]
        field = ".".join(location) or "body"
        return error_response(ValidationError(first.get("msg", "Invalid request"), field))

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "code": ConflictGuardError.code,
                "detail": str(exc) if settings.debug else None,
            },
        )

    # Include routers
    from conflictguard.api.routes import conflicts, documents, entities

    app.include_router(documents.router, prefix="/api/v1/documents", tags=["documents"])
    app.include_router(entities.router, prefix="/api/v1/entities", tags=["entities"])
    app.include_router(conflicts.router, prefix="/api/v1/conflicts", tags=["conflicts"])

    if store is not None:
        from conflictguard.services.conflict_service import ConflictService, get_conflict_service
        from conflictguard.services.document_service import DocumentService, get_document_service
        from conflictguard.services.entity_service import EntityService, get_entity_service

        document_service = DocumentService(store=store)
        conflict_service = ConflictService(store=store)
        entity_service = EntityService(store=store)
        app.dependency_overrides[get_document_service] = lambda: document_service
        app.dependency_overrides[get_conflict_service] = lambda: conflict_service
        app.dependency_overrides[get_entity_service] = lambda: entity_service

    @app.get("/health")
    def health_check() -> dict:
        """Health check endpoint."""
        from conflictguard.services.llm_service import get_llm_service
        from conflictguard.storage import get_graph_store

        store_ok = (store or get_graph_store()).health_check()
        return {
            "status": "healthy" if store_ok else "degraded",
            "services": {
                "graph_store": store_ok,
                "llm": get_llm_service().health_check(),
            },
        }

    @app.get("/")
    def root() -> dict:
        """Root endpoint."""
        return {
            "name": "ConflictGuard API",
            "version": __version__,
            "docs": "/docs",
        }

    return app


# Create default app instance
app = create_app()
