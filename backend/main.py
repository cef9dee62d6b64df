"""FastAPI application entry point.

Single Responsibility: Configure the FastAPI application and map service
errors onto the {success: false, error} envelope.

Run with:  uvicorn backend.main:create_app --factory
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from regulium import __version__
from regulium.services.container import ComplianceServices, build_services
from regulium.services.errors import NotFoundError, ServiceError, ValidationError

from .routes import catalog, compliance, feedback, system
from .schemas import ErrorResponse

logger = logging.getLogger(__name__)

# Application metadata
APP_TITLE = "Regulium Compliance API"
APP_DESCRIPTION = "REST API for LLM-assisted regulatory compliance checks"
APP_VERSION = __version__

# CORS configuration
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",      # Next.js dev server
    "http://127.0.0.1:3000",
    "http://localhost:5173",      # Vite dev server
    "http://127.0.0.1:5173",
]


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        return _error(400, str(exc))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(500, str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
            for err in exc.errors()
        )
        return _error(400, f"Invalid request: {details}")

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")


def create_app(services: ComplianceServices | None = None) -> FastAPI:
    """Create the FastAPI app around an explicit service container."""
    services = services or build_services()

    app = FastAPI(
        title=APP_TITLE,
        description=APP_DESCRIPTION,
        version=APP_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.services = services

    cors_origins = list(dict.fromkeys(DEFAULT_CORS_ORIGINS + list(services.settings.cors_origins)))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # Include API routers
    app.include_router(system.create_router(services), prefix="/api")
    app.include_router(catalog.create_router(services), prefix="/api")
    app.include_router(compliance.create_router(services), prefix="/api")
    app.include_router(feedback.create_router(services), prefix="/api")

    @app.get("/")
    async def root():
        """Service metadata."""
        return {
            "name": APP_TITLE,
            "version": APP_VERSION,
            "docs": "/api/docs",
            "endpoints": {
                "health": "/api/health",
                "laws": "/api/laws",
                "features": "/api/features",
                "compliance": "/api/compliance/check",
                "discovery": "/api/compliance/check-feature",
                "feedback": "/api/feedback",
                "refresh": "/api/data/refresh",
            },
        }

    return app
