"""reelstore - FastAPI Application Entry Point.

Social metadata store for a decentralized video platform:
- Profiles, video metadata and per-video comments, tips and watch events
- Follow graph
- Text/tag discovery and per-video analytics

Request ID tracking and request logging wrap every call; repository errors are
mapped to HTTP status codes in one place.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.trustedhost import TrustedHostMiddleware

from app.config import ALLOWED_HOSTS, CORS_ORIGINS, DEBUG, STORE_BACKEND, logger
from app.core.repositories.exceptions import PermissionDeniedError, RepositoryError
from app.core.security.utils import log_security_event
from app.core.security.validation import ValidationError
from app.core.store import SocialStore, create_store
from app.middleware import RequestIDMiddleware, RequestLoggingMiddleware
from app.routers import comments, follows, profiles, search, tips, videos, watch
from app.schemas import ErrorResponse, HealthResponse
from app.version import __version__

ERROR_STATUS = {
    "not_found": 404,
    "already_exists": 409,
    "permission_denied": 403,
    "self_follow": 400,
    "already_following": 409,
    "not_following": 404,
    "size_limit_exceeded": 413,
    "upstream_failure": 502,
    "validation_error": 400,
    "backend_failure": 503,
}


def status_for(kind: str) -> int:
    return ERROR_STATUS.get(kind, 500)


# -----------------------------------------------------------------------------
# Application Lifespan
# -----------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("Starting reelstore v%s (%s backend)", __version__, STORE_BACKEND)
    yield
    logger.info("Shutting down reelstore")


# -----------------------------------------------------------------------------
# Application Factory
# -----------------------------------------------------------------------------

def create_app(store: Optional[SocialStore] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        store: Store to serve; built from configuration when omitted
    """
    app = FastAPI(
        title="reelstore",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None,
        openapi_url="/openapi.json" if DEBUG else None,
    )
    app.state.store = store if store is not None else create_store()

    # -------------------------------------------------------------------------
    # Middleware Stack (first added = last executed)
    # -------------------------------------------------------------------------

    app.add_middleware(
        RequestLoggingMiddleware,
        exclude_paths={"/health", "/ready"},
    )

    # Outside the logger so log lines carry the request ID
    app.add_middleware(RequestIDMiddleware)

    if ALLOWED_HOSTS and ALLOWED_HOSTS != ["*"]:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=ALLOWED_HOSTS,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        max_age=600,
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------

    @app.exception_handler(RepositoryError)
    async def repository_exception_handler(request: Request, exc: RepositoryError):
        if isinstance(exc, PermissionDeniedError):
            log_security_event(
                "permission_denied",
                request=request,
                details={"path": request.url.path, "reason": str(exc)},
            )
        status_code = status_for(exc.kind)
        if status_code >= 500:
            logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(detail=str(exc), error=exc.kind).model_dump(),
        )

    @app.exception_handler(ValidationError)
    async def input_exception_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=status_for(exc.kind),
            content=ErrorResponse(detail=exc.message, error=exc.kind).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors with clean messages."""
        clean_errors = [
            {"field": ".".join(str(loc) for loc in err.get("loc", [])), "message": err.get("msg", "Invalid value")}
            for err in exc.errors()[:5]
        ]
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": clean_errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", "unknown")
        logger.exception("Unhandled exception in request %s: %s", request_id, exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "request_id": request_id},
        )

    # -------------------------------------------------------------------------
    # Health Check Endpoints
    # -------------------------------------------------------------------------

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers and orchestrators."""
        return HealthResponse(
            status="healthy",
            version=__version__,
            timestamp=datetime.now(timezone.utc),
            backend=STORE_BACKEND,
        )

    @app.get("/ready", tags=["Health"])
    async def readiness_check():
        return {"status": "ready"}

    # -------------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------------

    for module in (profiles, videos, comments, tips, watch, follows, search):
        app.include_router(module.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        limit_concurrency=100,
        limit_max_requests=10000,
    )
