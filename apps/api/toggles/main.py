"""
FastAPI application entry point.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from toggles.core.config import settings
from toggles.core.errors import ToggleError
from toggles.core.logging import configure_logging
from toggles.api.routes import router as api_router
from toggles.api.routes.actions import health_payload
from toggles.api.middleware.logging import LoggingMiddleware
from toggles.api.middleware.request_id import RequestIdMiddleware
from toggles.schemas.actions import HealthResponse

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # Middleware (order matters - last added is outermost)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Routes
    app.include_router(api_router, prefix="/api")

    # Exception handlers
    @app.exception_handler(ToggleError)
    async def toggle_error_handler(request: Request, exc: ToggleError):
        """Typed failures carry their own status and offending field."""
        logger.warning(
            "Action rejected",
            extra={"code": exc.code, "field": exc.field, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=jsonable_encoder(exc.to_dict()),
            headers={"WWW-Authenticate": "Bearer"} if exc.http_status == 401 else None,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": str(exc) if settings.debug else "An error occurred",
            },
        )

    # Health checks
    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Quick health check endpoint (for load balancers)."""
        return health_payload()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "toggles.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )
