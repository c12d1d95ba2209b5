"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from command_x.api.routes import (
    accounting_router,
    health_router,
    payment_items_router,
    projects_router,
    work_orders_router,
)
from command_x.config import get_settings
from command_x.database import dispose_db, init_db
from command_x.logging_config import configure_logging
from command_x.services.errors import (
    CommandXError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    configure_logging()
    await init_db()
    logger.info("Command X payment item service started")
    yield
    # Shutdown
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title="Command X Payment Items API",
        description="Payment items, multi-role approvals and budget rollups",
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(CommandXError)
    async def service_error_handler(request: Request, exc: CommandXError) -> JSONResponse:
        """Translate service errors into status codes."""
        status_code = status.HTTP_400_BAD_REQUEST
        for error_type, code in ERROR_STATUS.items():
            if isinstance(exc, error_type):
                status_code = code
                break
        content: dict[str, object] = {"detail": str(exc), "code": exc.code}
        if isinstance(exc, ValidationError):
            content["errors"] = exc.errors
        return JSONResponse(status_code=status_code, content=content)

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(payment_items_router, prefix="/api")
    app.include_router(work_orders_router, prefix="/api")
    app.include_router(projects_router, prefix="/api")
    app.include_router(accounting_router, prefix="/api")

    return app


# Default app instance for uvicorn
app = create_app()
