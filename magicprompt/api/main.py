"""Main FastAPI application with middleware and configuration."""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from magicprompt import __version__
from magicprompt.config import Settings, configure_logging
from magicprompt.schemas.error_models import (
    APIException,
    InternalServerError,
    ValidationError,
    create_error_response,
)
from magicprompt.services.magicprompt_service import MagicPromptService
from magicprompt.api.routes import magicprompt_router


logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses."""

    async def dispatch(self, request: Request, call_next):
        """Process request and log details.

        Args:
            request: HTTP request
            call_next: Next middleware/handler

        Returns:
            HTTP response
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        logger.info(
            f"Request {request_id}: {request.method} {request.url.path} "
            f"from {request.client.host if request.client else 'unknown'}"
        )

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request {request_id}: Error after {process_time:.3f}s - {str(e)}"
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            f"Request {request_id}: {response.status_code} "
            f"({process_time:.3f}s)"
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware turning uncaught exceptions into error responses."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Unexpected error: {e}", exc_info=True)
            error = InternalServerError(f"Internal server error: {str(e)}")
            return JSONResponse(status_code=error.status_code, content=error.detail)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Creates the MagicPrompt service on startup and closes its transport on
    shutdown.

    Args:
        app: FastAPI application instance
    """
    logger.info("Starting MagicPrompt API server...")

    if getattr(app.state, "magicprompt_service", None) is None:
        app.state.magicprompt_service = MagicPromptService(app.state.settings)
    app.state.startup_time = time.time()

    try:
        logger.info("Server startup completed successfully")
        yield
    finally:
        logger.info("Shutting down server...")
        await app.state.magicprompt_service.cleanup()
        logger.info("Server shutdown completed")


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[MagicPromptService] = None
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        settings: Application settings (optional)
        service: Prebuilt MagicPromptService (optional)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="MagicPrompt API",
        description="Prompt enhancement, captioning and chat through pluggable LLM backends",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan
    )

    # Last added middleware runs first
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    if settings.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=settings.cors_allow_methods,
            allow_headers=settings.cors_allow_headers,
            expose_headers=["X-Request-ID", "X-Process-Time"]
        )

    app.state.settings = settings
    app.state.magicprompt_service = service
    app.state.request_count = 0
    app.state.startup_time = time.time()

    return app


def setup_exception_handlers(app: FastAPI):
    """Set up global exception handlers.

    Args:
        app: FastAPI application
    """

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        request_id = getattr(request.state, "request_id", "unknown")
        logger.warning(f"Request {request_id}: {exc.status_code} - {exc.detail}")

        return JSONResponse(
            status_code=exc.status_code,
            content=exc.detail,
            headers={"X-Request-ID": request_id}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        request_id = getattr(request.state, "request_id", "unknown")
        logger.warning(f"Request {request_id}: Validation error - {exc}")

        error_details = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            error_details.append(f"{field}: {error['msg']}")

        validation_error = ValidationError("Invalid request: " + "; ".join(error_details))

        return JSONResponse(
            status_code=validation_error.status_code,
            content=validation_error.detail,
            headers={"X-Request-ID": request_id}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        request_id = getattr(request.state, "request_id", "unknown")
        logger.warning(f"Request {request_id}: HTTP {exc.status_code} - {exc.detail}")

        return JSONResponse(
            status_code=exc.status_code,
            content=create_error_response(
                message=str(exc.detail),
                error_type="http_error",
                code=str(exc.status_code)
            ),
            headers={"X-Request-ID": request_id}
        )


def create_application(
    settings: Optional[Settings] = None,
    service: Optional[MagicPromptService] = None
) -> FastAPI:
    """Create the main FastAPI application with all configurations.

    Args:
        settings: Application settings (optional)
        service: Prebuilt MagicPromptService (optional)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = Settings()
    configure_logging(settings.log_level)

    app = create_app(settings, service)
    setup_exception_handlers(app)
    app.include_router(magicprompt_router)

    @app.get("/health")
    async def health_check():
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "uptime": time.time() - app.state.startup_time,
            "version": __version__,
            "request_count": app.state.request_count
        }

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "MagicPrompt API",
            "version": __version__,
            "backends": sorted(settings.backends),
            "endpoints": {
                "phone_home": "/api/magicprompt/phone-home",
                "models": "/api/magicprompt/models",
                "health": "/health"
            },
            "documentation": "/docs" if settings.debug else None
        }

    return app
