"""
FastAPI main application for the Bookshelf API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import partial
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookshelf.config import APIConfig, config
from bookshelf.handlers import MSG_INVALID_PAYLOAD, BookHandlers
from bookshelf.middleware import RequestLoggingMiddleware
from bookshelf.models import Envelope, HealthResponse, OutcomeStatus
from bookshelf.routes import build_router
from bookshelf.rules import describe_errors, generate_book_id
from utilities.logger import setup_logging

# Setup logging
logger = structlog.get_logger(__name__)

MSG_PAGE_NOT_FOUND = "Halaman tidak ditemukan"
MSG_METHOD_NOT_ALLOWED = "Halaman tidak dapat diakses dengan method tersebut"
MSG_INTERNAL_ERROR = "Internal server error"


def _fail(status_code: int, message: str, data: Optional[dict] = None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=Envelope(status=OutcomeStatus.FAIL, message=message, data=data).to_content(),
        headers=headers
    )


def create_app(settings: APIConfig = config, handlers: Optional[BookHandlers] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: API configuration
        handlers: Book handlers to serve; a fresh in-memory store is created when omitted

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        setup_logging(
            log_level=settings.log_level,
            log_format=settings.log_format,
            log_file=settings.log_file,
            debug=settings.debug
        )
        logger.info("Starting Bookshelf API", version=settings.api_version)
        yield
        logger.info("Shutting down Bookshelf API", books=app.state.handlers.count())

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan
    )

    if handlers is None:
        handlers = BookHandlers(id_factory=partial(generate_book_id, settings.id_length))
    app.state.handlers = handlers

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Exception handlers
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle routing errors (unknown path, unsupported method) and other HTTP exceptions."""
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message = MSG_PAGE_NOT_FOUND
        elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            message = MSG_METHOD_NOT_ALLOWED
        else:
            message = str(exc.detail)
        return _fail(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request bodies that do not match the book payload shape."""
        errors = describe_errors(exc.errors())
        logger.warning("Invalid request payload", path=request.url.path, errors=len(errors))
        return _fail(status.HTTP_400_BAD_REQUEST, MSG_INVALID_PAYLOAD, data={"errors": errors})

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error("Unhandled exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=Envelope(
                status=OutcomeStatus.ERROR,
                message=MSG_INTERNAL_ERROR,
                data={"detail": str(exc)} if settings.debug else None
            ).to_content()
        )

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc),
            version=settings.api_version,
            books=app.state.handlers.count()
        )

    app.include_router(build_router())
    return app


# Create FastAPI application
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "bookshelf.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
