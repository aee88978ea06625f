"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookshelf.api import api_router
from bookshelf.config import get_settings
from bookshelf.core.exceptions import AppException, NotFoundError
from bookshelf.core.logging import get_logger, setup_logging
from bookshelf.database import make_engine
from bookshelf.dependencies import get_book_store
from bookshelf.schemas.common import HealthResponse
from bookshelf.services.book_store import BookStore

logger = get_logger("main")


def create_app(store: Optional[BookStore] = None) -> FastAPI:
    """Build the application.

    With no ``store`` the pool is created from settings at startup and disposed
    at shutdown. A given store is used as-is and left open.
    """
    settings = get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup and shutdown."""
        # Startup
        owned = store is None
        if owned:
            engine = make_engine(settings)
            app.state.book_store = BookStore(engine)
            logger.info(f"Connection pool ready for {engine.url.render_as_string(hide_password=True)}")
        yield
        # Shutdown
        if owned:
            await app.state.book_store.close()
            logger.info("Connection pool closed")

    app = FastAPI(
        title=settings.app_name,
        description="Book record manager",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    if store is not None:
        app.state.book_store = store

    # Exception handlers
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """Handle application exceptions."""
        if isinstance(exc, NotFoundError):
            return Response(status_code=status.HTTP_404_NOT_FOUND)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.message,
                "error_code": exc.error_code,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle malformed or mistyped request bodies."""
        logger.debug(f"Rejected request to {request.url.path}: {len(exc.errors())} error(s)")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": "Malformed request body",
                "error_code": "VALIDATION_ERROR",
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        # The server re-raises after this reply and logs the traceback itself
        logger.error(f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    app.include_router(api_router)

    # Root endpoint
    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        """Liveness greeting."""
        return "Hello, world!"

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request) -> JSONResponse:
        """Health check endpoint, including database reachability."""
        book_store = get_book_store(request)
        healthy = await book_store.ping()
        body = HealthResponse(
            status="healthy" if healthy else "degraded",
            app=settings.app_name,
            database="ok" if healthy else "unavailable",
        )
        return JSONResponse(
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content=body.model_dump(),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "bookshelf.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
