"""
Niko - Main Application Entry Point

Streaming language tutor with Notion vocabulary sync.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from niko.core.config import get_settings
from niko.core.exceptions import (
    AuthenticationError,
    BusinessLogicError,
    ConfigurationError,
    InfrastructureError,
    LLMError,
    NikoError,
    NotFoundError,
    ValidationError,
)
from niko.core.logger import setup_logging

_ERROR_STATUS: list[tuple[type[NikoError], int]] = [
    (ConfigurationError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (BusinessLogicError, status.HTTP_409_CONFLICT),
    (LLMError, status.HTTP_502_BAD_GATEWAY),
    (InfrastructureError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(error: NikoError) -> int:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    logger = setup_logging(settings.LOG_LEVEL)
    logger.info(f"Starting Niko in {settings.ENVIRONMENT} mode...")

    from niko.infrastructure.local.database import init_db

    await init_db()

    if not settings.inference_configured:
        logger.warning("GOOGLE_API_KEY is not set; chat will answer 503 until it is configured")

    yield

    # Shutdown
    logger.info("Shutting down Niko...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Niko",
        description="Streaming language tutor with Notion vocabulary sync",
        version=settings.APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    @app.exception_handler(NikoError)
    async def niko_error_handler(request: Request, exc: NikoError):
        status_code = status_for(exc)
        detail = exc.message
        if isinstance(exc, ConfigurationError):
            detail = f"{exc.message}. Check the server environment (.env) and restart."
        return JSONResponse(status_code=status_code, content={"detail": detail})

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from niko.api import chat, notion, preferences

    app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
    app.include_router(notion.router, prefix="/api/notion", tags=["notion"])
    app.include_router(preferences.router, prefix="/api/preferences", tags=["preferences"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": settings.APP_VERSION,
            "inference_configured": settings.inference_configured,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
