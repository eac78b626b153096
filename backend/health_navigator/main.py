"""
Health Navigator - Main FastAPI Application
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import auth_router, chat_router, fitness_router, medications_router
from .config import Settings
from .core.container import ServiceContainer
from .core.exceptions import HealthNavigatorError
from .core.logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .models import Notice

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Explicit settings (loaded from the environment if None)
        container: Prebuilt services (built from settings at startup if None)
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown events."""
        # Startup
        setup_logging(settings)
        app.state.container = container or ServiceContainer.from_settings(settings)

        logger.info(f"Starting {settings.app_name} v{settings.app_version}")
        logger.info(f"Document store: {settings.document_store}")
        logger.info(f"Log level: {settings.log_level.upper()}")
        logger.info(f"Debug mode: {settings.debug}")
        yield
        # Shutdown
        await app.state.container.aclose()
        logger.info(f"Shutting down {settings.app_name}")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Personal health assistant: medication reminders, Google Fit steps and an AI navigator",
        lifespan=lifespan
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add request logging middleware (after CORS)
    if settings.log_api_requests:
        app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(HealthNavigatorError)
    async def health_navigator_error_handler(request: Request, exc: HealthNavigatorError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "notice": Notice.error(exc.message).model_dump()},
        )

    # Include routers
    app.include_router(auth_router)
    app.include_router(medications_router)
    app.include_router(fitness_router)
    app.include_router(chat_router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "app": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "message": "Welcome to Health Navigator"
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        container: ServiceContainer = request.app.state.container
        return {
            "status": "healthy",
            "storage": settings.document_store,
            "assistant_configured": container.assistant.is_configured,
            "google_fit_configured": container.fitness.client.is_configured,
            "version": settings.app_version
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "health_navigator.main:app",
        host="0.0.0.0",
        port=8000,
        reload=False
    )
