"""
Main application for Threatboard.

This module sets up the FastAPI application with CORS and WebSocket integration.
"""

from contextlib import asynccontextmanager
from typing import Callable
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from threatboard.core.config import settings
from threatboard.core.logging import logger, setup_logging
from threatboard.api.dashboard import router as dashboard_router
from threatboard.api.health import router as health_router
from threatboard.api.websocket import router as websocket_router
from threatboard.services.dashboard_session import DashboardSession, create_session


def create_app(session_factory: Callable[[], DashboardSession] = create_session) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        session_factory: Builds the dashboard session started with the app.

    Returns:
        Configured application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"Starting {settings.PROJECT_NAME}")
        session = session_factory()
        session.start()
        app.state.session = session

        yield

        # Shutdown
        logger.info(f"Shutting down {settings.PROJECT_NAME}")
        session.stop()
        app.state.session = None

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.DESCRIPTION,
        version=settings.VERSION,
        lifespan=lifespan
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", tags=["Root"])
    async def root():
        """
        Root endpoint.

        Returns:
            Basic API information.
        """
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "description": settings.DESCRIPTION
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Global exception handler.

        Returns:
            JSON response with error details.
        """
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"}
        )

    # Include routers
    app.include_router(dashboard_router, prefix="/api/dashboard", tags=["Dashboard"])
    app.include_router(health_router, prefix="/api/health", tags=["Health"])
    app.include_router(websocket_router, tags=["WebSocket"])

    return app


# Create FastAPI app
app = create_app()


# Run the application
if __name__ == "__main__":
    setup_logging()
    uvicorn.run(
        "threatboard.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG
    )
