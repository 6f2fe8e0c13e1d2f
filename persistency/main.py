"""
FastAPI application entry point for the Persistency Analysis API.

This module configures logging, CORS and the API routers, and starts the
ASGI server when executed directly.

The service is stateless: every request carries the roster files it
analyzes, so there is nothing to open or close at startup beyond logging.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from persistency import __version__
from persistency.core.config import get_settings
from persistency.api import api_router
from persistency.services.carriers import list_carriers

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Log the registered carrier adapters

    On shutdown:
        - Log shutdown message
    """
    # Startup
    carriers = ', '.join(config.key for config in list_carriers())
    logger.info(f"{settings.app_name} starting with carriers: {carriers}")

    yield

    # Shutdown
    logger.info(f"{settings.app_name} shutting down")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description=(
        "Multi-carrier policy persistency analysis. "
        "Normalizes carrier roster exports, classifies policy persistency "
        "over 3/6/9-month and all-time windows, and flags lapsing policies."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "persistency.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
