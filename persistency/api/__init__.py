"""
Persistency API package initialization.

This package contains FastAPI router modules for the persistency engine:
- analyze: Multi-carrier analysis and writing-agent extraction
- carriers: Registered carrier adapters
"""

from fastapi import APIRouter

# Import router modules
from persistency.api.analyze import router as analyze_router
from persistency.api.carriers import router as carriers_router

# Create main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(analyze_router, tags=["analysis"])
api_router.include_router(carriers_router, tags=["carriers"])

# Export all routers for selective imports
__all__ = [
    "api_router",
    "analyze_router",
    "carriers_router",
]
