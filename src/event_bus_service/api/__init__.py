"""
API router configuration.
"""
from fastapi import APIRouter

from .routes.events import router as events_router
from .routes.health import router as health_router

# Create main API router
router = APIRouter()

# Include sub-routers
router.include_router(health_router)
router.include_router(events_router)
