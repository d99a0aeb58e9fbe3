"""Aggregates v1 API route modules for a single include at app startup."""

from fastapi import APIRouter

from .routes.analyses import router as analyses_router
from .routes.health import router as health_router

api_v1_router = APIRouter()
api_v1_router.include_router(health_router)
api_v1_router.include_router(analyses_router)
