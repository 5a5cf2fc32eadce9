"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from automation.api.v1.dependencies.
"""

from fastapi import APIRouter

from automation.api.v1.endpoints import automation, health

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(automation.router, prefix="/automation", tags=["automation"])
