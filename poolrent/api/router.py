"""
API router - aggregates all endpoint routers.
"""
from fastapi import APIRouter

from poolrent.api.endpoints import auth, health, pools, uploads, users

# Create main API router
api_router = APIRouter()

# Include endpoint routers
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(pools.router)
api_router.include_router(uploads.router)
