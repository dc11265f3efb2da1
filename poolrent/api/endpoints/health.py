"""
Health check endpoints for MongoDB.
"""
from datetime import datetime

from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo.errors import PyMongoError

from poolrent.config import settings
from poolrent.db.mongodb import get_database
from poolrent.models.base import utcnow

router = APIRouter(tags=["Health"])

# Track application start time
_start_time = utcnow()


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    uptime_seconds: float


class ReadinessResponse(BaseModel):
    status: str
    timestamp: datetime
    database: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check():
    """Liveness check; does not touch the database."""
    now = utcnow()
    return HealthResponse(
        status="healthy",
        timestamp=now,
        version=settings.APP_VERSION,
        uptime_seconds=(now - _start_time).total_seconds()
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
)
async def readiness_check(db: AsyncIOMotorDatabase = Depends(get_database)):
    """Readiness check - verifies MongoDB connectivity."""
    try:
        await db.command("ping")
        return ReadinessResponse(status="ready", timestamp=utcnow(), database="connected")
    except PyMongoError:
        return ReadinessResponse(status="not_ready", timestamp=utcnow(), database="disconnected")
