"""
Health check endpoints.
"""

import logging

import redis.asyncio as redis
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config import media_storage_configured, settings
from database import engine
from services.responses import envelope

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Reports database, redis and media storage status.
    """
    health_status = {
        "api": "up",
        "database": "unknown",
        "redis": "unknown",
        "media_storage": "configured" if media_storage_configured() else "missing",
    }
    healthy = True

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        health_status["database"] = "up"
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("health_database_down error=%s", exc)
        health_status["database"] = "down"
        healthy = False

    try:
        client = redis.from_url(settings.REDIS_URL)
        try:
            await client.ping()
        finally:
            await client.aclose()
        health_status["redis"] = "up"
    except (RedisError, OSError) as exc:
        logger.warning("health_redis_down error=%s", exc)
        health_status["redis"] = "down"
        healthy = False

    return envelope(health_status, "healthy" if healthy else "degraded")


@router.get("/health/ready")
async def readiness_check():
    """Readiness probe: media storage must be configured to accept uploads."""
    if not media_storage_configured():
        missing = ["CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"]
        return JSONResponse(
            status_code=503,
            content=envelope({"ready": False, "missing": missing}, "media storage is not configured", status=503),
        )
    return envelope({"ready": True}, "ready")


@router.get("/health/live")
async def liveness_check():
    return envelope({"alive": True}, "alive")
