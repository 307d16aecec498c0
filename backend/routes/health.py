"""
GET /health: liveness plus a database round trip.

Unauthenticated and outside the response envelope so load balancers can
read it directly.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db, ping_db

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(response: Response, db: AsyncSession = Depends(get_db)):
    try:
        connected = await ping_db(db)
    except SQLAlchemyError as e:
        logger.error(f"Database ping failed: {e}")
        connected = False

    if not connected:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {
        "status": "healthy" if connected else "unhealthy",
        "database_connected": connected,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
