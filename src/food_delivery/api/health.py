from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery.db.deps import get_async_session
from food_delivery.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", summary="Health check")
async def health_check(session: AsyncSession = Depends(get_async_session)):
    """
    Liveness plus a database round trip.
    """
    try:
        await session.execute(text("SELECT 1"))
        database = "ok"
    except Exception:
        logger.exception("Database health check failed")
        database = "unavailable"
    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "timestamp": datetime.now(timezone.utc),
    }
