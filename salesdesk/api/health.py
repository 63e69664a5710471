"""
Health check endpoints.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.config import settings
from salesdesk.db import get_db
from salesdesk.models import Lead
from salesdesk.scheduler.jobs import scheduler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """Returns 200 if the service is running."""
    return {
        "status": "healthy",
        "service": "salesdesk",
        "timezone": settings.reference_timezone,
    }


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """
    Readiness check with database connectivity.

    Reports the lead count so an empty or wrong database is obvious.
    """
    try:
        await db.execute(text("SELECT 1"))
        lead_count = await db.scalar(select(func.count()).select_from(Lead))
    except Exception as e:
        logger.warning(f"Readiness check failed: {e}")
        return {
            "status": "not_ready",
            "database": f"error: {e}",
        }

    return {
        "status": "ready",
        "database": "connected",
        "leads": lead_count or 0,
        "scheduler": "running" if scheduler.running else "stopped",
    }


@router.get("/live")
async def liveness_check():
    """Returns 200 while the process is alive."""
    return {"status": "alive"}
