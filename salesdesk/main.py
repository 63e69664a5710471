"""
SalesDesk - sales CRM backend

Main FastAPI application with:
- Cookie JWT authentication (admin / rep)
- Lead pipeline with notes and commission overrides
- Reports: metrics, charts, leaderboard, demo bookings, HTML export
- Server-sent change events
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import func, select

from salesdesk.api import api_router
from salesdesk.config import settings
from salesdesk.db import get_db_context
from salesdesk.models import CommissionRule, User
from salesdesk.scheduler.jobs import scheduler, setup_scheduler
from salesdesk.utils.password import hash_password

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def ensure_admin_account() -> None:
    """Create the configured admin account if no admin exists yet."""
    async with get_db_context() as db:
        admins = await db.scalar(
            select(func.count()).select_from(User).where(User.is_admin == True)
        )
        if admins:
            return

        logger.info("Creating admin account...")
        db.add(
            User(
                name="Admin",
                email=settings.admin_email.lower(),
                password_hash=hash_password(settings.admin_password),
                is_admin=True,
                is_active=True,
                commission_rules=[
                    CommissionRule(threshold=0, amount=settings.default_commission_amount)
                ],
            )
        )
        logger.info(f"Admin account created: {settings.admin_email}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
    - Creates the admin account if none exists
    - Starts background jobs

    Shutdown:
    - Stops background jobs
    """
    logger.info("Starting SalesDesk...")

    await ensure_admin_account()

    if settings.enable_scheduler:
        setup_scheduler()
        scheduler.start()

    logger.info(f"SalesDesk started (reporting timezone {settings.reference_timezone})")

    yield

    logger.info("Shutting down SalesDesk...")
    if scheduler.running:
        scheduler.shutdown(wait=False)


# Create FastAPI application
app = FastAPI(
    title="SalesDesk",
    description="Sales CRM: leads, commissions and reporting",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

app.include_router(api_router)  # /api/* endpoints


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "salesdesk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
    )
