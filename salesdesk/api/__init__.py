"""API router aggregation."""

from fastapi import APIRouter

from salesdesk.api.auth import router as auth_router
from salesdesk.api.events import router as events_router
from salesdesk.api.health import router as health_router
from salesdesk.api.leads import router as leads_router
from salesdesk.api.reports import router as reports_router
from salesdesk.api.users import router as users_router

# Main API router (for /api/* endpoints)
api_router = APIRouter(prefix="/api")

api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(leads_router)
api_router.include_router(users_router)
api_router.include_router(reports_router)
api_router.include_router(events_router)

__all__ = ["api_router"]
