"""
Reports API endpoints.

Every endpoint loads leads once, applies the same period/owner filter,
and hands the result to the pure reporting services. Reps only ever
see their own numbers.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.api.loaders import load_leads, load_users
from salesdesk.auth.dependencies import get_current_user
from salesdesk.config import settings
from salesdesk.db import get_db
from salesdesk.models import Lead, User
from salesdesk.schemas.reports import (
    ChartDataResponse,
    ClosedDealResponse,
    CommissionSummaryResponse,
    DemoBookingResponse,
    LeaderboardResponse,
    LeaderboardRowResponse,
    MetricsResponse,
)
from salesdesk.services.charts import commission_summary, project_charts
from salesdesk.services.metrics import (
    PRESETS,
    DateRange,
    compute_metrics,
    filter_leads,
    preset_range,
    recent_closed_deals,
)
from salesdesk.services.report_export import render_report
from salesdesk.services.timebuckets import demo_booking_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])

ALL_TIME = "all"


@dataclass
class ReportScope:
    """Leads and users a report is computed over."""
    now: datetime
    date_range: Optional[DateRange]
    owner: Optional[User]
    owner_leads: List[Lead]  # owner filter only
    leads: List[Lead]  # owner and period filter
    users: List[User]


def resolve_range(
    preset: Optional[str],
    start: Optional[datetime],
    end: Optional[datetime],
    now: datetime,
) -> Optional[DateRange]:
    """Explicit start/end wins over a preset; 'all' or nothing means no range."""
    try:
        if start is not None or end is not None:
            if start is None or end is None:
                raise ValueError("Both start and end are required")
            date_range = DateRange(start, end)
            if date_range.start > date_range.end:
                raise ValueError("start must not be after end")
            return date_range
        if preset and preset != ALL_TIME:
            return preset_range(preset, now)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    return None


async def get_report_scope(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    preset: Optional[str] = Query(None, description=f"{', '.join(PRESETS)} or {ALL_TIME}"),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    owner_id: Optional[str] = Query(None),
) -> ReportScope:
    now = datetime.now(timezone.utc)
    date_range = resolve_range(preset, start, end, now)

    if not current_user.is_admin:
        owner_id = current_user.id

    users = await load_users(db)
    owner = None
    if owner_id is not None:
        owner = next((user for user in users if user.id == owner_id), None)
        if owner is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        users = [owner]

    owner_leads = await load_leads(db, owner_id=owner_id)
    return ReportScope(
        now=now,
        date_range=date_range,
        owner=owner,
        owner_leads=owner_leads,
        leads=filter_leads(owner_leads, date_range),
        users=users,
    )


def _charts(scope: ReportScope):
    return project_charts(
        scope.leads,
        scope.users,
        scope.now,
        settings.reference_timezone,
        commission_mode=settings.commission_mode,
        default_amount=settings.default_commission_amount,
    )


@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics(scope: ReportScope = Depends(get_report_scope)):
    """Summary cards for the selected period."""
    metrics = compute_metrics(scope.leads, scope.owner_leads, scope.date_range)
    return MetricsResponse.model_validate(metrics)


@router.get("/charts", response_model=ChartDataResponse)
async def get_charts(scope: ReportScope = Depends(get_report_scope)):
    """Lead source, status, monthly trend and leaderboard datasets."""
    return ChartDataResponse.model_validate(_charts(scope))


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(scope: ReportScope = Depends(get_report_scope)):
    """Leaderboard rows with the commissions tab totals."""
    charts = _charts(scope)
    summary = commission_summary(charts, scope.leads)
    return LeaderboardResponse(
        rows=[LeaderboardRowResponse.model_validate(row) for row in charts.leaderboard],
        summary=CommissionSummaryResponse.model_validate(summary),
    )


@router.get("/demos", response_model=DemoBookingResponse)
async def get_demo_bookings(scope: ReportScope = Depends(get_report_scope)):
    """
    Demo bookings today / this week / this month, plus one row per day
    of the current month, in the reference timezone.
    """
    summary = demo_booking_summary(scope.owner_leads, scope.now, settings.reference_timezone)
    return DemoBookingResponse(
        timezone=settings.reference_timezone,
        today=summary.today,
        this_week=summary.this_week,
        this_month=summary.this_month,
        daily=[
            {"day": row.day, "label": row.label, "count": row.count}
            for row in summary.daily
        ],
    )


@router.get("/closed-deals", response_model=List[ClosedDealResponse])
async def get_recent_closed_deals(
    scope: ReportScope = Depends(get_report_scope),
    limit: int = Query(5, ge=1, le=100),
):
    """Most recently closed deals in the period."""
    return recent_closed_deals(scope.leads, limit)


@router.get("/export", response_class=HTMLResponse)
async def export_report(scope: ReportScope = Depends(get_report_scope)):
    """Printable HTML version of the reports page."""
    metrics = compute_metrics(scope.leads, scope.owner_leads, scope.date_range)
    charts = _charts(scope)
    summary = commission_summary(charts, scope.leads)

    html = render_report(
        metrics,
        charts,
        summary,
        generated_at=scope.now,
        zone=settings.reference_timezone,
        date_range=scope.date_range,
        owner_name=scope.owner.name if scope.owner else None,
    )
    filename = f"sales-report-{scope.now.strftime('%Y-%m-%d')}.html"
    return HTMLResponse(
        content=html,
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )
