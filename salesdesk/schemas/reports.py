"""Reports page schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from salesdesk.schemas.user import CommissionRuleSchema


class MetricsResponse(BaseModel):
    """Summary cards."""

    total_mrr: Decimal
    total_setup_fees: Decimal
    closed_deals_count: int
    new_leads_count: int
    conversion_rate: int  # percentage
    demos_booked: int
    demo_comparison_rate: float  # percentage vs previous month

    model_config = {"from_attributes": True}


class ChartPointResponse(BaseModel):
    name: str
    value: int

    model_config = {"from_attributes": True}


class MonthlyRowResponse(BaseModel):
    month: str
    label: str
    deals: int
    mrr: Decimal
    setup_fees: Decimal
    total: Decimal

    model_config = {"from_attributes": True}


class LeaderboardRowResponse(BaseModel):
    id: str
    name: str
    email: str
    closed_deals: int
    total_value: Decimal
    commission: Decimal
    commission_rules: List[CommissionRuleSchema] = []

    model_config = {"from_attributes": True}


class ChartDataResponse(BaseModel):
    lead_sources: List[ChartPointResponse]
    statuses: List[ChartPointResponse]
    monthly_trend: List[MonthlyRowResponse]
    leaderboard: List[LeaderboardRowResponse]

    model_config = {"from_attributes": True}


class CommissionSummaryResponse(BaseModel):
    total_mrr: Decimal
    total_setup_fees: Decimal
    total_revenue: Decimal
    total_commissions: Decimal

    model_config = {"from_attributes": True}


class LeaderboardResponse(BaseModel):
    rows: List[LeaderboardRowResponse]
    summary: CommissionSummaryResponse


class DailyCountResponse(BaseModel):
    day: date
    label: str
    count: int

    model_config = {"from_attributes": True}


class DemoBookingResponse(BaseModel):
    """Demo bookings per civil day in the reference timezone."""

    timezone: str
    today: int
    this_week: int
    this_month: int
    daily: List[DailyCountResponse]


class ClosedDealResponse(BaseModel):
    id: str
    contact_name: str
    business_name: Optional[str] = None
    mrr: Decimal
    setup_fee: Decimal
    closed_at: Optional[datetime] = None
    owner_id: str

    model_config = {"from_attributes": True}
