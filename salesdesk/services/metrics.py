"""
Summary metrics for the reports dashboard.

Every function here is a pure pass over in-memory leads. Missing
amounts count as 0 and every ratio with a zero denominator is 0.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from dateutil.relativedelta import relativedelta

from salesdesk.models.lead import LeadStatus
from salesdesk.services.commission import is_closed
from salesdesk.utils.dates import parse_instant
from salesdesk.utils.money import ZERO, round_half_up, to_decimal

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)

PRESETS = {
    "week": relativedelta(days=7),
    "month": relativedelta(months=1),
    "quarter": relativedelta(months=3),
    "year": relativedelta(years=1),
}


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] window of instants."""

    start: datetime
    end: datetime

    def __post_init__(self):
        object.__setattr__(self, "start", parse_instant(self.start))
        object.__setattr__(self, "end", parse_instant(self.end))
        if self.start is None or self.end is None:
            raise ValueError("DateRange needs two valid instants")

    def contains(self, value: Any) -> bool:
        instant = parse_instant(value)
        return instant is not None and self.start <= instant <= self.end

    def previous_month(self) -> "DateRange":
        """Same window moved back one calendar month."""
        return DateRange(self.start - relativedelta(months=1), self.end - relativedelta(months=1))


@dataclass(frozen=True)
class Metrics:
    total_mrr: Decimal = ZERO
    total_setup_fees: Decimal = ZERO
    closed_deals_count: int = 0
    new_leads_count: int = 0
    conversion_rate: int = 0
    demos_booked: int = 0
    demo_comparison_rate: float = 0.0


def conversion_rate(closed: int, total: int) -> int:
    """Whole-number percentage of closed over total; 0 when total is 0."""
    if total <= 0:
        return 0
    return int(round_half_up(Decimal(closed) * 100 / Decimal(total)))


def comparison_rate(current: int, previous: int) -> float:
    """
    Percentage change from previous to current, one decimal place.

    From zero to anything is +100%, zero to zero is 0%.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    change = (Decimal(current) - Decimal(previous)) * 100 / Decimal(previous)
    return float(round_half_up(change, 1))


def count_demos(leads: Iterable[Any], date_range: Optional[DateRange]) -> int:
    dated = (getattr(lead, "demo_date", None) for lead in leads)
    if date_range is None:
        return sum(1 for value in dated if parse_instant(value) is not None)
    return sum(1 for value in dated if date_range.contains(value))


def compute_metrics(
    leads: Iterable[Any],
    all_leads: Optional[Iterable[Any]] = None,
    date_range: Optional[DateRange] = None,
) -> Metrics:
    """
    Reduce already-filtered leads to dashboard metrics.

    Args:
        leads: Leads already filtered by date range and/or owner
        all_leads: Unfiltered leads; demo counts use these because demo
            timing is independent of the close/signup filter
        date_range: The active filter window, used for demo counts and
            the month-over-month comparison

    Returns:
        Metrics with zeros for empty input
    """
    leads = list(leads)
    demo_source = list(all_leads) if all_leads is not None else leads

    total_mrr = ZERO
    total_setup_fees = ZERO
    closed = 0
    funnel = 0
    for lead in leads:
        if is_closed(lead):
            closed += 1
            total_mrr += to_decimal(getattr(lead, "mrr", None))
            total_setup_fees += to_decimal(getattr(lead, "setup_fee", None))
        # Leads still waiting on their first demo are not in the funnel yet
        if getattr(lead, "status", None) != LeadStatus.DEMO_SCHEDULED:
            funnel += 1

    demos = count_demos(demo_source, date_range)
    if date_range is not None:
        previous = count_demos(demo_source, date_range.previous_month())
        demo_change = comparison_rate(demos, previous)
    else:
        demo_change = 0.0

    return Metrics(
        total_mrr=total_mrr,
        total_setup_fees=total_setup_fees,
        closed_deals_count=closed,
        new_leads_count=funnel,
        conversion_rate=conversion_rate(closed, funnel),
        demos_booked=demos,
        demo_comparison_rate=demo_change,
    )


def preset_range(preset: str, now: datetime) -> DateRange:
    """Trailing week/month/quarter/year window ending at now."""
    try:
        delta = PRESETS[preset]
    except KeyError:
        raise ValueError(f"Unknown period preset: {preset}") from None
    return DateRange(now - delta, now)


def lead_anchor_date(lead: Any) -> Optional[datetime]:
    """Signup date for signed deals, creation time for everything else."""
    return parse_instant(getattr(lead, "signup_date", None)) or parse_instant(
        getattr(lead, "created_at", None)
    )


def filter_leads(
    leads: Iterable[Any],
    date_range: Optional[DateRange] = None,
    owner_id: Optional[str] = None,
    status: Optional[str] = None,
) -> List[Any]:
    """Caller-side filter applied before compute_metrics and project_charts."""
    result = []
    for lead in leads:
        if owner_id is not None and getattr(lead, "owner_id", None) != owner_id:
            continue
        if status is not None and getattr(lead, "status", None) != status:
            continue
        if date_range is not None and not date_range.contains(lead_anchor_date(lead)):
            continue
        result.append(lead)
    return result


def recent_closed_deals(leads: Iterable[Any], limit: int = 5) -> List[Any]:
    """Closed leads, most recently closed first."""
    closed = [lead for lead in leads if is_closed(lead)]
    closed.sort(
        key=lambda lead: parse_instant(getattr(lead, "closed_at", None)) or _EARLIEST,
        reverse=True,
    )
    return closed[:limit]
