"""
Chart-ready aggregates and the sales leaderboard.

Revenue is attributed to the calendar month of the signup date (in the
reference zone), not to the moment the status flag flipped.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Tuple

from salesdesk.services.commission import (
    DEFAULT_COMMISSION,
    CommissionMode,
    is_closed,
    is_signed,
    owner_commission_total,
    rules_of,
)
from salesdesk.services.timebuckets import ZoneLike, get_zone, local_date
from salesdesk.utils.money import ZERO, to_decimal

UNKNOWN_LABEL = "Unknown"
TREND_MONTHS = 12


@dataclass(frozen=True)
class ChartPoint:
    name: str
    value: int


@dataclass(frozen=True)
class MonthlyRow:
    month: str  # YYYY-MM
    label: str  # Jan, Feb, ...
    deals: int = 0
    mrr: Decimal = ZERO
    setup_fees: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.mrr + self.setup_fees


@dataclass(frozen=True)
class RuleView:
    threshold: int
    amount: Decimal


@dataclass(frozen=True)
class LeaderboardRow:
    id: str
    name: str
    email: str
    closed_deals: int
    total_value: Decimal
    commission: Decimal
    commission_rules: List[RuleView] = field(default_factory=list)


@dataclass(frozen=True)
class ChartData:
    lead_sources: List[ChartPoint] = field(default_factory=list)
    statuses: List[ChartPoint] = field(default_factory=list)
    monthly_trend: List[MonthlyRow] = field(default_factory=list)
    leaderboard: List[LeaderboardRow] = field(default_factory=list)


@dataclass(frozen=True)
class CommissionSummary:
    total_mrr: Decimal = ZERO
    total_setup_fees: Decimal = ZERO
    total_commissions: Decimal = ZERO

    @property
    def total_revenue(self) -> Decimal:
        return self.total_mrr + self.total_setup_fees


def _label(value: Any) -> str:
    if value is None:
        return UNKNOWN_LABEL
    text = getattr(value, "value", value)
    return str(text) if text else UNKNOWN_LABEL


def group_counts(leads: Iterable[Any], attribute: str) -> List[ChartPoint]:
    """Count leads per attribute value, in first-seen order."""
    counts: Dict[str, int] = {}
    for lead in leads:
        key = _label(getattr(lead, attribute, None))
        counts[key] = counts.get(key, 0) + 1
    return [ChartPoint(name=name, value=value) for name, value in counts.items()]


def trailing_months(now: datetime, zone: ZoneLike, count: int = TREND_MONTHS) -> List[Tuple[int, int]]:
    """(year, month) pairs for the `count` months ending with now's month."""
    today = local_date(now, zone)
    index = today.year * 12 + today.month - 1
    pairs = (divmod(i, 12) for i in range(index - count + 1, index + 1))
    return [(year, month0 + 1) for year, month0 in pairs]


def monthly_trend(
    leads: Iterable[Any],
    now: datetime,
    zone: ZoneLike,
    months: int = TREND_MONTHS,
) -> List[MonthlyRow]:
    """Closed deals and revenue per signup month, oldest month first."""
    tz = get_zone(zone)
    buckets: Dict[Tuple[int, int], List[Any]] = {
        key: [] for key in trailing_months(now, tz, months)
    }

    for lead in leads:
        if not is_closed(lead):
            continue
        signed = local_date(getattr(lead, "signup_date", None), tz)
        if signed is None:
            continue
        bucket = buckets.get((signed.year, signed.month))
        if bucket is not None:
            bucket.append(lead)

    rows = []
    for (year, month), bucket in buckets.items():
        rows.append(
            MonthlyRow(
                month=f"{year:04d}-{month:02d}",
                label=datetime(year, month, 1).strftime("%b"),
                deals=len(bucket),
                mrr=sum((to_decimal(getattr(lead, "mrr", None)) for lead in bucket), ZERO),
                setup_fees=sum((to_decimal(getattr(lead, "setup_fee", None)) for lead in bucket), ZERO),
            )
        )
    return rows


def leaderboard(
    leads: Iterable[Any],
    users: Iterable[Any],
    mode: CommissionMode = CommissionMode.TIERED_BY_VOLUME,
    default_amount: Decimal = DEFAULT_COMMISSION,
) -> List[LeaderboardRow]:
    """One row per user, most closed deals first."""
    signed = [lead for lead in leads if is_signed(lead)]

    rows = []
    for user in users:
        own = [lead for lead in signed if lead.owner_id == user.id]
        total_value = sum(
            (
                to_decimal(getattr(lead, "mrr", None)) + to_decimal(getattr(lead, "setup_fee", None))
                for lead in own
            ),
            ZERO,
        )
        rows.append(
            LeaderboardRow(
                id=user.id,
                name=user.name,
                email=user.email,
                closed_deals=len(own),
                total_value=total_value,
                commission=owner_commission_total(own, user, mode, default_amount),
                commission_rules=[
                    RuleView(threshold=rule.threshold, amount=to_decimal(rule.amount))
                    for rule in sorted(rules_of(user), key=lambda rule: rule.threshold)
                ],
            )
        )

    rows.sort(key=lambda row: row.closed_deals, reverse=True)
    return rows


def project_charts(
    leads: Iterable[Any],
    users: Iterable[Any],
    now: datetime,
    zone: ZoneLike,
    commission_mode: CommissionMode = CommissionMode.TIERED_BY_VOLUME,
    default_amount: Decimal = DEFAULT_COMMISSION,
) -> ChartData:
    """
    Build every chart dataset for the reports page from one filtered set.

    Args:
        leads: Leads already filtered by date range and/or owner
        users: Team members with their commission_rules loaded
        now: Reference instant for the trailing 12-month window
        zone: Reference timezone for month boundaries
        commission_mode: Rule interpretation for leaderboard commission
        default_amount: Per-deal fallback commission
    """
    leads = list(leads)
    return ChartData(
        lead_sources=group_counts(leads, "lead_source"),
        statuses=group_counts(leads, "status"),
        monthly_trend=monthly_trend(leads, now, zone),
        leaderboard=leaderboard(leads, list(users), commission_mode, default_amount),
    )


def commission_summary(charts: ChartData, leads: Iterable[Any]) -> CommissionSummary:
    """Revenue and commission totals for the commissions tab and export."""
    closed = [lead for lead in leads if is_closed(lead)]
    return CommissionSummary(
        total_mrr=sum((to_decimal(getattr(lead, "mrr", None)) for lead in closed), ZERO),
        total_setup_fees=sum((to_decimal(getattr(lead, "setup_fee", None)) for lead in closed), ZERO),
        total_commissions=sum((row.commission for row in charts.leaderboard), ZERO),
    )
