"""
Civil-day bucketing in a fixed reference timezone.

Booking activity is reported in one zone (US Eastern by default) no
matter where staff or the server are located. All bounds are returned
as aware UTC datetimes covering 00:00:00.000 to 23:59:59.999 local time.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional, Tuple, Union
from zoneinfo import ZoneInfo

from salesdesk.utils.dates import parse_instant

Bounds = Tuple[datetime, datetime]
ZoneLike = Union[str, ZoneInfo]


def get_zone(zone: ZoneLike) -> ZoneInfo:
    """Accept either an IANA name or a ZoneInfo."""
    if isinstance(zone, ZoneInfo):
        return zone
    return ZoneInfo(zone)


def local_date(value: Any, zone: ZoneLike) -> Optional[date]:
    """Calendar date the instant falls on in the zone."""
    instant = parse_instant(value)
    if instant is None:
        return None
    return instant.astimezone(get_zone(zone)).date()


def _span(first: date, last: date, tz: ZoneInfo) -> Bounds:
    start = datetime(first.year, first.month, first.day, tzinfo=tz)
    end = datetime(last.year, last.month, last.day, 23, 59, 59, 999000, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def bounds_for_date(day: date, zone: ZoneLike) -> Bounds:
    """Bounds of a known calendar date in the zone."""
    return _span(day, day, get_zone(zone))


def day_bounds(value: Any, zone: ZoneLike) -> Optional[Bounds]:
    """
    Start and end of the civil day containing `value` in `zone`.

    Returns None when the value cannot be parsed.
    """
    day = local_date(value, zone)
    if day is None:
        return None
    return bounds_for_date(day, zone)


def week_bounds(now: datetime, zone: ZoneLike) -> Bounds:
    """Monday 00:00 through Sunday 23:59:59.999 of the week containing now."""
    today = local_date(now, zone)
    monday = today - timedelta(days=today.weekday())
    return _span(monday, monday + timedelta(days=6), get_zone(zone))


def month_bounds(now: datetime, zone: ZoneLike) -> Bounds:
    """First to last calendar day of the month containing now."""
    today = local_date(now, zone)
    last_day = calendar.monthrange(today.year, today.month)[1]
    return _span(today.replace(day=1), today.replace(day=last_day), get_zone(zone))


def month_days(now: datetime, zone: ZoneLike) -> List[date]:
    """Every calendar date of the month containing now, ascending."""
    today = local_date(now, zone)
    last_day = calendar.monthrange(today.year, today.month)[1]
    return [today.replace(day=d) for d in range(1, last_day + 1)]


def within(value: Any, bounds: Bounds) -> bool:
    instant = parse_instant(value)
    if instant is None:
        return False
    return bounds[0] <= instant <= bounds[1]


@dataclass(frozen=True)
class DailyCount:
    day: date
    count: int

    @property
    def label(self) -> str:
        return f"{self.day.strftime('%B')} {self.day.day}"


@dataclass(frozen=True)
class DemoBookingSummary:
    today: int = 0
    this_week: int = 0
    this_month: int = 0
    daily: List[DailyCount] = field(default_factory=list)


def demo_booking_summary(
    leads: Iterable[Any],
    now: datetime,
    zone: ZoneLike,
) -> DemoBookingSummary:
    """
    Count demo bookings (by demo_booked_date) for today, this week,
    this month, and each day of this month.
    """
    tz = get_zone(zone)
    booked = [
        instant
        for instant in (parse_instant(getattr(lead, "demo_booked_date", None)) for lead in leads)
        if instant is not None
    ]

    def count(bounds: Bounds) -> int:
        return sum(1 for instant in booked if bounds[0] <= instant <= bounds[1])

    daily = [DailyCount(day=d, count=count(bounds_for_date(d, tz))) for d in month_days(now, tz)]

    return DemoBookingSummary(
        today=count(day_bounds(now, tz)),
        this_week=count(week_bounds(now, tz)),
        this_month=count(month_bounds(now, tz)),
        daily=daily,
    )
