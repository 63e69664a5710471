"""
Tests for civil-day bucketing in the reference timezone.

New York dates used here:
- 2026-03-08: clocks go forward (23-hour day)
- 2026-10-19: a Monday, still on daylight time
"""

from datetime import date, datetime, timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

from salesdesk.services.timebuckets import (
    day_bounds,
    demo_booking_summary,
    month_bounds,
    month_days,
    week_bounds,
    within,
)

ZONE = "America/New_York"


def _dt(*args):
    return datetime(*args, tzinfo=timezone.utc)


def _booked(value):
    return SimpleNamespace(demo_booked_date=value, demo_date=None)


# ── Bounds ────────────────────────────────────────────────


class TestDayBounds:
    def test_evening_utc_belongs_to_previous_local_day(self):
        start, end = day_bounds("2026-10-20T02:00:00Z", ZONE)
        assert start == _dt(2026, 10, 19, 4)
        assert end == _dt(2026, 10, 20, 3, 59, 59, 999000)

    def test_dst_start_day(self):
        start, end = day_bounds(_dt(2026, 3, 8, 12), ZONE)
        assert start == _dt(2026, 3, 8, 5)
        assert end == _dt(2026, 3, 9, 3, 59, 59, 999000)

    def test_dst_end_day_is_25_hours(self):
        start, end = day_bounds(_dt(2026, 11, 1, 12), ZONE)
        assert start == _dt(2026, 11, 1, 4)
        assert end == _dt(2026, 11, 2, 4, 59, 59, 999000)
        # The repeated 01:00 hour belongs to the same local day
        assert day_bounds(_dt(2026, 11, 1, 5, 30), ZONE) == (start, end)
        assert day_bounds(_dt(2026, 11, 1, 6, 30), ZONE) == (start, end)

    def test_accepts_zoneinfo(self):
        assert day_bounds(_dt(2026, 10, 19, 15), ZoneInfo(ZONE)) == day_bounds(_dt(2026, 10, 19, 15), ZONE)

    def test_invalid_input_returns_none(self):
        assert day_bounds("yesterday-ish", ZONE) is None
        assert day_bounds(None, ZONE) is None

    def test_bounds_are_utc(self):
        start, end = day_bounds(_dt(2026, 10, 19, 15), ZONE)
        assert start.tzinfo == timezone.utc
        assert end.tzinfo == timezone.utc


class TestWeekAndMonth:
    def test_week_runs_monday_to_sunday(self):
        start, end = week_bounds(_dt(2026, 10, 21, 15), ZONE)
        assert start == _dt(2026, 10, 19, 4)
        assert end == _dt(2026, 10, 26, 3, 59, 59, 999000)

    def test_month_bounds(self):
        start, end = month_bounds(_dt(2026, 10, 21, 15), ZONE)
        assert start == _dt(2026, 10, 1, 4)
        assert end == _dt(2026, 11, 1, 3, 59, 59, 999000)

    def test_month_days(self):
        days = month_days(_dt(2026, 2, 10), ZONE)
        assert days[0] == date(2026, 2, 1)
        assert days[-1] == date(2026, 2, 28)

    def test_within_is_inclusive(self):
        bounds = day_bounds(_dt(2026, 10, 19, 15), ZONE)
        assert within(bounds[0], bounds)
        assert within(bounds[1], bounds)
        assert not within(None, bounds)


# ── Demo booking summary ──────────────────────────────────


class TestDemoBookingSummary:
    NOW = _dt(2026, 10, 21, 15)

    def test_counts(self):
        leads = [
            _booked("2026-10-21T13:00:00Z"),  # today
            _booked("2026-10-20T03:30:00Z"),  # Oct 19 23:30 local, this week
            _booked(_dt(2026, 10, 2, 12)),  # this month
            _booked(_dt(2026, 9, 30, 12)),  # last month
            _booked("2026-11-01T03:00:00Z"),  # Oct 31 23:00 local
            _booked(None),
            _booked("garbage"),
        ]
        summary = demo_booking_summary(leads, self.NOW, ZONE)

        assert summary.today == 1
        assert summary.this_week == 2
        assert summary.this_month == 4

    def test_daily_breakdown(self):
        leads = [_booked("2026-10-20T03:30:00Z"), _booked(_dt(2026, 10, 19, 15))]
        summary = demo_booking_summary(leads, self.NOW, ZONE)

        assert len(summary.daily) == 31
        assert [row.day.day for row in summary.daily] == list(range(1, 32))
        oct_19 = summary.daily[18]
        assert oct_19.count == 2
        assert oct_19.label == "October 19"
        assert sum(row.count for row in summary.daily) == 2

    def test_uses_booking_date_not_demo_date(self):
        lead = SimpleNamespace(demo_booked_date=None, demo_date=_dt(2026, 10, 21, 15))
        summary = demo_booking_summary([lead], self.NOW, ZONE)
        assert summary.today == 0

    def test_empty(self):
        summary = demo_booking_summary([], self.NOW, ZONE)
        assert (summary.today, summary.this_week, summary.this_month) == (0, 0, 0)
        assert all(row.count == 0 for row in summary.daily)
