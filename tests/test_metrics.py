"""
Tests for the metrics aggregator and lead filters.
"""

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from salesdesk.models.lead import LeadStatus
from salesdesk.services.metrics import (
    DateRange,
    Metrics,
    comparison_rate,
    compute_metrics,
    conversion_rate,
    filter_leads,
    preset_range,
    recent_closed_deals,
)


def _dt(*args):
    return datetime(*args, tzinfo=timezone.utc)


def _make_lead(**kwargs):
    defaults = {
        "id": "lead",
        "status": LeadStatus.WARM_LEAD,
        "owner_id": "u1",
        "mrr": None,
        "setup_fee": None,
        "demo_date": None,
        "signup_date": None,
        "closed_at": None,
        "created_at": _dt(2026, 1, 1),
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


# ── Rates ─────────────────────────────────────────────────


class TestRates:
    def test_conversion_zero_total(self):
        assert conversion_rate(0, 0) == 0

    def test_conversion_rounds_half_up(self):
        assert conversion_rate(1, 8) == 13  # 12.5
        assert conversion_rate(1, 3) == 33
        assert conversion_rate(2, 3) == 67

    def test_comparison_from_zero(self):
        assert comparison_rate(5, 0) == 100.0
        assert comparison_rate(0, 0) == 0.0

    def test_comparison_one_decimal(self):
        assert comparison_rate(3, 2) == 50.0
        assert comparison_rate(1, 3) == -66.7
        assert comparison_rate(2, 4) == -50.0


# ── compute_metrics ───────────────────────────────────────


class TestComputeMetrics:
    def test_empty_input(self):
        assert compute_metrics([]) == Metrics()

    def test_totals_and_funnel(self):
        leads = [
            _make_lead(status=LeadStatus.CLOSED, mrr=Decimal("100"), setup_fee=Decimal("500")),
            _make_lead(status=LeadStatus.CLOSED, mrr=None, setup_fee="abc"),
            _make_lead(status=LeadStatus.WARM_LEAD, mrr=Decimal("999")),
            _make_lead(status=LeadStatus.DEMO_SCHEDULED),
            _make_lead(status=LeadStatus.LOST),
        ]
        metrics = compute_metrics(leads)

        assert metrics.total_mrr == Decimal("100")
        assert metrics.total_setup_fees == Decimal("500")
        assert metrics.closed_deals_count == 2
        # Demo Scheduled is not in the funnel yet
        assert metrics.new_leads_count == 4
        assert metrics.conversion_rate == 50

    def test_demos_without_range_count_all_dated(self):
        leads = [
            _make_lead(demo_date=_dt(2026, 10, 2)),
            _make_lead(demo_date="2026-09-15T10:00:00Z"),
            _make_lead(demo_date="not a date"),
            _make_lead(),
        ]
        metrics = compute_metrics(leads)
        assert metrics.demos_booked == 2
        assert metrics.demo_comparison_rate == 0.0

    def test_demo_comparison_against_previous_month(self):
        leads = [
            _make_lead(demo_date=_dt(2026, 10, 2)),
            _make_lead(demo_date=_dt(2026, 10, 20)),
            _make_lead(demo_date=_dt(2026, 9, 15)),
            _make_lead(demo_date=_dt(2026, 8, 15)),
        ]
        october = DateRange(_dt(2026, 10, 1), _dt(2026, 10, 31, 23, 59, 59))
        metrics = compute_metrics([], all_leads=leads, date_range=october)

        assert metrics.demos_booked == 2
        assert metrics.demo_comparison_rate == 100.0

    def test_demos_use_all_leads_when_given(self):
        filtered = [_make_lead(status=LeadStatus.CLOSED)]
        everything = filtered + [_make_lead(demo_date=_dt(2026, 10, 5))]
        metrics = compute_metrics(filtered, all_leads=everything)
        assert metrics.closed_deals_count == 1
        assert metrics.demos_booked == 1


# ── Ranges and filters ────────────────────────────────────


class TestDateRange:
    def test_invalid_bounds_rejected(self):
        with pytest.raises(ValueError):
            DateRange("nope", _dt(2026, 1, 1))

    def test_strings_are_parsed(self):
        window = DateRange("2026-10-01T00:00:00Z", "2026-10-31T00:00:00Z")
        assert window.contains(_dt(2026, 10, 15))
        assert not window.contains(_dt(2026, 11, 1))
        assert not window.contains(None)

    def test_previous_month(self):
        window = DateRange(_dt(2026, 3, 31), _dt(2026, 3, 31, 12))
        previous = window.previous_month()
        assert previous.start == _dt(2026, 2, 28)

    def test_preset_month(self):
        now = _dt(2026, 10, 19, 12)
        window = preset_range("month", now)
        assert window.start == _dt(2026, 9, 19, 12)
        assert window.end == now

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            preset_range("decade", _dt(2026, 10, 19))


class TestFilterLeads:
    def test_signup_date_anchor_with_created_fallback(self):
        window = DateRange(_dt(2026, 10, 1), _dt(2026, 10, 31))
        signed_in_window = _make_lead(id="a", signup_date=_dt(2026, 10, 5), created_at=_dt(2026, 1, 1))
        created_in_window = _make_lead(id="b", created_at=_dt(2026, 10, 6))
        signed_outside = _make_lead(id="c", signup_date=_dt(2026, 9, 5), created_at=_dt(2026, 10, 6))

        result = filter_leads([signed_in_window, created_in_window, signed_outside], window)
        assert [lead.id for lead in result] == ["a", "b"]

    def test_owner_and_status(self):
        leads = [
            _make_lead(id="a", owner_id="u1", status=LeadStatus.CLOSED),
            _make_lead(id="b", owner_id="u2", status=LeadStatus.CLOSED),
            _make_lead(id="c", owner_id="u1", status=LeadStatus.LOST),
        ]
        assert [l.id for l in filter_leads(leads, owner_id="u1")] == ["a", "c"]
        assert [l.id for l in filter_leads(leads, owner_id="u1", status=LeadStatus.CLOSED)] == ["a"]

    def test_no_filters_keeps_everything(self):
        leads = [_make_lead(id=str(i)) for i in range(3)]
        assert filter_leads(leads) == leads


class TestRecentClosedDeals:
    def test_newest_first_with_limit(self):
        leads = [
            _make_lead(id="old", status=LeadStatus.CLOSED, closed_at=_dt(2026, 1, 1)),
            _make_lead(id="undated", status=LeadStatus.CLOSED),
            _make_lead(id="new", status=LeadStatus.CLOSED, closed_at=_dt(2026, 10, 1)),
            _make_lead(id="open", status=LeadStatus.HOT_LEAD, closed_at=_dt(2026, 12, 1)),
        ]
        assert [l.id for l in recent_closed_deals(leads)] == ["new", "old", "undated"]
        assert [l.id for l in recent_closed_deals(leads, limit=1)] == ["new"]
