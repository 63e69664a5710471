"""
Tests for the HTML report export.
"""

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

from salesdesk.models.lead import LeadStatus
from salesdesk.services.charts import commission_summary, project_charts
from salesdesk.services.metrics import DateRange, compute_metrics
from salesdesk.services.report_export import render_report

ZONE = "America/New_York"
NOW = datetime(2026, 10, 19, 15, tzinfo=timezone.utc)


def _inputs(rep_name="Alice"):
    user = SimpleNamespace(
        id="u1",
        name=rep_name,
        email="alice@example.com",
        commission_rules=[SimpleNamespace(threshold=0, amount=Decimal("249"))],
    )
    leads = [
        SimpleNamespace(
            id="l1",
            status=LeadStatus.CLOSED,
            owner_id="u1",
            lead_source="Referral",
            mrr=Decimal("1000"),
            setup_fee=Decimal("500"),
            commission_amount=None,
            demo_date=None,
            signup_date=datetime(2026, 10, 5, tzinfo=timezone.utc),
            closed_at=datetime(2026, 10, 5, tzinfo=timezone.utc),
        )
    ]
    metrics = compute_metrics(leads)
    charts = project_charts(leads, [user], NOW, ZONE)
    summary = commission_summary(charts, leads)
    return metrics, charts, summary


def test_report_contains_figures():
    metrics, charts, summary = _inputs()
    html = render_report(metrics, charts, summary, generated_at=NOW, zone=ZONE)

    assert html.startswith("<!DOCTYPE html>")
    assert "$1,000" in html  # MRR
    assert "$1,500" in html  # revenue
    assert "$249" in html  # commission
    assert "Alice" in html
    assert "Referral" in html
    assert "All time" in html


def test_report_shows_period_and_rep():
    metrics, charts, summary = _inputs()
    window = DateRange(datetime(2026, 10, 1, 4, tzinfo=timezone.utc), NOW)
    html = render_report(
        metrics,
        charts,
        summary,
        generated_at=NOW,
        zone=ZONE,
        date_range=window,
        owner_name="Alice",
    )

    assert "Oct 01, 2026" in html
    assert "Rep: Alice" in html
    assert "All time" not in html


def test_report_escapes_names():
    metrics, charts, summary = _inputs(rep_name="<b>Mallory</b>")
    html = render_report(metrics, charts, summary, generated_at=NOW, zone=ZONE)

    assert "<b>Mallory</b>" not in html
    assert "&lt;b&gt;Mallory&lt;/b&gt;" in html
