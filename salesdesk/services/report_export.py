"""
HTML export of the reports page.

Renders the same Metrics / ChartData / CommissionSummary objects the
reports API serves, so the export never disagrees with the dashboard.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from salesdesk.services.charts import ChartData, CommissionSummary
from salesdesk.services.metrics import DateRange, Metrics
from salesdesk.services.timebuckets import ZoneLike, get_zone
from salesdesk.utils.money import safe_format

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["currency"] = safe_format


def render_report(
    metrics: Metrics,
    charts: ChartData,
    summary: CommissionSummary,
    generated_at: datetime,
    zone: ZoneLike,
    date_range: Optional[DateRange] = None,
    owner_name: Optional[str] = None,
    title: str = "Sales Report",
) -> str:
    """
    Render the report as a standalone HTML document.

    Args:
        metrics: Output of compute_metrics for the filtered leads
        charts: Output of project_charts for the same leads
        summary: Output of commission_summary
        generated_at: Timestamp printed in the header
        zone: Reference timezone for displayed dates
        date_range: Active filter window, if any
        owner_name: Rep the report is scoped to, if any
    """
    tz = get_zone(zone)
    context: Dict[str, Any] = {
        "title": title,
        "metrics": metrics,
        "charts": charts,
        "summary": summary,
        "generated_at": generated_at.astimezone(tz),
        "range_start": date_range.start.astimezone(tz) if date_range else None,
        "range_end": date_range.end.astimezone(tz) if date_range else None,
        "owner_name": owner_name,
    }
    html = _env.get_template("report.html").render(**context)
    logger.info(f"Rendered report export ({len(charts.leaderboard)} reps)")
    return html
