"""Business logic services."""

from salesdesk.services.charts import ChartData, commission_summary, project_charts
from salesdesk.services.commission import (
    CommissionMode,
    CommissionRuleError,
    resolve_commission,
    tiered_commission_total,
    validate_commission_rules,
)
from salesdesk.services.lifecycle import apply_status, next_status, pending_kickoffs, todo_items
from salesdesk.services.metrics import DateRange, Metrics, compute_metrics, filter_leads, preset_range
from salesdesk.services.notifier import ChangeEvent, ChangeFeed, change_feed
from salesdesk.services.timebuckets import day_bounds, demo_booking_summary, month_bounds, week_bounds

__all__ = [
    "ChartData",
    "commission_summary",
    "project_charts",
    "CommissionMode",
    "CommissionRuleError",
    "resolve_commission",
    "tiered_commission_total",
    "validate_commission_rules",
    "apply_status",
    "next_status",
    "pending_kickoffs",
    "todo_items",
    "DateRange",
    "Metrics",
    "compute_metrics",
    "filter_leads",
    "preset_range",
    "ChangeEvent",
    "ChangeFeed",
    "change_feed",
    "day_bounds",
    "demo_booking_summary",
    "month_bounds",
    "week_bounds",
]
