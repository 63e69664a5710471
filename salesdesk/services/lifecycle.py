"""
Lead lifecycle: status cycling, close-date bookkeeping, follow-up and
kickoff to-do lists.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable, List, Optional

from salesdesk.models.lead import LeadStatus
from salesdesk.services.commission import close_order_key, is_closed
from salesdesk.services.timebuckets import ZoneLike, day_bounds, within
from salesdesk.utils.money import to_decimal

logger = logging.getLogger(__name__)

# Order used by the "advance" action; wraps from LOST back to the start
ADVANCE_ORDER = (
    LeadStatus.DEMO_SCHEDULED,
    LeadStatus.WARM_LEAD,
    LeadStatus.HOT_LEAD,
    LeadStatus.CLOSED,
    LeadStatus.LOST,
)

CLOSE_DATE_FIELDS = ("signup_date", "closed_at")

FOLLOW_UP_DELAY = timedelta(days=2)


def next_status(status: Any) -> LeadStatus:
    """
    Status that follows `status` in the advance cycle.

    A no-show goes back to DEMO_SCHEDULED so the demo can be rebooked.
    """
    current = LeadStatus(status)
    if current not in ADVANCE_ORDER:
        return LeadStatus.DEMO_SCHEDULED
    index = ADVANCE_ORDER.index(current)
    return ADVANCE_ORDER[(index + 1) % len(ADVANCE_ORDER)]


def apply_status(lead: Any, status: Any, now: datetime) -> bool:
    """
    Move a lead to `status`.

    Entering CLOSED stamps closed_at and signup_date with `now`, unless
    the lead was already closed with a close date.

    Returns:
        True if the close dates were stamped
    """
    new_status = LeadStatus(status)
    was_closed = is_closed(lead)
    lead.status = new_status

    if new_status == LeadStatus.CLOSED and (not was_closed or lead.closed_at is None):
        lead.closed_at = now
        lead.signup_date = now
        return True
    return False


def set_close_date(lead: Any, field_name: str, value: Optional[datetime]) -> None:
    """
    Set signup_date or closed_at.

    While the lead is CLOSED the two dates move together; otherwise only
    the named field changes.
    """
    if field_name not in CLOSE_DATE_FIELDS:
        raise ValueError(f"Not a close date field: {field_name}")

    setattr(lead, field_name, value)
    if is_closed(lead):
        for other in CLOSE_DATE_FIELDS:
            setattr(lead, other, value)


def recompute_value(lead: Any) -> None:
    lead.value = to_decimal(lead.mrr) + to_decimal(lead.setup_fee)


def default_follow_up(demo_date: Optional[datetime]) -> Optional[datetime]:
    """Follow-up two days after the demo for newly booked leads."""
    if demo_date is None:
        return None
    return demo_date + FOLLOW_UP_DELAY


@dataclass(frozen=True)
class TodoItem:
    lead_id: str
    contact_name: str
    business_name: str
    due: datetime
    kind: str  # "follow-up" or "demo"


def todo_items(
    leads: Iterable[Any],
    user_id: str,
    now: datetime,
    zone: ZoneLike,
) -> List[TodoItem]:
    """Follow-ups due and demos happening today, for one rep's leads."""
    today = day_bounds(now, zone)
    items = []
    for lead in leads:
        if lead.owner_id != user_id:
            continue
        if lead.next_follow_up is not None and within(lead.next_follow_up, today):
            items.append(
                TodoItem(
                    lead_id=lead.id,
                    contact_name=lead.contact_name,
                    business_name=lead.business_name or "",
                    due=lead.next_follow_up,
                    kind="follow-up",
                )
            )
        if (
            lead.status == LeadStatus.DEMO_SCHEDULED
            and lead.demo_date is not None
            and within(lead.demo_date, today)
        ):
            items.append(
                TodoItem(
                    lead_id=lead.id,
                    contact_name=lead.contact_name,
                    business_name=lead.business_name or "",
                    due=lead.demo_date,
                    kind="demo",
                )
            )
    items.sort(key=lambda item: item.due)
    return items


def pending_kickoffs(leads: Iterable[Any]) -> List[Any]:
    """Closed leads whose kickoff call has not been held yet."""
    pending = [lead for lead in leads if is_closed(lead) and not lead.kickoff_completed]
    pending.sort(key=close_order_key)
    return pending
