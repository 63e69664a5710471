"""
Instant parsing.

Every date a lead carries goes through parse_instant before it is
compared or bucketed. Unparseable values become None ("date unknown")
and never raise.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Optional

from dateutil import parser as dtparse

logger = logging.getLogger(__name__)


def parse_instant(value: Any) -> Optional[datetime]:
    """
    Coerce a stored date value into an aware UTC datetime.

    Accepts datetimes, dates (midnight UTC) and ISO-8601 strings.
    Naive values are taken as UTC, which is how SQLite hands back
    DateTime(timezone=True) columns.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str):
        try:
            dt = dtparse.isoparse(value.strip().replace("Z", "+00:00"))
        except (ValueError, OverflowError):
            logger.debug(f"Unparseable date value: {value!r}")
            return None
    else:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
