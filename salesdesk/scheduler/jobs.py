"""
Background job definitions using APScheduler.

Jobs include:
- Follow-up reminders (logs what each rep has due today)
- Derived user totals refresh (closed_deals, total_commission)
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from salesdesk.config import settings
from salesdesk.db import get_db_context
from salesdesk.models import Lead, User
from salesdesk.services.commission import is_signed, owner_commission_total
from salesdesk.services.lifecycle import TodoItem, todo_items
from salesdesk.services.notifier import change_feed

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = AsyncIOScheduler()


async def _active_users_and_leads(db: AsyncSession):
    users = (
        await db.execute(
            select(User)
            .options(selectinload(User.commission_rules))
            .where(User.is_active == True)
        )
    ).scalars().all()
    leads = (await db.execute(select(Lead))).scalars().all()
    return list(users), list(leads)


async def collect_follow_up_reminders(
    db: AsyncSession,
    now: Optional[datetime] = None,
) -> Dict[str, List[TodoItem]]:
    """Today's follow-ups and demos per active user email."""
    now = now or datetime.now(timezone.utc)
    users, leads = await _active_users_and_leads(db)

    reminders = {}
    for user in users:
        items = todo_items(leads, user.id, now, settings.reference_timezone)
        if items:
            reminders[user.email] = items
    return reminders


async def refresh_user_totals(db: AsyncSession) -> List[str]:
    """
    Recompute User.closed_deals and User.total_commission from leads.

    Only closed deals with a signup date count, as on the leaderboard.
    The caller commits and then announces the changed users.

    Returns:
        Ids of users whose totals changed
    """
    users, leads = await _active_users_and_leads(db)
    signed = [lead for lead in leads if is_signed(lead)]

    changed = []
    for user in users:
        own = [lead for lead in signed if lead.owner_id == user.id]
        commission = owner_commission_total(
            own,
            user,
            settings.commission_mode,
            default_amount=settings.default_commission_amount,
        )
        if user.closed_deals != len(own) or Decimal(user.total_commission or 0) != commission:
            user.closed_deals = len(own)
            user.total_commission = commission
            changed.append(user.id)
    return changed


async def follow_up_reminder_job():
    """Log follow-ups and demos due today, per rep."""
    logger.debug("Running follow-up reminder job")
    try:
        async with get_db_context() as db:
            reminders = await collect_follow_up_reminders(db)
        for email, items in reminders.items():
            follow_ups = sum(1 for item in items if item.kind == "follow-up")
            demos = len(items) - follow_ups
            logger.info(f"Reminder for {email}: {follow_ups} follow-ups, {demos} demos today")
    except Exception as e:
        logger.error(f"Follow-up reminder job error: {e}")


async def refresh_user_totals_job():
    """Keep the stored per-user totals in line with the leads."""
    logger.debug("Running user totals job")
    try:
        async with get_db_context() as db:
            changed = await refresh_user_totals(db)
        for user_id in changed:
            change_feed.notify("users", "update", user_id)
        if changed:
            logger.info(f"User totals job: updated {len(changed)} users")
    except Exception as e:
        logger.error(f"User totals job error: {e}")


def setup_scheduler():
    """
    Configure and add all scheduled jobs.

    Called during application startup.
    """
    scheduler.add_job(
        follow_up_reminder_job,
        trigger=IntervalTrigger(minutes=settings.follow_up_reminder_minutes),
        id="follow_up_reminders",
        name="Log follow-ups due today",
        replace_existing=True,
    )

    scheduler.add_job(
        refresh_user_totals_job,
        trigger=IntervalTrigger(minutes=settings.totals_refresh_minutes),
        id="refresh_user_totals",
        name="Refresh derived user totals",
        replace_existing=True,
    )

    logger.info("Scheduler configured with jobs")
