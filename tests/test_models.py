"""
Database model and scheduler job tests (SQLite via aiosqlite).
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from salesdesk.models import CommissionRule, Lead, LeadStatus, Note, User
from salesdesk.scheduler import jobs
from salesdesk.scheduler.jobs import collect_follow_up_reminders, refresh_user_totals
from salesdesk.services.notifier import change_feed
from salesdesk.utils.password import hash_password


def _dt(*args):
    return datetime(*args, tzinfo=timezone.utc)


def _make_user(email="rep@example.com", rules=((0, "100"),)):
    return User(
        name="Rep",
        email=email,
        password_hash=hash_password("secret123"),
        commission_rules=[
            CommissionRule(threshold=threshold, amount=Decimal(amount)) for threshold, amount in rules
        ],
    )


# ── Models ────────────────────────────────────────────────


class TestModels:
    async def test_lead_defaults(self, db_session):
        user = _make_user()
        db_session.add(user)
        await db_session.flush()

        lead = Lead(contact_name="Sam Lee", owner_id=user.id)
        db_session.add(lead)
        await db_session.commit()

        assert len(lead.id) == 36
        assert lead.status == LeadStatus.DEMO_SCHEDULED
        assert lead.kickoff_completed is False
        assert lead.commission_amount is None
        assert lead.created_at is not None

    async def test_rules_load_in_threshold_order(self, db_session):
        user = _make_user(rules=((10, "300"), (0, "200")))
        db_session.add(user)
        await db_session.commit()

        result = await db_session.execute(
            select(User)
            .options(selectinload(User.commission_rules))
            .where(User.id == user.id)
            .execution_options(populate_existing=True)
        )
        loaded = result.scalar_one()
        assert [rule.threshold for rule in loaded.commission_rules] == [0, 10]

    async def test_duplicate_threshold_rejected(self, db_session):
        user = _make_user(rules=((0, "100"), (0, "200")))
        db_session.add(user)
        with pytest.raises(IntegrityError):
            await db_session.commit()

    async def test_status_round_trips_as_value(self, db_session):
        user = _make_user()
        db_session.add(user)
        await db_session.flush()
        db_session.add(Lead(contact_name="A", owner_id=user.id, status=LeadStatus.DEMO_NO_SHOW))
        await db_session.commit()

        status = await db_session.scalar(select(Lead.status))
        assert status == LeadStatus.DEMO_NO_SHOW

    async def test_notes_attach_to_lead(self, db_session):
        user = _make_user()
        db_session.add(user)
        await db_session.flush()
        lead = Lead(contact_name="A", owner_id=user.id)
        db_session.add(lead)
        await db_session.flush()
        db_session.add(Note(lead_id=lead.id, user_id=user.id, content="Called, no answer"))
        await db_session.commit()

        result = await db_session.execute(
            select(Lead).options(selectinload(Lead.notes)).execution_options(populate_existing=True)
        )
        assert [note.content for note in result.scalar_one().notes] == ["Called, no answer"]


# ── Scheduler jobs ────────────────────────────────────────


class TestSchedulerJobs:
    async def test_refresh_user_totals(self, db_session):
        user = _make_user()
        db_session.add(user)
        await db_session.flush()
        db_session.add_all([
            Lead(contact_name="A", owner_id=user.id, status=LeadStatus.CLOSED, signup_date=_dt(2026, 9, 1)),
            Lead(contact_name="B", owner_id=user.id, status=LeadStatus.CLOSED, signup_date=_dt(2026, 9, 2)),
            Lead(contact_name="C", owner_id=user.id, status=LeadStatus.HOT_LEAD),
            # Not on the leaderboard either without a signup date
            Lead(contact_name="D", owner_id=user.id, status=LeadStatus.CLOSED),
        ])
        await db_session.commit()

        changed = await refresh_user_totals(db_session)
        await db_session.commit()

        assert changed == [user.id]
        assert user.closed_deals == 2
        assert Decimal(user.total_commission) == Decimal("200")
        assert await refresh_user_totals(db_session) == []

    async def test_refresh_does_not_announce_before_commit(self, db_session):
        user = _make_user()
        db_session.add(user)
        await db_session.flush()
        db_session.add(
            Lead(contact_name="A", owner_id=user.id, status=LeadStatus.CLOSED, signup_date=_dt(2026, 9, 1))
        )
        await db_session.commit()

        received = []
        unsubscribe = change_feed.subscribe(received.append)
        try:
            await refresh_user_totals(db_session)
        finally:
            unsubscribe()

        assert received == []

    async def test_job_announces_after_commit(self, db_session, monkeypatch):
        user = _make_user()
        db_session.add(user)
        await db_session.flush()
        db_session.add(
            Lead(contact_name="A", owner_id=user.id, status=LeadStatus.CLOSED, signup_date=_dt(2026, 9, 1))
        )
        await db_session.commit()

        committed = []

        @asynccontextmanager
        async def fake_db_context():
            yield db_session
            await db_session.commit()
            committed.append(True)

        monkeypatch.setattr(jobs, "get_db_context", fake_db_context)

        received = []

        def on_change(event):
            received.append((event.table, event.record_id, bool(committed)))

        unsubscribe = change_feed.subscribe(on_change)
        try:
            await jobs.refresh_user_totals_job()
        finally:
            unsubscribe()

        assert received == [("users", user.id, True)]

    async def test_follow_up_reminders(self, db_session):
        user = _make_user()
        db_session.add(user)
        await db_session.flush()
        db_session.add_all([
            Lead(contact_name="Due", owner_id=user.id, next_follow_up=_dt(2026, 10, 19, 20)),
            Lead(contact_name="Later", owner_id=user.id, next_follow_up=_dt(2026, 10, 25, 20)),
        ])
        await db_session.commit()

        reminders = await collect_follow_up_reminders(db_session, now=_dt(2026, 10, 19, 15))

        assert list(reminders) == ["rep@example.com"]
        assert [item.contact_name for item in reminders["rep@example.com"]] == ["Due"]
