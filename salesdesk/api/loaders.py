"""
Shared queries for the API routers.

Relationships are always eager-loaded here; async sessions cannot lazy
load, and the commission resolver needs each owner's rules.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from salesdesk.models import Lead, LeadStatus, User


async def load_users(db: AsyncSession, user_id: Optional[str] = None) -> List[User]:
    query = select(User).options(selectinload(User.commission_rules)).order_by(User.name)
    if user_id is not None:
        query = query.where(User.id == user_id)
    result = await db.execute(query.execution_options(populate_existing=True))
    return list(result.scalars().all())


async def load_user(db: AsyncSession, user_id: str) -> Optional[User]:
    users = await load_users(db, user_id)
    return users[0] if users else None


async def load_leads(
    db: AsyncSession,
    owner_id: Optional[str] = None,
    status: Optional[LeadStatus] = None,
) -> List[Lead]:
    query = (
        select(Lead)
        .options(selectinload(Lead.owner).selectinload(User.commission_rules))
        .order_by(Lead.created_at.desc())
    )
    if owner_id is not None:
        query = query.where(Lead.owner_id == owner_id)
    if status is not None:
        query = query.where(Lead.status == status)
    result = await db.execute(query)
    return list(result.scalars().all())


async def load_lead(db: AsyncSession, lead_id: str, with_notes: bool = False) -> Optional[Lead]:
    options = [selectinload(Lead.owner).selectinload(User.commission_rules)]
    if with_notes:
        options.append(selectinload(Lead.notes))
    result = await db.execute(
        select(Lead)
        .options(*options)
        .where(Lead.id == lead_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()
