"""Team management API endpoints (admin only)."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.api.loaders import load_user, load_users
from salesdesk.auth.dependencies import require_admin
from salesdesk.config import settings
from salesdesk.db import get_db
from salesdesk.models import AuditAction, CommissionRule, Lead, User
from salesdesk.schemas.user import (
    CommissionRuleSchema,
    CommissionRulesUpdate,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from salesdesk.services.commission import CommissionRuleError, validate_commission_rules
from salesdesk.services.notifier import change_feed
from salesdesk.utils.audit import get_client_ip, log_action
from salesdesk.utils.password import hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def _checked_rules(rules: List[CommissionRuleSchema]) -> List[CommissionRuleSchema]:
    try:
        return validate_commission_rules(rules)
    except CommissionRuleError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )


async def _get_user_or_404(db: AsyncSession, user_id: str) -> User:
    user = await load_user(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


async def _ensure_email_free(db: AsyncSession, email: str) -> None:
    existing = await db.scalar(
        select(func.count()).select_from(User).where(func.lower(User.email) == email.lower())
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already in use",
        )


@router.get("", response_model=List[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Every team member with their commission rules."""
    return await load_users(db)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Create a team member.

    Without explicit rules the user gets a single base rule paying the
    default commission per deal.
    """
    email = data.email.strip().lower()
    await _ensure_email_free(db, email)

    if data.commission_rules:
        rules = _checked_rules(data.commission_rules)
    else:
        rules = [CommissionRuleSchema(threshold=0, amount=settings.default_commission_amount)]

    user = User(
        name=data.name,
        email=email,
        password_hash=hash_password(data.password),
        is_admin=data.is_admin,
        is_active=True,
        commission_rules=[
            CommissionRule(threshold=rule.threshold, amount=rule.amount) for rule in rules
        ],
    )
    db.add(user)
    await db.flush()

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.CREATE_USER,
        target_type="user",
        target_id=user.id,
        action_metadata={"email": email, "is_admin": data.is_admin},
        ip_address=get_client_ip(request),
    )
    await db.commit()

    logger.info(f"User {email} created by {current_user.email}")
    change_feed.notify("users", "insert", user.id)

    return await load_user(db, user.id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    request: Request,
    user_id: str,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    user = await _get_user_or_404(db, user_id)
    changes = data.model_dump(exclude_unset=True)

    if user.id == current_user.id and (
        changes.get("is_admin") is False or changes.get("is_active") is False
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot demote or deactivate yourself",
        )

    if changes.get("email"):
        email = changes["email"].strip().lower()
        if email != user.email:
            await _ensure_email_free(db, email)
            user.email = email
    if changes.get("name"):
        user.name = changes["name"]
    if changes.get("password"):
        user.password_hash = hash_password(changes["password"])
    if changes.get("is_admin") is not None:
        user.is_admin = changes["is_admin"]
    if changes.get("is_active") is not None:
        user.is_active = changes["is_active"]

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.UPDATE_USER,
        target_type="user",
        target_id=user.id,
        action_metadata={"fields": sorted(key for key in changes if key != "password")},
        ip_address=get_client_ip(request),
    )
    await db.commit()

    change_feed.notify("users", "update", user.id)
    return await load_user(db, user.id)


@router.delete("/{user_id}")
async def delete_user(
    request: Request,
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Delete a user who no longer owns any leads."""
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete yourself",
        )

    user = await _get_user_or_404(db, user_id)

    owned = await db.scalar(select(func.count()).select_from(Lead).where(Lead.owner_id == user.id))
    if owned:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User still owns {owned} leads; reassign them first",
        )

    email = user.email
    await db.delete(user)
    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.DELETE_USER,
        target_type="user",
        target_id=user_id,
        action_metadata={"email": email},
        ip_address=get_client_ip(request),
    )
    await db.commit()

    logger.info(f"User {email} deleted by {current_user.email}")
    change_feed.notify("users", "delete", user_id)

    return {"success": True, "message": "User deleted"}


@router.put("/{user_id}/commission-rules", response_model=UserResponse)
async def replace_commission_rules(
    request: Request,
    user_id: str,
    data: CommissionRulesUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Replace the user's whole commission rule set."""
    rules = _checked_rules(data.rules)
    user = await _get_user_or_404(db, user_id)

    old_rules = [{"threshold": r.threshold, "amount": str(r.amount)} for r in user.commission_rules]

    # Old rows go first; (user_id, threshold) is unique
    user.commission_rules.clear()
    await db.flush()
    user.commission_rules.extend(
        CommissionRule(threshold=rule.threshold, amount=rule.amount) for rule in rules
    )

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.UPDATE_COMMISSION_RULES,
        target_type="user",
        target_id=user.id,
        action_metadata={
            "old_rules": old_rules,
            "new_rules": [{"threshold": r.threshold, "amount": str(r.amount)} for r in rules],
        },
        ip_address=get_client_ip(request),
    )
    await db.commit()

    logger.info(f"Commission rules for {user.email} replaced ({len(rules)} rules)")
    change_feed.notify("users", "update", user.id)

    return await load_user(db, user.id)
