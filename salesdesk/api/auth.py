"""
Authentication API endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from salesdesk.auth.dependencies import get_current_user, get_current_user_optional
from salesdesk.auth.jwt import COOKIE_NAME, create_access_token
from salesdesk.config import settings
from salesdesk.db import get_db
from salesdesk.models import AuditAction, User
from salesdesk.schemas.auth import LoginRequest, LoginResponse
from salesdesk.schemas.user import UserResponse
from salesdesk.utils.audit import get_client_ip, log_action
from salesdesk.utils.password import verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate by email and password and set the JWT cookie."""
    result = await db.execute(
        select(User).where(func.lower(User.email) == credentials.email.strip().lower())
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.info(f"Failed login for {credentials.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    token = create_access_token(user.id, user.is_admin)

    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.jwt_expire_hours * 3600,
    )

    await log_action(
        db=db,
        user_id=user.id,
        action=AuditAction.LOGIN,
        ip_address=get_client_ip(request),
    )

    return LoginResponse(
        success=True,
        message="Login successful",
        user_id=user.id,
        is_admin=user.is_admin,
    )


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user_optional),
):
    """Clear JWT cookie and log out."""
    if current_user:
        await log_action(
            db=db,
            user_id=current_user.id,
            action=AuditAction.LOGOUT,
            ip_address=get_client_ip(request),
        )

    response.delete_cookie(
        key=COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

    return {"success": True, "message": "Logged out"}


@router.get("/me", response_model=UserResponse)
async def me(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Profile of the signed-in user with their commission rules."""
    result = await db.execute(
        select(User)
        .options(selectinload(User.commission_rules))
        .where(User.id == current_user.id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()
