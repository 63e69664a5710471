"""User and commission rule schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class CommissionRuleSchema(BaseModel):
    """One commission band."""

    threshold: int = Field(..., ge=0)
    amount: Decimal = Field(..., ge=0)

    model_config = {"from_attributes": True}


class CommissionRulesUpdate(BaseModel):
    """Replace a user's full rule set."""

    rules: List[CommissionRuleSchema] = Field(..., min_length=1)


class UserCreate(BaseModel):
    """Create a team member (admin only)."""

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6, max_length=100)
    is_admin: bool = False
    commission_rules: Optional[List[CommissionRuleSchema]] = None


class UserUpdate(BaseModel):
    """Update a team member (admin only)."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    password: Optional[str] = Field(None, min_length=6, max_length=100)
    is_admin: Optional[bool] = None
    is_active: Optional[bool] = None


class UserResponse(BaseModel):
    """Team member as shown in lists and the profile."""

    id: str
    name: str
    email: str
    is_admin: bool
    is_active: bool
    closed_deals: int = 0
    total_commission: Decimal = Decimal("0.00")
    created_at: datetime
    commission_rules: List[CommissionRuleSchema] = []

    model_config = {"from_attributes": True}
