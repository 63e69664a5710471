"""Lead and note schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from salesdesk.models.lead import LeadStatus


class LeadBase(BaseModel):
    contact_name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    business_name: Optional[str] = Field(None, max_length=255)
    lead_source: Optional[str] = Field(None, max_length=100)
    crm: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=100)
    vertical: Optional[str] = Field(None, max_length=100)


class LeadCreate(LeadBase):
    """
    Create a lead.

    Admins may assign any owner; reps always own what they create.
    """

    status: LeadStatus = LeadStatus.DEMO_SCHEDULED
    setup_fee: Decimal = Field(Decimal("0"), ge=0)
    mrr: Decimal = Field(Decimal("0"), ge=0)
    demo_date: Optional[datetime] = None
    demo_booked_date: Optional[datetime] = None
    signup_date: Optional[datetime] = None
    next_follow_up: Optional[datetime] = None
    owner_id: Optional[str] = None


class LeadUpdate(BaseModel):
    """Partial lead update; only fields that are set are applied."""

    contact_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    business_name: Optional[str] = Field(None, max_length=255)
    lead_source: Optional[str] = Field(None, max_length=100)
    crm: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=100)
    vertical: Optional[str] = Field(None, max_length=100)
    setup_fee: Optional[Decimal] = Field(None, ge=0)
    mrr: Optional[Decimal] = Field(None, ge=0)
    demo_date: Optional[datetime] = None
    demo_booked_date: Optional[datetime] = None
    signup_date: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    next_follow_up: Optional[datetime] = None
    owner_id: Optional[str] = None


class StatusChangeRequest(BaseModel):
    status: LeadStatus


class CommissionOverrideRequest(BaseModel):
    """Set a manual commission; null clears the override."""

    commission_amount: Optional[Decimal] = Field(None, ge=0)


class NoteCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    next_follow_up: Optional[datetime] = None


class NoteResponse(BaseModel):
    id: str
    lead_id: str
    user_id: Optional[str] = None
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class LeadResponse(LeadBase):
    """Lead with the commission it currently resolves to."""

    id: str
    status: LeadStatus
    setup_fee: Decimal
    mrr: Decimal
    value: Decimal
    commission_amount: Optional[Decimal] = None
    commission: Decimal = Decimal("0")
    demo_date: Optional[datetime] = None
    demo_booked_date: Optional[datetime] = None
    signup_date: Optional[datetime] = None
    next_follow_up: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    kickoff_completed: bool = False
    owner_id: str
    owner_name: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LeadDetailResponse(LeadResponse):
    notes: List[NoteResponse] = []


class TodoItemResponse(BaseModel):
    lead_id: str
    contact_name: str
    business_name: str
    due: datetime
    kind: str

    model_config = {"from_attributes": True}
