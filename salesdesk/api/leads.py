"""
Lead API endpoints.

Reps see and edit only the leads they own; admins see every lead and
may reassign owners.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.api.loaders import load_lead, load_leads, load_user
from salesdesk.auth.dependencies import get_current_user
from salesdesk.config import settings
from salesdesk.db import get_db
from salesdesk.models import AuditAction, Lead, LeadStatus, Note, User
from salesdesk.schemas.lead import (
    CommissionOverrideRequest,
    LeadCreate,
    LeadDetailResponse,
    LeadResponse,
    LeadUpdate,
    NoteCreate,
    NoteResponse,
    StatusChangeRequest,
    TodoItemResponse,
)
from salesdesk.services.commission import CommissionMode, resolve_commission
from salesdesk.services.lifecycle import (
    CLOSE_DATE_FIELDS,
    apply_status,
    default_follow_up,
    next_status,
    pending_kickoffs,
    recompute_value,
    set_close_date,
    todo_items,
)
from salesdesk.services.notifier import change_feed
from salesdesk.utils.audit import get_client_ip, log_action
from salesdesk.utils.money import ZERO

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leads", tags=["Leads"])

# Cleared amounts are stored as 0
MONEY_FIELDS = ("mrr", "setup_fee")


def lead_to_response(lead: Lead, schema=LeadResponse):
    """Serialize a lead with owner name and its per-deal commission."""
    response = schema.model_validate(lead)
    owners = [lead.owner] if lead.owner is not None else []
    response.commission = resolve_commission(
        lead,
        owners,
        CommissionMode.FLAT_BASE,
        default_amount=settings.default_commission_amount,
    )
    response.owner_name = lead.owner.name if lead.owner is not None else None
    return response


async def get_lead_for_user(
    db: AsyncSession,
    lead_id: str,
    current_user: User,
    with_notes: bool = False,
) -> Lead:
    """Load a lead the current user may see, or raise 404."""
    lead = await load_lead(db, lead_id, with_notes=with_notes)
    if not lead or (not current_user.is_admin and lead.owner_id != current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lead not found",
        )
    return lead


async def _resolve_owner(db: AsyncSession, owner_id: Optional[str], current_user: User) -> str:
    if owner_id is None or owner_id == current_user.id:
        return current_user.id
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can assign leads to other users",
        )
    owner = await load_user(db, owner_id)
    if not owner:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Owner not found",
        )
    return owner.id


@router.get("", response_model=List[LeadResponse])
async def list_leads(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    status_filter: Optional[LeadStatus] = Query(None, alias="status"),
    owner_id: Optional[str] = Query(None),
):
    """List leads, newest first."""
    if not current_user.is_admin:
        owner_id = current_user.id

    leads = await load_leads(db, owner_id=owner_id, status=status_filter)
    return [lead_to_response(lead) for lead in leads]


@router.get("/todos", response_model=List[TodoItemResponse])
async def list_todos(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Follow-ups and demos due today for the signed-in rep."""
    leads = await load_leads(db, owner_id=current_user.id)
    now = datetime.now(timezone.utc)
    return todo_items(leads, current_user.id, now, settings.reference_timezone)


@router.get("/kickoffs", response_model=List[LeadResponse])
async def list_pending_kickoffs(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Closed deals still waiting on their kickoff call."""
    owner_id = None if current_user.is_admin else current_user.id
    leads = await load_leads(db, owner_id=owner_id, status=LeadStatus.CLOSED)
    return [lead_to_response(lead) for lead in pending_kickoffs(leads)]


@router.post("", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
async def create_lead(
    request: Request,
    data: LeadCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a lead; closing on creation stamps the close dates."""
    owner_id = await _resolve_owner(db, data.owner_id, current_user)
    now = datetime.now(timezone.utc)

    lead = Lead(
        contact_name=data.contact_name,
        email=data.email,
        phone=data.phone,
        business_name=data.business_name,
        lead_source=data.lead_source,
        crm=data.crm,
        location=data.location,
        vertical=data.vertical,
        setup_fee=data.setup_fee,
        mrr=data.mrr,
        demo_date=data.demo_date,
        demo_booked_date=data.demo_booked_date or (now if data.demo_date else None),
        signup_date=data.signup_date,
        next_follow_up=data.next_follow_up or default_follow_up(data.demo_date),
        owner_id=owner_id,
        kickoff_completed=False,
    )
    recompute_value(lead)
    apply_status(lead, data.status, now)
    if data.signup_date is not None and data.status == LeadStatus.CLOSED:
        set_close_date(lead, "signup_date", data.signup_date)

    db.add(lead)
    await db.flush()

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.CREATE_LEAD,
        target_type="lead",
        target_id=lead.id,
        action_metadata={"status": lead.status.value},
        ip_address=get_client_ip(request),
    )
    await db.commit()

    logger.info(f"Lead {lead.id} created by {current_user.email}")
    change_feed.notify("leads", "insert", lead.id)

    lead = await load_lead(db, lead.id)
    return lead_to_response(lead)


@router.get("/{lead_id}", response_model=LeadDetailResponse)
async def get_lead(
    lead_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Lead with its notes."""
    lead = await get_lead_for_user(db, lead_id, current_user, with_notes=True)
    return lead_to_response(lead, LeadDetailResponse)


@router.patch("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    request: Request,
    lead_id: str,
    data: LeadUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Apply a partial update."""
    lead = await get_lead_for_user(db, lead_id, current_user)
    changes = data.model_dump(exclude_unset=True)

    if "owner_id" in changes:
        owner_id = changes.pop("owner_id")
        if owner_id is not None:
            lead.owner_id = await _resolve_owner(db, owner_id, current_user)

    for field_name in CLOSE_DATE_FIELDS:
        if field_name in changes:
            set_close_date(lead, field_name, changes.pop(field_name))

    for field_name, value in changes.items():
        if field_name == "contact_name" and value is None:
            continue
        if field_name in MONEY_FIELDS and value is None:
            value = ZERO
        setattr(lead, field_name, value)

    if "mrr" in changes or "setup_fee" in changes:
        recompute_value(lead)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.UPDATE_LEAD,
        target_type="lead",
        target_id=lead.id,
        action_metadata={"fields": sorted(data.model_dump(exclude_unset=True))},
        ip_address=get_client_ip(request),
    )
    await db.commit()

    change_feed.notify("leads", "update", lead.id)

    lead = await load_lead(db, lead.id)
    return lead_to_response(lead)


@router.delete("/{lead_id}")
async def delete_lead(
    request: Request,
    lead_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a lead and its notes."""
    lead = await get_lead_for_user(db, lead_id, current_user)

    await db.execute(delete(Note).where(Note.lead_id == lead.id))
    await db.delete(lead)

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.DELETE_LEAD,
        target_type="lead",
        target_id=lead_id,
        action_metadata={"contact_name": lead.contact_name},
        ip_address=get_client_ip(request),
    )
    await db.commit()

    logger.info(f"Lead {lead_id} deleted by {current_user.email}")
    change_feed.notify("leads", "delete", lead_id)

    return {"success": True, "message": "Lead deleted"}


async def _change_status(
    request: Request,
    db: AsyncSession,
    lead: Lead,
    new_status: LeadStatus,
    current_user: User,
) -> LeadResponse:
    old_status = lead.status
    stamped = apply_status(lead, new_status, datetime.now(timezone.utc))

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.CHANGE_STATUS,
        target_type="lead",
        target_id=lead.id,
        action_metadata={
            "old_status": old_status.value if old_status else None,
            "new_status": new_status.value,
            "close_dates_stamped": stamped,
        },
        ip_address=get_client_ip(request),
    )
    await db.commit()

    logger.info(f"Lead {lead.id}: {old_status.value if old_status else None} -> {new_status.value}")
    change_feed.notify("leads", "update", lead.id)

    lead = await load_lead(db, lead.id)
    return lead_to_response(lead)


@router.post("/{lead_id}/advance", response_model=LeadResponse)
async def advance_lead(
    request: Request,
    lead_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Move the lead to the next status in the pipeline cycle."""
    lead = await get_lead_for_user(db, lead_id, current_user)
    return await _change_status(request, db, lead, next_status(lead.status), current_user)


@router.post("/{lead_id}/status", response_model=LeadResponse)
async def set_lead_status(
    request: Request,
    lead_id: str,
    data: StatusChangeRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Set an explicit status (including Demo No Show)."""
    lead = await get_lead_for_user(db, lead_id, current_user)
    return await _change_status(request, db, lead, data.status, current_user)


@router.get("/{lead_id}/notes", response_model=List[NoteResponse])
async def list_notes(
    lead_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lead = await get_lead_for_user(db, lead_id, current_user, with_notes=True)
    return lead.notes


@router.post("/{lead_id}/notes", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def add_note(
    request: Request,
    lead_id: str,
    data: NoteCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Add a note, optionally rescheduling the next follow-up."""
    lead = await get_lead_for_user(db, lead_id, current_user)

    note = Note(lead_id=lead.id, user_id=current_user.id, content=data.content.strip())
    db.add(note)
    if data.next_follow_up is not None:
        lead.next_follow_up = data.next_follow_up

    await db.flush()
    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.ADD_NOTE,
        target_type="lead",
        target_id=lead.id,
        action_metadata={"note_id": note.id},
        ip_address=get_client_ip(request),
    )
    await db.commit()

    change_feed.notify("notes", "insert", note.id)
    if data.next_follow_up is not None:
        change_feed.notify("leads", "update", lead.id)

    return note


@router.put("/{lead_id}/commission", response_model=LeadResponse)
async def override_commission(
    request: Request,
    lead_id: str,
    data: CommissionOverrideRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Set or clear (null) the manual commission on a lead."""
    lead = await get_lead_for_user(db, lead_id, current_user)
    previous = lead.commission_amount
    lead.commission_amount = data.commission_amount

    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.OVERRIDE_COMMISSION,
        target_type="lead",
        target_id=lead.id,
        action_metadata={
            "old_amount": str(previous) if previous is not None else None,
            "new_amount": str(data.commission_amount) if data.commission_amount is not None else None,
        },
        ip_address=get_client_ip(request),
    )
    await db.commit()

    logger.info(f"Commission override on lead {lead.id}: {previous} -> {data.commission_amount}")
    change_feed.notify("leads", "update", lead.id)

    lead = await load_lead(db, lead.id)
    return lead_to_response(lead)


@router.post("/{lead_id}/kickoff-complete", response_model=LeadResponse)
async def complete_kickoff(
    request: Request,
    lead_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Mark the kickoff call of a closed deal as held."""
    lead = await get_lead_for_user(db, lead_id, current_user)
    if lead.status != LeadStatus.CLOSED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only closed deals have a kickoff",
        )

    lead.kickoff_completed = True
    await log_action(
        db=db,
        user_id=current_user.id,
        action=AuditAction.COMPLETE_KICKOFF,
        target_type="lead",
        target_id=lead.id,
        ip_address=get_client_ip(request),
    )
    await db.commit()

    change_feed.notify("leads", "update", lead.id)

    lead = await load_lead(db, lead.id)
    return lead_to_response(lead)
