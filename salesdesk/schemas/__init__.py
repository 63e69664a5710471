"""Pydantic schemas for request/response validation."""

from salesdesk.schemas.auth import LoginRequest, LoginResponse, TokenPayload
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
from salesdesk.schemas.reports import (
    ChartDataResponse,
    ClosedDealResponse,
    CommissionSummaryResponse,
    DemoBookingResponse,
    LeaderboardResponse,
    MetricsResponse,
)
from salesdesk.schemas.user import (
    CommissionRuleSchema,
    CommissionRulesUpdate,
    UserCreate,
    UserResponse,
    UserUpdate,
)

__all__ = [
    # Auth
    "LoginRequest",
    "LoginResponse",
    "TokenPayload",
    # Lead
    "LeadCreate",
    "LeadUpdate",
    "LeadResponse",
    "LeadDetailResponse",
    "StatusChangeRequest",
    "CommissionOverrideRequest",
    "NoteCreate",
    "NoteResponse",
    "TodoItemResponse",
    # User
    "CommissionRuleSchema",
    "CommissionRulesUpdate",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    # Reports
    "MetricsResponse",
    "ChartDataResponse",
    "CommissionSummaryResponse",
    "LeaderboardResponse",
    "DemoBookingResponse",
    "ClosedDealResponse",
]
