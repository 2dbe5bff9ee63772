# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from leavedesk.models.enums import HalfDayType, LeaveStatus

# Ceiling of the Numeric(6, 2) day columns.
_MAX_DAYS = Decimal("9999.99")

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitLeavePayload(BaseModel):
    """Request body for submitting a leave request.

    ``days`` may be omitted; it is then derived from the date range (or 0.5
    for a half day). Range and half-day shape are checked by the service so
    that direct callers get the same errors as HTTP clients.
    """

    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    days: Decimal | None = Field(default=None, ge=Decimal("0.5"), le=_MAX_DAYS)
    is_half_day: bool = False
    half_day_type: HalfDayType | None = None
    reason: str | None = Field(default=None, max_length=2000)


class DecisionPayload(BaseModel):
    """Request body for approve / reject / cancel actions."""

    reason: str | None = Field(default=None, max_length=1000)


class TransitionPayload(BaseModel):
    """Single-endpoint status change, mirroring the decision endpoints."""

    status: Literal["APPROVED", "REJECTED", "CANCELLED"]
    rejection_reason: str | None = Field(default=None, max_length=1000)
    cancel_reason: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    user_id: uuid.UUID
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    days: Decimal
    is_half_day: bool
    half_day_type: HalfDayType | None
    reason: str | None
    status: LeaveStatus
    approver_id: uuid.UUID | None
    approved_at: datetime | None
    rejection_reason: str | None
    cancel_reason: str | None
    created_at: datetime


class LeaveRequestListResponse(BaseModel):
    """Paginated leave requests plus the scope the listing resolved to."""

    items: list[LeaveRequestResponse]
    total: int
    scope: str
