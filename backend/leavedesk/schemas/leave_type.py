# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Self

from pydantic import BaseModel, Field, model_validator

# Ceiling of the Numeric(6, 2) day columns.
_MAX_DAYS = Decimal("9999.99")

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateLeaveTypePayload(BaseModel):
    """Request body for creating a leave type."""

    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=20)
    description: str | None = None
    default_days_per_year: Decimal = Field(default=Decimal(0), ge=0, le=_MAX_DAYS)
    max_days: Decimal | None = Field(default=None, ge=0, le=_MAX_DAYS)
    is_paid: bool = True
    requires_approval: bool = True
    carry_forward_allowed: bool = False
    max_carry_forward: Decimal | None = Field(default=None, ge=0, le=_MAX_DAYS)
    min_days_notice: int = Field(default=0, ge=0)
    color: str | None = Field(default=None, max_length=20)

    @model_validator(mode="after")
    def _validate_carry_forward(self) -> Self:
        if self.max_carry_forward is not None and not self.carry_forward_allowed:
            msg = "max_carry_forward requires carry_forward_allowed"
            raise ValueError(msg)
        return self


class UpdateLeaveTypePayload(BaseModel):
    """Partial update for a leave type. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    code: str | None = Field(default=None, min_length=1, max_length=20)
    description: str | None = None
    default_days_per_year: Decimal | None = Field(default=None, ge=0, le=_MAX_DAYS)
    max_days: Decimal | None = Field(default=None, ge=0, le=_MAX_DAYS)
    is_paid: bool | None = None
    requires_approval: bool | None = None
    carry_forward_allowed: bool | None = None
    max_carry_forward: Decimal | None = Field(default=None, ge=0, le=_MAX_DAYS)
    min_days_notice: int | None = Field(default=None, ge=0)
    color: str | None = Field(default=None, max_length=20)
    is_active: bool | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveTypeResponse(BaseModel):
    id: uuid.UUID
    name: str
    code: str
    description: str | None
    default_days_per_year: Decimal
    max_days: Decimal | None
    is_paid: bool
    requires_approval: bool
    carry_forward_allowed: bool
    max_carry_forward: Decimal | None
    min_days_notice: int
    color: str | None
    is_active: bool
    created_at: datetime


class LeaveTypeListResponse(BaseModel):
    items: list[LeaveTypeResponse]
    total: int
