# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

# Ceiling of the Numeric(6, 2) day columns.
_MAX_DAYS = Decimal("9999.99")

# ---------------------------------------------------------------------------
# Administrative payloads
# ---------------------------------------------------------------------------


class UpsertAllocationPayload(BaseModel):
    """Create or overwrite the administrative counters of one leave account."""

    user_id: uuid.UUID
    leave_type_id: uuid.UUID
    year: int = Field(ge=1900, le=9999)
    allocated: Decimal = Field(ge=0, le=_MAX_DAYS)
    carried_over: Decimal = Field(default=Decimal(0), ge=0, le=_MAX_DAYS)
    adjusted: Decimal = Field(default=Decimal(0), ge=-_MAX_DAYS, le=_MAX_DAYS)
    notes: str | None = None


class UpdateAllocationPayload(BaseModel):
    """Partial administrative edit. ``used`` is deliberately not editable."""

    allocated: Decimal | None = Field(default=None, ge=0, le=_MAX_DAYS)
    adjusted: Decimal | None = Field(default=None, ge=-_MAX_DAYS, le=_MAX_DAYS)
    notes: str | None = None


class InitializeAllocationsPayload(BaseModel):
    """Onboarding: create one account per active leave type for ``year``."""

    year: int | None = Field(default=None, ge=1900, le=9999)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    """A leave account with its derived balance."""

    id: uuid.UUID
    user_id: uuid.UUID
    leave_type_id: uuid.UUID
    leave_type_code: str | None = None
    leave_type_name: str | None = None
    year: int
    allocated: Decimal
    carried_over: Decimal
    adjusted: Decimal
    used: Decimal
    balance: Decimal
    notes: str | None
    updated_at: datetime | None


class AccountListResponse(BaseModel):
    items: list[AccountResponse]
    total: int
