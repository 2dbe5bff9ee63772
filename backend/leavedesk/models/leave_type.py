# ruff: noqa: TC003
from __future__ import annotations

from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UUIDBase


class LeaveType(UUIDBase, TimestampMixin, table=True):
    """Catalog entry describing a kind of leave and its yearly entitlement."""

    __tablename__ = "leave_type"

    name: str = Field(max_length=100, unique=True)
    code: str = Field(max_length=20, unique=True)
    description: str | None = None
    default_days_per_year: Decimal = Field(
        default=Decimal(0), sa_type=sa.Numeric(6, 2), sa_column_kwargs={"server_default": "0"}
    )
    max_days: Decimal | None = Field(default=None, sa_type=sa.Numeric(6, 2))
    is_paid: bool = Field(default=True)
    requires_approval: bool = Field(default=True)
    carry_forward_allowed: bool = Field(default=False)
    max_carry_forward: Decimal | None = Field(default=None, sa_type=sa.Numeric(6, 2))
    min_days_notice: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    color: str | None = Field(default=None, max_length=20)
    is_active: bool = Field(default=True, index=True)
