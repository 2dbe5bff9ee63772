# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UUIDBase
from leavedesk.models.enums import LeaveStatus


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """A user's reservation of days against one of their leave accounts."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_request_user_status", "user_id", "status"),
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_request_date_order"),
    )

    user_id: uuid.UUID = Field(index=True)
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("leave_type.id", ondelete="RESTRICT"), nullable=False, index=True
        ),
    )
    start_date: date
    end_date: date
    days: Decimal = Field(sa_type=sa.Numeric(6, 2))
    is_half_day: bool = Field(default=False)
    half_day_type: str | None = Field(default=None, max_length=20)
    reason: str | None = None
    status: str = Field(
        default=LeaveStatus.PENDING, max_length=20, index=True, sa_column_kwargs={"server_default": "PENDING"}
    )
    approver_id: uuid.UUID | None = None
    approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    rejection_reason: str | None = None
    cancel_reason: str | None = None
