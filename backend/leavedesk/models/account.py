# ruff: noqa: TC003
from __future__ import annotations

import uuid
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UUIDBase


class LeaveAccount(UUIDBase, TimestampMixin, table=True):
    """Year-scoped leave ledger row for one user and one leave type.

    ``used`` is only moved by request approvals and cancellations; the other
    counters are administrative.
    """

    __tablename__ = "leave_account"
    __table_args__ = (
        sa.UniqueConstraint("user_id", "leave_type_id", "year", name="uq_leave_account_user_type_year"),
        sa.CheckConstraint("allocated >= 0", name="ck_leave_account_allocated_non_negative"),
    )

    user_id: uuid.UUID = Field(index=True)
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("leave_type.id", ondelete="RESTRICT"), nullable=False, index=True
        ),
    )
    year: int = Field(index=True)
    allocated: Decimal = Field(default=Decimal(0), sa_type=sa.Numeric(6, 2), sa_column_kwargs={"server_default": "0"})
    carried_over: Decimal = Field(
        default=Decimal(0), sa_type=sa.Numeric(6, 2), sa_column_kwargs={"server_default": "0"}
    )
    adjusted: Decimal = Field(default=Decimal(0), sa_type=sa.Numeric(6, 2), sa_column_kwargs={"server_default": "0"})
    used: Decimal = Field(default=Decimal(0), sa_type=sa.Numeric(6, 2), sa_column_kwargs={"server_default": "0"})
    notes: str | None = None
