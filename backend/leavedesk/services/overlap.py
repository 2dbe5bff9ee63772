# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leavedesk.models.enums import LeaveStatus
from leavedesk.models.request import LeaveRequest

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

# Statuses that hold dates on the calendar.
ACTIVE_STATUSES = (LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value)


async def has_overlap(
    session: AsyncSession,
    user_id: uuid.UUID,
    start_date: date,
    end_date: date,
    exclude_request_id: uuid.UUID | None = None,
) -> bool:
    """Return True if an active request of ``user_id`` intersects the range.

    Both ranges are closed: a request ending on day X collides with one
    starting on day X. This includes two half-day requests on the same date,
    whichever halves they cover.
    """
    query = select(col(LeaveRequest.id)).where(
        col(LeaveRequest.user_id) == user_id,
        col(LeaveRequest.status).in_(ACTIVE_STATUSES),
        col(LeaveRequest.start_date) <= end_date,
        col(LeaveRequest.end_date) >= start_date,
    )
    if exclude_request_id is not None:
        query = query.where(col(LeaveRequest.id) != exclude_request_id)

    result = await session.execute(query.limit(1))
    return result.first() is not None
