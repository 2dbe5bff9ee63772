from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from leavedesk.models import LeaveRequest
from leavedesk.models.enums import LeaveStatus
from leavedesk.services.overlap import has_overlap

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

USER_ID = uuid.uuid4()


async def _seed_request(
    db_session: AsyncSession,
    leave_type_id: uuid.UUID,
    start: date,
    end: date,
    status: LeaveStatus = LeaveStatus.PENDING,
    user_id: uuid.UUID = USER_ID,
) -> uuid.UUID:
    request = LeaveRequest(
        user_id=user_id,
        leave_type_id=leave_type_id,
        start_date=start,
        end_date=end,
        days=Decimal((end - start).days + 1),
        status=status.value,
    )
    db_session.add(request)
    await db_session.commit()
    return request.id


@pytest.mark.parametrize(
    ("start", "end", "expected"),
    [
        (date(2025, 6, 5), date(2025, 6, 9), True),
        (date(2025, 5, 28), date(2025, 6, 2), True),
        (date(2025, 6, 6), date(2025, 6, 6), True),
        (date(2025, 6, 3), date(2025, 6, 4), True),
        (date(2025, 5, 1), date(2025, 7, 1), True),
        (date(2025, 6, 7), date(2025, 6, 8), False),
        (date(2025, 5, 30), date(2025, 6, 1), False),
    ],
)
async def test_closed_interval_intersection(
    db_session: AsyncSession, leave_type_id: uuid.UUID, start: date, end: date, expected: bool
) -> None:
    await _seed_request(db_session, leave_type_id, date(2025, 6, 2), date(2025, 6, 6))
    assert await has_overlap(db_session, USER_ID, start, end) is expected


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (LeaveStatus.PENDING, True),
        (LeaveStatus.APPROVED, True),
        (LeaveStatus.REJECTED, False),
        (LeaveStatus.CANCELLED, False),
    ],
)
async def test_only_active_statuses_block(
    db_session: AsyncSession, leave_type_id: uuid.UUID, status: LeaveStatus, expected: bool
) -> None:
    await _seed_request(db_session, leave_type_id, date(2025, 6, 2), date(2025, 6, 6), status=status)
    assert await has_overlap(db_session, USER_ID, date(2025, 6, 2), date(2025, 6, 2)) is expected


async def test_overlap_spans_leave_types(db_session: AsyncSession, leave_type_id: uuid.UUID) -> None:
    await _seed_request(db_session, leave_type_id, date(2025, 6, 2), date(2025, 6, 6))
    # The guard does not look at the leave type at all.
    assert await has_overlap(db_session, USER_ID, date(2025, 6, 4), date(2025, 6, 4))


async def test_other_users_ignored(db_session: AsyncSession, leave_type_id: uuid.UUID) -> None:
    await _seed_request(db_session, leave_type_id, date(2025, 6, 2), date(2025, 6, 6), user_id=uuid.uuid4())
    assert not await has_overlap(db_session, USER_ID, date(2025, 6, 2), date(2025, 6, 6))


async def test_exclude_request(db_session: AsyncSession, leave_type_id: uuid.UUID) -> None:
    request_id = await _seed_request(db_session, leave_type_id, date(2025, 6, 2), date(2025, 6, 6))
    assert not await has_overlap(
        db_session, USER_ID, date(2025, 6, 2), date(2025, 6, 6), exclude_request_id=request_id
    )
