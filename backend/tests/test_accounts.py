"""Tests for the leave account ledger: lazy creation, balance formula and the
guarded ``used`` update applied on approval and cancellation.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from leavedesk.exceptions import ConflictRetryable, InsufficientBalance, NoAllocation
from leavedesk.models import LeaveAccount, LeaveType
from leavedesk.services import account as account_service
from leavedesk.services.account import apply_used_delta, balance, get_account, get_or_create_account

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

USER_ID = uuid.uuid4()
YEAR = 2025


async def _seed_account(
    db_session: AsyncSession,
    leave_type_id: uuid.UUID,
    allocated: int = 10,
    carried_over: int = 0,
    adjusted: int = 0,
    used: int = 0,
) -> None:
    db_session.add(
        LeaveAccount(
            user_id=USER_ID,
            leave_type_id=leave_type_id,
            year=YEAR,
            allocated=Decimal(allocated),
            carried_over=Decimal(carried_over),
            adjusted=Decimal(adjusted),
            used=Decimal(used),
        )
    )
    await db_session.commit()


def test_balance_formula() -> None:
    account = LeaveAccount(
        user_id=USER_ID,
        leave_type_id=uuid.uuid4(),
        year=YEAR,
        allocated=Decimal(10),
        carried_over=Decimal(3),
        adjusted=Decimal(-1),
        used=Decimal("4.5"),
    )
    assert balance(account) == Decimal("7.5")


async def test_get_account_missing(db_session: AsyncSession, leave_type_id: uuid.UUID) -> None:
    assert await get_account(db_session, USER_ID, leave_type_id, YEAR) is None


async def test_get_or_create_seeds_type_default(db_session: AsyncSession, leave_type_id: uuid.UUID) -> None:
    account = await get_or_create_account(db_session, USER_ID, leave_type_id, YEAR)
    await db_session.commit()

    assert account.allocated == Decimal(10)
    assert account.used == Decimal(0)
    assert balance(account) == Decimal(10)


async def test_get_or_create_is_idempotent(db_session: AsyncSession, leave_type_id: uuid.UUID) -> None:
    first = await get_or_create_account(db_session, USER_ID, leave_type_id, YEAR)
    await db_session.commit()
    second = await get_or_create_account(db_session, USER_ID, leave_type_id, YEAR)
    assert first.id == second.id


async def test_get_or_create_concurrent_first_use(
    db_session: AsyncSession, leave_type_id: uuid.UUID, monkeypatch: pytest.MonkeyPatch
) -> None:
    """The loser of a first-use race gets the winner's row back."""
    await _seed_account(db_session, leave_type_id, allocated=7)
    real_get_account = account_service.get_account
    calls = 0

    async def _miss_once(*args: object, **kwargs: object) -> LeaveAccount | None:
        nonlocal calls
        calls += 1
        if calls == 1:
            return None
        return await real_get_account(*args, **kwargs)  # type: ignore[arg-type]

    monkeypatch.setattr(account_service, "get_account", _miss_once)

    account = await get_or_create_account(db_session, USER_ID, leave_type_id, YEAR)
    assert calls == 2
    assert account.allocated == Decimal(7)

    winner = await real_get_account(db_session, USER_ID, leave_type_id, YEAR)
    assert winner is not None
    assert account.id == winner.id


async def test_get_or_create_race_without_winner_row(
    db_session: AsyncSession, leave_type_id: uuid.UUID, monkeypatch: pytest.MonkeyPatch
) -> None:
    await _seed_account(db_session, leave_type_id)

    async def _always_miss(*args: object, **kwargs: object) -> LeaveAccount | None:
        return None

    monkeypatch.setattr(account_service, "get_account", _always_miss)

    with pytest.raises(ConflictRetryable):
        await get_or_create_account(db_session, USER_ID, leave_type_id, YEAR)


async def test_get_or_create_keeps_existing_values(db_session: AsyncSession, leave_type_id: uuid.UUID) -> None:
    await _seed_account(db_session, leave_type_id, allocated=4, used=1)
    account = await get_or_create_account(db_session, USER_ID, leave_type_id, YEAR)
    assert account.allocated == Decimal(4)
    assert account.used == Decimal(1)


async def test_get_or_create_unknown_type(db_session: AsyncSession) -> None:
    with pytest.raises(NoAllocation):
        await get_or_create_account(db_session, USER_ID, uuid.uuid4(), YEAR)


async def test_get_or_create_inactive_type(db_session: AsyncSession) -> None:
    retired = LeaveType(name="Sabbatical", code="SAB", default_days_per_year=Decimal(30), is_active=False)
    db_session.add(retired)
    await db_session.commit()

    with pytest.raises(NoAllocation):
        await get_or_create_account(db_session, USER_ID, retired.id, YEAR)


async def test_apply_positive_delta(db_session: AsyncSession, leave_type_id: uuid.UUID) -> None:
    await _seed_account(db_session, leave_type_id, allocated=10)

    account = await apply_used_delta(db_session, USER_ID, leave_type_id, YEAR, Decimal(4))
    await db_session.commit()
    assert account.used == Decimal(4)
    assert balance(account) == Decimal(6)


async def test_apply_delta_uses_carry_over_and_adjustment(
    db_session: AsyncSession, leave_type_id: uuid.UUID
) -> None:
    await _seed_account(db_session, leave_type_id, allocated=2, carried_over=2, adjusted=1)

    account = await apply_used_delta(db_session, USER_ID, leave_type_id, YEAR, Decimal(5))
    assert balance(account) == Decimal(0)


async def test_apply_delta_beyond_capacity(db_session: AsyncSession, leave_type_id: uuid.UUID) -> None:
    await _seed_account(db_session, leave_type_id, allocated=5, used=3)

    with pytest.raises(InsufficientBalance):
        await apply_used_delta(db_session, USER_ID, leave_type_id, YEAR, Decimal(3))

    account = await get_account(db_session, USER_ID, leave_type_id, YEAR, refresh=True)
    assert account is not None
    assert account.used == Decimal(3)


async def test_apply_negative_delta_releases(db_session: AsyncSession, leave_type_id: uuid.UUID) -> None:
    await _seed_account(db_session, leave_type_id, allocated=5, used=5)

    account = await apply_used_delta(db_session, USER_ID, leave_type_id, YEAR, Decimal(-2))
    assert account.used == Decimal(3)


async def test_apply_delta_missing_row(db_session: AsyncSession, leave_type_id: uuid.UUID) -> None:
    with pytest.raises(ConflictRetryable):
        await apply_used_delta(db_session, USER_ID, leave_type_id, YEAR, Decimal(1))
