"""Leave account ledger: per-(user, leave type, year) counters and the balance formula."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leavedesk.exceptions import ConflictRetryable, Forbidden, InsufficientBalance, NoAllocation, NotFound
from leavedesk.models.account import LeaveAccount
from leavedesk.models.enums import AuditAction, AuditEntity
from leavedesk.models.leave_type import LeaveType
from leavedesk.schemas.account import AccountListResponse, AccountResponse
from leavedesk.services.audit import audit_details, record_audit_event

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.account import UpdateAllocationPayload, UpsertAllocationPayload
    from leavedesk.schemas.auth import OrgActor

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def balance(account: LeaveAccount) -> Decimal:
    """Derived balance: allocated + carried_over + adjusted - used."""
    return account.allocated + account.carried_over + account.adjusted - account.used


def _build_account_response(account: LeaveAccount, leave_type: LeaveType | None = None) -> AccountResponse:
    """Map a ledger row to its response schema, including the derived balance."""
    return AccountResponse(
        id=account.id,
        user_id=account.user_id,
        leave_type_id=account.leave_type_id,
        leave_type_code=leave_type.code if leave_type else None,
        leave_type_name=leave_type.name if leave_type else None,
        year=account.year,
        allocated=account.allocated,
        carried_over=account.carried_over,
        adjusted=account.adjusted,
        used=account.used,
        balance=balance(account),
        notes=account.notes,
        updated_at=account.updated_at,
    )


def _key_filter(user_id: uuid.UUID, leave_type_id: uuid.UUID, year: int) -> list:
    return [
        col(LeaveAccount.user_id) == user_id,
        col(LeaveAccount.leave_type_id) == leave_type_id,
        col(LeaveAccount.year) == year,
    ]


async def get_account(
    session: AsyncSession,
    user_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    *,
    refresh: bool = False,
) -> LeaveAccount | None:
    """Fetch the ledger row for a key, or None."""
    query = select(LeaveAccount).where(*_key_filter(user_id, leave_type_id, year))
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def _get_account_by_id_or_404(session: AsyncSession, account_id: uuid.UUID) -> LeaveAccount:
    account = await session.get(LeaveAccount, account_id)
    if account is None:
        raise NotFound("Allocation not found")
    return account


# ---------------------------------------------------------------------------
# Ledger operations used by the request lifecycle
# ---------------------------------------------------------------------------


async def get_or_create_account(
    session: AsyncSession,
    user_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
) -> LeaveAccount:
    """Return the ledger row for the key, creating it on first use.

    A fresh row is seeded with the leave type's yearly default. Inactive or
    unknown leave types never get a fresh row and raise ``NoAllocation``.

    When two callers race on first use the loser's insert hits the unique
    constraint; its transaction is rolled back and the winner's row is read.
    This must therefore be the first write of the caller's transaction.
    """
    account = await get_account(session, user_id, leave_type_id, year)
    if account is not None:
        return account

    leave_type = await session.get(LeaveType, leave_type_id)
    if leave_type is None or not leave_type.is_active:
        raise NoAllocation()

    account = LeaveAccount(
        user_id=user_id,
        leave_type_id=leave_type_id,
        year=year,
        allocated=leave_type.default_days_per_year,
    )
    session.add(account)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        existing = await get_account(session, user_id, leave_type_id, year)
        if existing is None:
            raise ConflictRetryable() from None
        return existing

    logger.info("Created leave account user=%s type=%s year=%d", user_id, leave_type_id, year)
    return account


async def apply_used_delta(
    session: AsyncSession,
    user_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    delta: Decimal,
) -> LeaveAccount:
    """Atomically add ``delta`` to ``used`` inside the caller's transaction.

    Positive deltas only apply while the row can absorb them, so an approval
    can never push ``used`` past ``allocated + carried_over + adjusted``.
    Does not commit.
    """
    stmt = (
        update(LeaveAccount)
        .where(*_key_filter(user_id, leave_type_id, year))
        .values(used=col(LeaveAccount.used) + delta)
        .execution_options(synchronize_session=False)
    )
    if delta > 0:
        available = (
            col(LeaveAccount.allocated)
            + col(LeaveAccount.carried_over)
            + col(LeaveAccount.adjusted)
            - col(LeaveAccount.used)
        )
        stmt = stmt.where(available >= delta)

    result = await session.execute(stmt)
    if result.rowcount == 0:  # type: ignore[attr-defined]
        account = await get_account(session, user_id, leave_type_id, year, refresh=True)
        if account is None:
            raise ConflictRetryable("Leave account is missing for this request")
        raise InsufficientBalance(f"Insufficient leave balance. Available: {balance(account)} days")

    account = await get_account(session, user_id, leave_type_id, year, refresh=True)
    if account is None:
        raise ConflictRetryable()
    return account


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def list_allocations(
    session: AsyncSession,
    actor: OrgActor,
    user_id: uuid.UUID | None = None,
    year: int | None = None,
) -> AccountListResponse:
    """List one user's accounts for a year; HR and admins may pick the user."""
    target_user_id = user_id if user_id is not None and actor.is_hr_or_above else actor.id
    target_year = year if year is not None else date.today().year

    result = await session.execute(
        select(LeaveAccount, LeaveType)
        .join(LeaveType, col(LeaveType.id) == col(LeaveAccount.leave_type_id))
        .where(
            col(LeaveAccount.user_id) == target_user_id,
            col(LeaveAccount.year) == target_year,
        )
        .order_by(col(LeaveType.name))
    )
    items = [_build_account_response(account, leave_type) for account, leave_type in result.all()]
    return AccountListResponse(items=items, total=len(items))


async def get_allocation(
    session: AsyncSession,
    actor: OrgActor,
    account_id: uuid.UUID,
) -> AccountResponse:
    """Get a single account; only its owner or HR and admins may see it."""
    account = await _get_account_by_id_or_404(session, account_id)
    if account.user_id != actor.id and not actor.is_hr_or_above:
        raise Forbidden("Not permitted to view this allocation")
    leave_type = await session.get(LeaveType, account.leave_type_id)
    return _build_account_response(account, leave_type)


# ---------------------------------------------------------------------------
# Write path: administrative edits
# ---------------------------------------------------------------------------


async def upsert_allocation(
    session: AsyncSession,
    actor: OrgActor,
    payload: UpsertAllocationPayload,
) -> tuple[AccountResponse, bool]:
    """Create the account for a key or overwrite its administrative counters.

    Returns the account and whether it was newly created. ``used`` is never
    touched here.
    """
    leave_type = await session.get(LeaveType, payload.leave_type_id)
    if leave_type is None:
        raise NotFound("Leave type not found")

    account = await get_account(session, payload.user_id, payload.leave_type_id, payload.year)
    created = account is None
    if account is None:
        account = LeaveAccount(
            user_id=payload.user_id,
            leave_type_id=payload.leave_type_id,
            year=payload.year,
        )
        session.add(account)

    account.allocated = payload.allocated
    account.carried_over = payload.carried_over
    account.adjusted = payload.adjusted
    account.notes = payload.notes

    await session.commit()
    await session.refresh(account)
    response = _build_account_response(account, leave_type)

    await record_audit_event(
        session,
        actor_id=actor.id,
        action=AuditAction.CREATE if created else AuditAction.UPDATE,
        entity=AuditEntity.LEAVE_ALLOCATION,
        entity_id=account.id,
        details=audit_details(
            user_id=payload.user_id,
            leave_type_id=payload.leave_type_id,
            year=payload.year,
            allocated=payload.allocated,
            carried_over=payload.carried_over,
            adjusted=payload.adjusted,
        ),
    )
    return response, created


async def update_allocation(
    session: AsyncSession,
    actor: OrgActor,
    account_id: uuid.UUID,
    payload: UpdateAllocationPayload,
) -> AccountResponse:
    """Apply a partial administrative edit to ``allocated``, ``adjusted`` or ``notes``."""
    account = await _get_account_by_id_or_404(session, account_id)

    # allocated and adjusted are not nullable; an explicit null leaves them unchanged.
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key == "notes"
    }
    for field_name, value in changes.items():
        setattr(account, field_name, value)

    await session.commit()
    await session.refresh(account)
    leave_type = await session.get(LeaveType, account.leave_type_id)
    response = _build_account_response(account, leave_type)

    await record_audit_event(
        session,
        actor_id=actor.id,
        action=AuditAction.UPDATE,
        entity=AuditEntity.LEAVE_ALLOCATION,
        entity_id=account.id,
        details=audit_details(**changes),
    )
    return response


async def allocate_for_new_user(
    session: AsyncSession,
    actor: OrgActor,
    user_id: uuid.UUID,
    year: int | None = None,
) -> AccountListResponse:
    """Onboarding: ensure one account per active leave type for ``year``.

    Existing rows are left as they are.
    """
    target_year = year if year is not None else date.today().year

    types_result = await session.execute(
        select(LeaveType).where(col(LeaveType.is_active).is_(True)).order_by(col(LeaveType.name))
    )
    leave_types = list(types_result.scalars().all())

    existing_result = await session.execute(
        select(LeaveAccount).where(
            col(LeaveAccount.user_id) == user_id,
            col(LeaveAccount.year) == target_year,
        )
    )
    existing = {account.leave_type_id: account for account in existing_result.scalars().all()}

    created_ids: list[uuid.UUID] = []
    for leave_type in leave_types:
        if leave_type.id in existing:
            continue
        account = LeaveAccount(
            user_id=user_id,
            leave_type_id=leave_type.id,
            year=target_year,
            allocated=leave_type.default_days_per_year,
        )
        session.add(account)
        existing[leave_type.id] = account
        created_ids.append(leave_type.id)

    await session.commit()

    items = [_build_account_response(existing[lt.id], lt) for lt in leave_types]
    logger.info("Allocated %d leave accounts for user=%s year=%d", len(created_ids), user_id, target_year)

    if created_ids:
        await record_audit_event(
            session,
            actor_id=actor.id,
            action=AuditAction.CREATE,
            entity=AuditEntity.LEAVE_ALLOCATION,
            details=audit_details(user_id=user_id, year=target_year, leave_type_ids=[str(i) for i in created_ids]),
        )
    return AccountListResponse(items=items, total=len(items))
