# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leavedesk.exceptions import (
    Forbidden,
    InsufficientBalance,
    InvalidRange,
    InvalidTransition,
    NotFound,
    OverlappingRequest,
)
from leavedesk.models.enums import AuditAction, AuditEntity, HalfDayType, LeaveStatus, ListMode
from leavedesk.models.request import LeaveRequest
from leavedesk.schemas.auth import OrgActor
from leavedesk.schemas.request import LeaveRequestListResponse, LeaveRequestResponse
from leavedesk.services.account import apply_used_delta, balance, get_or_create_account
from leavedesk.services.audit import audit_details, record_audit_event
from leavedesk.services.authority import can_approve
from leavedesk.services.overlap import has_overlap
from leavedesk.services.visibility import resolve_listing, scope_for

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.request import SubmitLeavePayload
    from leavedesk.services.directory import OrgDirectory
    from leavedesk.services.org_settings import OrgPermissions

logger = logging.getLogger(__name__)

HALF_DAY = Decimal("0.5")

# Allowed source states for each target state.
_TRANSITIONS: dict[LeaveStatus, frozenset[LeaveStatus]] = {
    LeaveStatus.APPROVED: frozenset({LeaveStatus.PENDING}),
    LeaveStatus.REJECTED: frozenset({LeaveStatus.PENDING}),
    LeaveStatus.CANCELLED: frozenset({LeaveStatus.PENDING, LeaveStatus.APPROVED}),
}

_AUDIT_ACTIONS: dict[LeaveStatus, AuditAction] = {
    LeaveStatus.APPROVED: AuditAction.APPROVE,
    LeaveStatus.REJECTED: AuditAction.REJECT,
    LeaveStatus.CANCELLED: AuditAction.CANCEL,
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(request: LeaveRequest) -> LeaveRequestResponse:
    """Map a request model to its response schema."""
    return LeaveRequestResponse(
        id=request.id,
        user_id=request.user_id,
        leave_type_id=request.leave_type_id,
        start_date=request.start_date,
        end_date=request.end_date,
        days=request.days,
        is_half_day=request.is_half_day,
        half_day_type=HalfDayType(request.half_day_type) if request.half_day_type else None,
        reason=request.reason,
        status=LeaveStatus(request.status),
        approver_id=request.approver_id,
        approved_at=request.approved_at,
        rejection_reason=request.rejection_reason,
        cancel_reason=request.cancel_reason,
        created_at=request.created_at,
    )


def _resolve_days(payload: SubmitLeavePayload) -> Decimal:
    """Validate the range and half-day shape and return the day count.

    Day counts are inclusive calendar days; a half day is always 0.5.
    """
    if payload.start_date > payload.end_date:
        raise InvalidRange("start_date must be on or before end_date")

    if payload.is_half_day:
        if payload.start_date != payload.end_date:
            raise InvalidRange("A half-day request must start and end on the same date")
        if payload.half_day_type is None:
            raise InvalidRange("half_day_type is required for a half-day request")
        if payload.days is not None and payload.days != HALF_DAY:
            raise InvalidRange("A half-day request is 0.5 days")
        return HALF_DAY

    if payload.half_day_type is not None:
        raise InvalidRange("half_day_type is only allowed on a half-day request")
    calendar_days = Decimal((payload.end_date - payload.start_date).days + 1)
    if payload.days is not None and payload.days != calendar_days:
        raise InvalidRange(f"days must be {calendar_days} for this date range")
    return calendar_days


async def _get_request_or_404(
    session: AsyncSession,
    request_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveRequest:
    """Fetch a request by ID. Raises 404 if not found."""
    query = select(LeaveRequest).where(col(LeaveRequest.id) == request_id)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFound("Leave request not found")
    return request


async def _resolve_owner(directory: OrgDirectory, user_id: uuid.UUID) -> OrgActor:
    """Owner as the directory knows them; unknown owners have no org pointers."""
    owner = await directory.get_actor(user_id)
    return owner if owner is not None else OrgActor(id=user_id)


async def _authorize_transition(
    actor: OrgActor,
    request: LeaveRequest,
    new_status: LeaveStatus,
    permissions: OrgPermissions,
    directory: OrgDirectory,
) -> None:
    """Raise Forbidden or InvalidTransition; ownership and authority come before state."""
    current = LeaveStatus(request.status)

    if new_status is LeaveStatus.CANCELLED:
        if request.user_id != actor.id:
            raise Forbidden("Only the requester can cancel")
    else:
        if not can_approve(actor.role, permissions):
            raise Forbidden("Not authorized to approve/reject")
        owner = await _resolve_owner(directory, request.user_id)
        scope = await scope_for(actor, directory)
        if not scope.matches(owner):
            raise Forbidden("This leave request is outside your approval scope")

    if current not in _TRANSITIONS[new_status]:
        raise InvalidTransition(f"Cannot move a {current.value} request to {new_status.value}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_request(
    session: AsyncSession,
    actor: OrgActor,
    payload: SubmitLeavePayload,
) -> LeaveRequestResponse:
    """File a PENDING leave request for the calling actor.

    Flow:
    1. Validate range and half-day shape, derive ``days``.
    2. Load (or lazily create) the year's leave account.
    3. Refuse if ``days`` exceeds the current balance.
    4. Refuse if an active request overlaps the range.
    5. Persist as PENDING and commit. The ledger is not touched: capacity is
       only consumed on approval, so two pending requests may both pass
       step 3 against the same balance.
    6. Audit (best-effort).
    """
    days = _resolve_days(payload)
    year = payload.start_date.year

    account = await get_or_create_account(session, actor.id, payload.leave_type_id, year)
    available = balance(account)
    if days > available:
        logger.info("Rejected submission user=%s days=%s available=%s", actor.id, days, available)
        raise InsufficientBalance(f"Insufficient leave balance. Available: {available} days")

    if await has_overlap(session, actor.id, payload.start_date, payload.end_date):
        raise OverlappingRequest()

    leave_request = LeaveRequest(
        user_id=actor.id,
        leave_type_id=payload.leave_type_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        days=days,
        is_half_day=payload.is_half_day,
        half_day_type=payload.half_day_type.value if payload.half_day_type else None,
        reason=payload.reason,
        status=LeaveStatus.PENDING.value,
    )
    session.add(leave_request)
    await session.commit()
    await session.refresh(leave_request)
    response = _build_request_response(leave_request)

    logger.info("Leave request %s submitted by %s (%s days)", leave_request.id, actor.id, days)
    await record_audit_event(
        session,
        actor_id=actor.id,
        action=AuditAction.SUBMIT,
        entity=AuditEntity.LEAVE_REQUEST,
        entity_id=leave_request.id,
        details=audit_details(
            leave_type_id=payload.leave_type_id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            days=days,
        ),
    )
    return response


async def transition_request(
    session: AsyncSession,
    actor: OrgActor,
    request_id: uuid.UUID,
    new_status: LeaveStatus,
    reason: str | None = None,
    *,
    permissions: OrgPermissions,
    directory: OrgDirectory,
) -> LeaveRequestResponse:
    """Move a request to APPROVED, REJECTED or CANCELLED.

    Flow:
    1. Lock the request row.
    2. Check ownership (cancel) or authority + scope (approve/reject), then
       that the move is legal from the current status.
    3. Apply the ledger delta: +days on approval, -days when cancelling an
       approved request.
    4. Write status and decision metadata.
    5. Commit steps 3 and 4 together; on any failure roll both back.
    6. Audit (best-effort, after commit).
    """
    new_status = LeaveStatus(new_status)
    if new_status not in _TRANSITIONS:
        raise InvalidTransition(f"Cannot move a request to {new_status.value}")

    try:
        leave_request = await _get_request_or_404(session, request_id, for_update=True)
        previous = LeaveStatus(leave_request.status)
        await _authorize_transition(actor, leave_request, new_status, permissions, directory)

        year = leave_request.start_date.year
        if new_status is LeaveStatus.APPROVED:
            await apply_used_delta(
                session, leave_request.user_id, leave_request.leave_type_id, year, leave_request.days
            )
        elif new_status is LeaveStatus.CANCELLED and previous is LeaveStatus.APPROVED:
            await apply_used_delta(
                session, leave_request.user_id, leave_request.leave_type_id, year, -leave_request.days
            )

        leave_request.status = new_status.value
        if new_status in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
            leave_request.approver_id = actor.id
            leave_request.approved_at = datetime.now(UTC)
            if new_status is LeaveStatus.REJECTED:
                leave_request.rejection_reason = reason
        else:
            leave_request.cancel_reason = reason

        await session.flush()
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await session.refresh(leave_request)
    response = _build_request_response(leave_request)

    logger.info(
        "Leave request %s moved %s -> %s by %s", leave_request.id, previous.value, new_status.value, actor.id
    )
    await record_audit_event(
        session,
        actor_id=actor.id,
        action=_AUDIT_ACTIONS[new_status],
        entity=AuditEntity.LEAVE_REQUEST,
        entity_id=leave_request.id,
        details=audit_details(
            status=new_status.value,
            previous_status=previous.value,
            user_id=leave_request.user_id,
            days=leave_request.days,
        ),
    )
    return response


async def approve_request(
    session: AsyncSession,
    actor: OrgActor,
    request_id: uuid.UUID,
    *,
    permissions: OrgPermissions,
    directory: OrgDirectory,
) -> LeaveRequestResponse:
    """Approve a pending request, consuming its days from the ledger."""
    return await transition_request(
        session, actor, request_id, LeaveStatus.APPROVED, permissions=permissions, directory=directory
    )


async def reject_request(
    session: AsyncSession,
    actor: OrgActor,
    request_id: uuid.UUID,
    reason: str | None = None,
    *,
    permissions: OrgPermissions,
    directory: OrgDirectory,
) -> LeaveRequestResponse:
    """Reject a pending request. The ledger is untouched."""
    return await transition_request(
        session, actor, request_id, LeaveStatus.REJECTED, reason, permissions=permissions, directory=directory
    )


async def cancel_request(
    session: AsyncSession,
    actor: OrgActor,
    request_id: uuid.UUID,
    reason: str | None = None,
    *,
    permissions: OrgPermissions,
    directory: OrgDirectory,
) -> LeaveRequestResponse:
    """Cancel one's own pending or approved request, releasing approved days."""
    return await transition_request(
        session, actor, request_id, LeaveStatus.CANCELLED, reason, permissions=permissions, directory=directory
    )


async def get_request(
    session: AsyncSession,
    actor: OrgActor,
    request_id: uuid.UUID,
    directory: OrgDirectory,
) -> LeaveRequestResponse:
    """Get a single request the actor owns or has in scope.

    Requests outside the actor's reach are reported as not found.
    """
    leave_request = await _get_request_or_404(session, request_id)
    if leave_request.user_id != actor.id:
        owner = await _resolve_owner(directory, leave_request.user_id)
        scope = await scope_for(actor, directory)
        if not scope.matches(owner):
            raise NotFound("Leave request not found")
    return _build_request_response(leave_request)


async def list_requests(
    session: AsyncSession,
    actor: OrgActor,
    *,
    permissions: OrgPermissions,
    directory: OrgDirectory,
    mode: ListMode = ListMode.OWN,
    status_filter: LeaveStatus | None = None,
    user_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveRequestListResponse:
    """List requests visible under ``mode``, newest first, with the resolved scope label."""
    listing = await resolve_listing(actor, mode, permissions, directory, user_id=user_id)

    base_filters = []
    if listing.user_ids is not None:
        base_filters.append(col(LeaveRequest.user_id).in_(listing.user_ids))
    if listing.status is not None:
        base_filters.append(col(LeaveRequest.status) == listing.status.value)
    if status_filter is not None:
        base_filters.append(col(LeaveRequest.status) == status_filter.value)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    requests = list(result.scalars().all())

    return LeaveRequestListResponse(
        items=[_build_request_response(r) for r in requests],
        total=total,
        scope=listing.label,
    )
