# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leavedesk.exceptions import AppError, NotFound
from leavedesk.models.account import LeaveAccount
from leavedesk.models.enums import AuditAction, AuditEntity
from leavedesk.models.leave_type import LeaveType
from leavedesk.schemas.leave_type import LeaveTypeListResponse, LeaveTypeResponse
from leavedesk.services.audit import audit_details, record_audit_event

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import OrgActor
    from leavedesk.schemas.leave_type import CreateLeaveTypePayload, UpdateLeaveTypePayload


# Fields an update may explicitly clear.
_NULLABLE_FIELDS = frozenset({"description", "max_days", "max_carry_forward", "color"})


def _build_leave_type_response(leave_type: LeaveType) -> LeaveTypeResponse:
    return LeaveTypeResponse.model_validate(leave_type, from_attributes=True)


async def _get_leave_type_or_404(session: AsyncSession, leave_type_id: uuid.UUID) -> LeaveType:
    leave_type = await session.get(LeaveType, leave_type_id)
    if leave_type is None:
        raise NotFound("Leave type not found")
    return leave_type


async def _ensure_unique(
    session: AsyncSession,
    *,
    code: str | None = None,
    name: str | None = None,
    exclude_id: uuid.UUID | None = None,
) -> None:
    """Raise 409 if another leave type already uses ``code`` or ``name``."""
    for column, value, label in (
        (col(LeaveType.code), code, "code"),
        (col(LeaveType.name), name, "name"),
    ):
        if value is None:
            continue
        query = select(col(LeaveType.id)).where(column == value)
        if exclude_id is not None:
            query = query.where(col(LeaveType.id) != exclude_id)
        result = await session.execute(query)
        if result.first() is not None:
            raise AppError(f"Leave type {label} already exists", status_code=409)


async def list_leave_types(
    session: AsyncSession,
    actor: OrgActor,
    include_inactive: bool = False,
) -> LeaveTypeListResponse:
    """List leave types by name. Only HR and admins can include inactive ones."""
    query = select(LeaveType).order_by(col(LeaveType.name))
    if not (include_inactive and actor.is_hr_or_above):
        query = query.where(col(LeaveType.is_active).is_(True))
    result = await session.execute(query)
    items = [_build_leave_type_response(lt) for lt in result.scalars().all()]
    return LeaveTypeListResponse(items=items, total=len(items))


async def get_leave_type(session: AsyncSession, leave_type_id: uuid.UUID) -> LeaveTypeResponse:
    leave_type = await _get_leave_type_or_404(session, leave_type_id)
    return _build_leave_type_response(leave_type)


async def create_leave_type(
    session: AsyncSession,
    actor: OrgActor,
    payload: CreateLeaveTypePayload,
) -> LeaveTypeResponse:
    """Add a leave type to the catalog."""
    await _ensure_unique(session, code=payload.code, name=payload.name)

    leave_type = LeaveType(**payload.model_dump())
    session.add(leave_type)
    await session.commit()
    await session.refresh(leave_type)
    response = _build_leave_type_response(leave_type)

    await record_audit_event(
        session,
        actor_id=actor.id,
        action=AuditAction.CREATE,
        entity=AuditEntity.LEAVE_TYPE,
        entity_id=leave_type.id,
        details=audit_details(code=leave_type.code, name=leave_type.name),
    )
    return response


async def update_leave_type(
    session: AsyncSession,
    actor: OrgActor,
    leave_type_id: uuid.UUID,
    payload: UpdateLeaveTypePayload,
) -> LeaveTypeResponse:
    """Apply a partial update. Deactivating keeps every existing account intact."""
    leave_type = await _get_leave_type_or_404(session, leave_type_id)
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key in _NULLABLE_FIELDS
    }

    await _ensure_unique(
        session,
        code=changes.get("code") if changes.get("code") != leave_type.code else None,
        name=changes.get("name") if changes.get("name") != leave_type.name else None,
        exclude_id=leave_type.id,
    )

    for field_name, value in changes.items():
        setattr(leave_type, field_name, value)

    await session.commit()
    await session.refresh(leave_type)
    response = _build_leave_type_response(leave_type)

    await record_audit_event(
        session,
        actor_id=actor.id,
        action=AuditAction.UPDATE,
        entity=AuditEntity.LEAVE_TYPE,
        entity_id=leave_type.id,
        details=audit_details(**changes),
    )
    return response


async def delete_leave_type(
    session: AsyncSession,
    actor: OrgActor,
    leave_type_id: uuid.UUID,
) -> None:
    """Delete a leave type nobody has an account for yet."""
    leave_type = await _get_leave_type_or_404(session, leave_type_id)

    count_result = await session.execute(
        select(func.count()).select_from(LeaveAccount).where(col(LeaveAccount.leave_type_id) == leave_type_id)
    )
    if count_result.scalar_one() > 0:
        raise AppError(
            "Cannot delete leave type with existing allocations. Deactivate it instead.",
            status_code=400,
        )

    code = leave_type.code
    await session.delete(leave_type)
    await session.commit()

    await record_audit_event(
        session,
        actor_id=actor.id,
        action=AuditAction.DELETE,
        entity=AuditEntity.LEAVE_TYPE,
        entity_id=leave_type_id,
        details=audit_details(code=code),
    )
