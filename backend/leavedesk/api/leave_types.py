# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import ActorDep, AdminDep, HRDep
from leavedesk.db import SessionDep
from leavedesk.schemas.leave_type import (
    CreateLeaveTypePayload,
    LeaveTypeListResponse,
    LeaveTypeResponse,
    UpdateLeaveTypePayload,
)
from leavedesk.services import leave_type as leave_type_service

leave_types_router = APIRouter(prefix="/leave-types", tags=["leave-types"])


@leave_types_router.get("", response_model=LeaveTypeListResponse)
async def list_leave_types(
    session: SessionDep,
    actor: ActorDep,
    include_inactive: bool = Query(default=False, alias="all"),
) -> LeaveTypeListResponse:
    """List leave types; ``all=true`` includes inactive ones for HR and admins."""
    return await leave_type_service.list_leave_types(session, actor, include_inactive)


@leave_types_router.post("", response_model=LeaveTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_type(
    payload: CreateLeaveTypePayload,
    session: SessionDep,
    actor: HRDep,
) -> LeaveTypeResponse:
    """Create a leave type (HR and admins)."""
    return await leave_type_service.create_leave_type(session, actor, payload)


@leave_types_router.get("/{leave_type_id}", response_model=LeaveTypeResponse)
async def get_leave_type(
    leave_type_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
) -> LeaveTypeResponse:
    """Get a single leave type."""
    return await leave_type_service.get_leave_type(session, leave_type_id)


@leave_types_router.patch("/{leave_type_id}", response_model=LeaveTypeResponse)
async def update_leave_type(
    leave_type_id: uuid.UUID,
    payload: UpdateLeaveTypePayload,
    session: SessionDep,
    actor: HRDep,
) -> LeaveTypeResponse:
    """Update or deactivate a leave type (HR and admins)."""
    return await leave_type_service.update_leave_type(session, actor, leave_type_id, payload)


@leave_types_router.delete("/{leave_type_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_leave_type(
    leave_type_id: uuid.UUID,
    session: SessionDep,
    actor: AdminDep,
) -> None:
    """Delete an unused leave type (admins only)."""
    await leave_type_service.delete_leave_type(session, actor, leave_type_id)
