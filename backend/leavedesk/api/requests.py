# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import ActorDep, DirectoryDep, PermissionsDep
from leavedesk.db import SessionDep
from leavedesk.models.enums import LeaveStatus, ListMode
from leavedesk.schemas.request import (
    DecisionPayload,
    LeaveRequestListResponse,
    LeaveRequestResponse,
    SubmitLeavePayload,
    TransitionPayload,
)
from leavedesk.services import request as request_service

requests_router = APIRouter(prefix="/leave-requests", tags=["leave-requests"])


@requests_router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    payload: SubmitLeavePayload,
    session: SessionDep,
    actor: ActorDep,
) -> LeaveRequestResponse:
    """Submit a new leave request for the caller."""
    return await request_service.submit_request(session, actor, payload)


@requests_router.get("", response_model=LeaveRequestListResponse)
async def list_requests(
    session: SessionDep,
    actor: ActorDep,
    permissions: PermissionsDep,
    directory: DirectoryDep,
    mode: ListMode = Query(default=ListMode.OWN),
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    user_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveRequestListResponse:
    """List leave requests visible to the caller under ``mode``."""
    return await request_service.list_requests(
        session,
        actor,
        permissions=permissions,
        directory=directory,
        mode=mode,
        status_filter=status_filter,
        user_id=user_id,
        offset=offset,
        limit=limit,
    )


@requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
    directory: DirectoryDep,
) -> LeaveRequestResponse:
    """Get a single leave request."""
    return await request_service.get_request(session, actor, request_id, directory)


@requests_router.patch("/{request_id}", response_model=LeaveRequestResponse)
async def transition_request(
    request_id: uuid.UUID,
    payload: TransitionPayload,
    session: SessionDep,
    actor: ActorDep,
    permissions: PermissionsDep,
    directory: DirectoryDep,
) -> LeaveRequestResponse:
    """Change a request's status in one call."""
    new_status = LeaveStatus(payload.status)
    reason = payload.cancel_reason if new_status is LeaveStatus.CANCELLED else payload.rejection_reason
    return await request_service.transition_request(
        session, actor, request_id, new_status, reason, permissions=permissions, directory=directory
    )


@requests_router.post("/{request_id}/approve", response_model=LeaveRequestResponse)
async def approve_request(
    request_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
    permissions: PermissionsDep,
    directory: DirectoryDep,
) -> LeaveRequestResponse:
    """Approve a pending leave request."""
    return await request_service.approve_request(
        session, actor, request_id, permissions=permissions, directory=directory
    )


@requests_router.post("/{request_id}/reject", response_model=LeaveRequestResponse)
async def reject_request(
    request_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
    permissions: PermissionsDep,
    directory: DirectoryDep,
    payload: DecisionPayload | None = None,
) -> LeaveRequestResponse:
    """Reject a pending leave request."""
    return await request_service.reject_request(
        session,
        actor,
        request_id,
        payload.reason if payload else None,
        permissions=permissions,
        directory=directory,
    )


@requests_router.post("/{request_id}/cancel", response_model=LeaveRequestResponse)
async def cancel_request(
    request_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
    permissions: PermissionsDep,
    directory: DirectoryDep,
    payload: DecisionPayload | None = None,
) -> LeaveRequestResponse:
    """Cancel one of the caller's own leave requests."""
    return await request_service.cancel_request(
        session,
        actor,
        request_id,
        payload.reason if payload else None,
        permissions=permissions,
        directory=directory,
    )
