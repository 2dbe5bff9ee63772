# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, Response, status

from leavedesk.api.deps import ActorDep, HRDep
from leavedesk.db import SessionDep
from leavedesk.schemas.account import (
    AccountListResponse,
    AccountResponse,
    InitializeAllocationsPayload,
    UpdateAllocationPayload,
    UpsertAllocationPayload,
)
from leavedesk.services import account as account_service

allocations_router = APIRouter(prefix="/leave-allocations", tags=["leave-allocations"])

user_allocations_router = APIRouter(prefix="/users/{user_id}/leave-allocations", tags=["leave-allocations"])


@allocations_router.get("", response_model=AccountListResponse)
async def list_allocations(
    session: SessionDep,
    actor: ActorDep,
    user_id: uuid.UUID | None = Query(default=None),
    year: int | None = Query(default=None, ge=1900, le=9999),
) -> AccountListResponse:
    """List leave accounts with balances; HR and admins may pick the user."""
    return await account_service.list_allocations(session, actor, user_id, year)


@allocations_router.post("", response_model=AccountResponse)
async def upsert_allocation(
    payload: UpsertAllocationPayload,
    session: SessionDep,
    actor: HRDep,
    response: Response,
) -> AccountResponse:
    """Create or overwrite a leave account's allocation (HR and admins)."""
    account, created = await account_service.upsert_allocation(session, actor, payload)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return account


@allocations_router.get("/{account_id}", response_model=AccountResponse)
async def get_allocation(
    account_id: uuid.UUID,
    session: SessionDep,
    actor: ActorDep,
) -> AccountResponse:
    """Get one leave account with its balance."""
    return await account_service.get_allocation(session, actor, account_id)


@allocations_router.patch("/{account_id}", response_model=AccountResponse)
async def update_allocation(
    account_id: uuid.UUID,
    payload: UpdateAllocationPayload,
    session: SessionDep,
    actor: HRDep,
) -> AccountResponse:
    """Edit ``allocated``, ``adjusted`` or ``notes`` (HR and admins)."""
    return await account_service.update_allocation(session, actor, account_id, payload)


@user_allocations_router.post("/initialize", response_model=AccountListResponse)
async def initialize_allocations(
    user_id: uuid.UUID,
    session: SessionDep,
    actor: HRDep,
    payload: InitializeAllocationsPayload | None = None,
) -> AccountListResponse:
    """Onboarding: open one account per active leave type (HR and admins)."""
    return await account_service.allocate_for_new_user(
        session, actor, user_id, payload.year if payload else None
    )
