from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlmodel import col

from leavedesk.models.audit import AuditLog

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import OrgActor

    from conftest import OrgChart

LEAVE_TYPES_URL = "/leave-types"


def _headers(actor: OrgActor) -> dict[str, str]:
    return {"X-User-Id": str(actor.id)}


def _payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": "Sick Leave",
        "code": "SICK",
        "description": "Illness or medical appointments",
        "default_days_per_year": "12",
        "is_paid": True,
    }
    payload.update(overrides)
    return payload


async def _create(client: AsyncClient, org: OrgChart, **overrides: Any) -> dict[str, Any]:
    resp = await client.post(LEAVE_TYPES_URL, json=_payload(**overrides), headers=_headers(org.hr))
    assert resp.status_code == 201, resp.text
    result: dict[str, Any] = resp.json()
    return result


async def test_create_leave_type(async_client: AsyncClient, org: OrgChart) -> None:
    data = await _create(async_client, org)
    assert data["code"] == "SICK"
    assert Decimal(data["default_days_per_year"]) == Decimal(12)
    assert data["is_active"] is True
    assert data["carry_forward_allowed"] is False


async def test_create_requires_hr(async_client: AsyncClient, org: OrgChart) -> None:
    resp = await async_client.post(LEAVE_TYPES_URL, json=_payload(), headers=_headers(org.manager))
    assert resp.status_code == 403


async def test_create_duplicate_code(async_client: AsyncClient, org: OrgChart) -> None:
    await _create(async_client, org)
    resp = await async_client.post(
        LEAVE_TYPES_URL, json=_payload(name="Another"), headers=_headers(org.hr)
    )
    assert resp.status_code == 409


async def test_create_carry_forward_cap_needs_flag(async_client: AsyncClient, org: OrgChart) -> None:
    resp = await async_client.post(
        LEAVE_TYPES_URL, json=_payload(max_carry_forward="5"), headers=_headers(org.hr)
    )
    assert resp.status_code == 422

    data = await _create(async_client, org, carry_forward_allowed=True, max_carry_forward="5")
    assert Decimal(data["max_carry_forward"]) == Decimal(5)


async def test_list_hides_inactive(async_client: AsyncClient, org: OrgChart, leave_type_id: uuid.UUID) -> None:
    sick = await _create(async_client, org)
    await async_client.patch(f"{LEAVE_TYPES_URL}/{sick['id']}", json={"is_active": False}, headers=_headers(org.hr))

    resp = await async_client.get(LEAVE_TYPES_URL, headers=_headers(org.employee))
    assert [item["code"] for item in resp.json()["items"]] == ["ANNUAL"]

    resp = await async_client.get(LEAVE_TYPES_URL, params={"all": True}, headers=_headers(org.employee))
    assert resp.json()["total"] == 1

    resp = await async_client.get(LEAVE_TYPES_URL, params={"all": True}, headers=_headers(org.hr))
    assert resp.json()["total"] == 2


async def test_get_leave_type(async_client: AsyncClient, org: OrgChart, leave_type_id: uuid.UUID) -> None:
    resp = await async_client.get(f"{LEAVE_TYPES_URL}/{leave_type_id}", headers=_headers(org.employee))
    assert resp.status_code == 200
    assert resp.json()["name"] == "Annual Leave"


async def test_get_leave_type_not_found(async_client: AsyncClient, org: OrgChart) -> None:
    resp = await async_client.get(f"{LEAVE_TYPES_URL}/{uuid.uuid4()}", headers=_headers(org.employee))
    assert resp.status_code == 404


async def test_update_leave_type(
    async_client: AsyncClient, db_session: AsyncSession, org: OrgChart, leave_type_id: uuid.UUID
) -> None:
    resp = await async_client.patch(
        f"{LEAVE_TYPES_URL}/{leave_type_id}",
        json={"default_days_per_year": "15", "color": "#00AA00"},
        headers=_headers(org.hr),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert Decimal(data["default_days_per_year"]) == Decimal(15)
    assert data["color"] == "#00AA00"
    assert data["code"] == "ANNUAL"

    result = await db_session.execute(select(AuditLog).where(col(AuditLog.entity_id) == leave_type_id))
    entry = result.scalar_one()
    assert entry.action == "UPDATE"
    assert entry.details == {"default_days_per_year": "15", "color": "#00AA00"}


async def test_update_to_existing_name(async_client: AsyncClient, org: OrgChart, leave_type_id: uuid.UUID) -> None:
    sick = await _create(async_client, org)
    resp = await async_client.patch(
        f"{LEAVE_TYPES_URL}/{sick['id']}", json={"name": "Annual Leave"}, headers=_headers(org.hr)
    )
    assert resp.status_code == 409


async def test_delete_requires_admin(async_client: AsyncClient, org: OrgChart, leave_type_id: uuid.UUID) -> None:
    resp = await async_client.delete(f"{LEAVE_TYPES_URL}/{leave_type_id}", headers=_headers(org.hr))
    assert resp.status_code == 403

    resp = await async_client.delete(f"{LEAVE_TYPES_URL}/{leave_type_id}", headers=_headers(org.admin))
    assert resp.status_code == 204

    resp = await async_client.get(f"{LEAVE_TYPES_URL}/{leave_type_id}", headers=_headers(org.admin))
    assert resp.status_code == 404


async def test_delete_with_accounts_refused(
    async_client: AsyncClient, org: OrgChart, leave_type_id: uuid.UUID
) -> None:
    await async_client.post(
        f"/users/{org.employee.id}/leave-allocations/initialize",
        json={"year": 2025},
        headers=_headers(org.hr),
    )
    resp = await async_client.delete(f"{LEAVE_TYPES_URL}/{leave_type_id}", headers=_headers(org.admin))
    assert resp.status_code == 400


async def test_create_beyond_column_precision(async_client: AsyncClient, org: OrgChart) -> None:
    resp = await async_client.post(
        LEAVE_TYPES_URL, json=_payload(default_days_per_year="10000000"), headers=_headers(org.hr)
    )
    assert resp.status_code == 422
