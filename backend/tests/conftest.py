from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from leavedesk.db import get_session
from leavedesk.main import app
from leavedesk.models import LeaveType, SQLModel
from leavedesk.models.enums import Role
from leavedesk.schemas.auth import OrgActor
from leavedesk.services.directory import InMemoryOrgDirectory, set_org_directory
from leavedesk.services.org_settings import InMemoryOrgSettingsService, set_org_settings_service

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory SQLite database per test.

    StaticPool keeps the single in-memory connection alive across sessions.
    """
    _engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Session shared by the test body and the app; services commit for real."""
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Org graph
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrgChart:
    """A small organization seeded into the in-memory directory.

    ``lead``, ``employee`` and ``peer`` share TEAM; ``employee`` and ``peer``
    report to ``manager``. ``colleague`` is in DEPARTMENT but on another
    team, ``outsider`` shares nothing with anyone. ``orphan_lead`` is a
    TEAM_LEAD without a team or reports.
    """

    team_id: uuid.UUID
    department_id: uuid.UUID
    admin: OrgActor
    hr: OrgActor
    manager: OrgActor
    lead: OrgActor
    orphan_lead: OrgActor
    employee: OrgActor
    peer: OrgActor
    colleague: OrgActor
    outsider: OrgActor


def _build_org_chart() -> OrgChart:
    team_id = uuid.uuid4()
    other_team_id = uuid.uuid4()
    department_id = uuid.uuid4()
    manager = OrgActor(
        id=uuid.uuid4(), role=Role.MANAGER, department_id=department_id, first_name="Maya", last_name="Manager"
    )
    return OrgChart(
        team_id=team_id,
        department_id=department_id,
        admin=OrgActor(id=uuid.uuid4(), role=Role.ADMIN, first_name="Ada", last_name="Admin"),
        hr=OrgActor(id=uuid.uuid4(), role=Role.HR, first_name="Hana", last_name="Hr"),
        manager=manager,
        lead=OrgActor(
            id=uuid.uuid4(),
            role=Role.TEAM_LEAD,
            manager_id=manager.id,
            team_id=team_id,
            department_id=department_id,
            first_name="Leo",
            last_name="Lead",
        ),
        orphan_lead=OrgActor(id=uuid.uuid4(), role=Role.TEAM_LEAD, first_name="Otto", last_name="Lead"),
        employee=OrgActor(
            id=uuid.uuid4(),
            manager_id=manager.id,
            team_id=team_id,
            department_id=department_id,
            first_name="Emma",
            last_name="Employee",
            employee_code="E-001",
        ),
        peer=OrgActor(
            id=uuid.uuid4(),
            manager_id=manager.id,
            team_id=team_id,
            department_id=department_id,
            first_name="Pete",
            last_name="Peer",
            employee_code="E-002",
        ),
        colleague=OrgActor(
            id=uuid.uuid4(),
            team_id=other_team_id,
            department_id=department_id,
            first_name="Cora",
            last_name="Colleague",
        ),
        outsider=OrgActor(id=uuid.uuid4(), team_id=uuid.uuid4(), department_id=uuid.uuid4(), first_name="Olga"),
    )


@pytest.fixture
def org() -> OrgChart:
    return _build_org_chart()


@pytest.fixture(autouse=True)
def directory(org: OrgChart) -> Iterator[InMemoryOrgDirectory]:
    """Seed the in-memory org directory for every test."""
    svc = InMemoryOrgDirectory()
    svc.seed(
        org.admin,
        org.hr,
        org.manager,
        org.lead,
        org.orphan_lead,
        org.employee,
        org.peer,
        org.colleague,
        org.outsider,
    )
    set_org_directory(svc)
    yield svc
    set_org_directory(InMemoryOrgDirectory())


@pytest.fixture(autouse=True)
def org_settings() -> Iterator[InMemoryOrgSettingsService]:
    """Default organization toggles; tests flip them with ``configure``."""
    svc = InMemoryOrgSettingsService()
    set_org_settings_service(svc)
    yield svc
    set_org_settings_service(InMemoryOrgSettingsService())


@pytest.fixture
async def leave_type_id(db_session: AsyncSession) -> uuid.UUID:
    """ID of an active leave type worth 10 days a year."""
    annual = LeaveType(name="Annual Leave", code="ANNUAL", default_days_per_year=Decimal(10))
    db_session.add(annual)
    await db_session.commit()
    return annual.id
