# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

from leavedesk.schemas.auth import OrgActor


@runtime_checkable
class OrgDirectory(Protocol):
    """Interface for the identity / org-graph collaborator."""

    async def get_actor(self, user_id: uuid.UUID) -> OrgActor | None:
        """Fetch a person's role and org pointers. Returns None if unknown."""
        ...

    async def list_direct_report_ids(self, manager_id: uuid.UUID) -> list[uuid.UUID]:
        """IDs of everyone whose manager_id is ``manager_id``."""
        ...

    async def list_team_member_ids(self, team_id: uuid.UUID) -> list[uuid.UUID]:
        """IDs of everyone on the team."""
        ...

    async def list_department_member_ids(self, department_id: uuid.UUID) -> list[uuid.UUID]:
        """IDs of everyone in the department."""
        ...


class InMemoryOrgDirectory:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._actors: dict[uuid.UUID, OrgActor] = {}

    def seed(self, *actors: OrgActor) -> None:
        """Seed actors for testing."""
        for actor in actors:
            self._actors[actor.id] = actor

    async def get_actor(self, user_id: uuid.UUID) -> OrgActor | None:
        return self._actors.get(user_id)

    async def list_direct_report_ids(self, manager_id: uuid.UUID) -> list[uuid.UUID]:
        return [a.id for a in self._actors.values() if a.manager_id == manager_id]

    async def list_team_member_ids(self, team_id: uuid.UUID) -> list[uuid.UUID]:
        return [a.id for a in self._actors.values() if a.team_id == team_id]

    async def list_department_member_ids(self, department_id: uuid.UUID) -> list[uuid.UUID]:
        return [a.id for a in self._actors.values() if a.department_id == department_id]


_directory: OrgDirectory = InMemoryOrgDirectory()


def get_org_directory() -> OrgDirectory:
    """FastAPI dependency for the org directory."""
    return _directory


def set_org_directory(directory: OrgDirectory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _directory
    _directory = directory
