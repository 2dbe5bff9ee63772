from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from leavedesk.models.enums import Role


def _default_view_roles() -> list[Role]:
    return [Role.ADMIN, Role.HR, Role.MANAGER, Role.TEAM_LEAD]


class OrgPermissions(BaseModel):
    """Organization-wide leave toggles from the settings collaborator.

    Approval toggles default to on, peer-visibility toggles default to off.
    """

    team_lead_can_approve_leaves: bool = True
    manager_can_approve_leaves: bool = True
    hr_can_approve_leaves: bool = True
    employees_can_view_team_leaves: bool = False
    employees_can_view_department_leaves: bool = False
    leave_request_view_roles: list[Role] = Field(default_factory=_default_view_roles)


@runtime_checkable
class OrgSettingsService(Protocol):
    """Interface for the organization settings collaborator."""

    async def get_permissions(self) -> OrgPermissions:
        """Return the current permission toggles."""
        ...


class InMemoryOrgSettingsService:
    """In-memory stub implementation for development."""

    def __init__(self, permissions: OrgPermissions | None = None) -> None:
        self._permissions = permissions or OrgPermissions()

    def configure(self, **toggles: object) -> None:
        """Overwrite individual toggles; unspecified ones keep their value."""
        self._permissions = self._permissions.model_copy(update=toggles)

    async def get_permissions(self) -> OrgPermissions:
        return self._permissions


_settings_service: OrgSettingsService = InMemoryOrgSettingsService()


def get_org_settings_service() -> OrgSettingsService:
    """FastAPI dependency for the organization settings service."""
    return _settings_service


def set_org_settings_service(service: OrgSettingsService) -> None:
    """Override the service (for testing or production wiring)."""
    global _settings_service
    _settings_service = service
