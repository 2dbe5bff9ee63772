# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header

from leavedesk.exceptions import Forbidden, Unauthenticated
from leavedesk.models.enums import Role
from leavedesk.schemas.auth import OrgActor
from leavedesk.services.directory import OrgDirectory, get_org_directory
from leavedesk.services.org_settings import OrgPermissions, OrgSettingsService, get_org_settings_service

DirectoryDep = Annotated[OrgDirectory, Depends(get_org_directory)]


async def get_org_permissions(
    settings_service: OrgSettingsService = Depends(get_org_settings_service),
) -> OrgPermissions:
    """Fetch the organization's current leave toggles."""
    return await settings_service.get_permissions()


PermissionsDep = Annotated[OrgPermissions, Depends(get_org_permissions)]


async def get_current_actor(
    directory: DirectoryDep,
    x_user_id: uuid.UUID | None = Header(default=None),
) -> OrgActor:
    """Resolve the caller through the org directory; unknown callers are refused."""
    if x_user_id is None:
        raise Unauthenticated()
    actor = await directory.get_actor(x_user_id)
    if actor is None:
        raise Unauthenticated()
    return actor


ActorDep = Annotated[OrgActor, Depends(get_current_actor)]


async def require_hr(actor: ActorDep) -> OrgActor:
    """Require the HR or ADMIN role."""
    if not actor.is_hr_or_above:
        raise Forbidden("HR or admin access required")
    return actor


HRDep = Annotated[OrgActor, Depends(require_hr)]


async def require_admin(actor: ActorDep) -> OrgActor:
    """Require the ADMIN role."""
    if actor.role != Role.ADMIN:
        raise Forbidden("Admin access required")
    return actor


AdminDep = Annotated[OrgActor, Depends(require_admin)]
