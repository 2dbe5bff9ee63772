"""Who may see, and who may decide on, whose leave requests.

Every role maps to a scope kind through a fixed table. The same scope object
answers both questions the rest of the code asks: "does this owner fall in
the actor's scope?" (for decisions) and "which owners does the scope cover?"
(for listings).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from leavedesk.models.enums import LeaveStatus, ListMode, Role, ScopeKind

if TYPE_CHECKING:
    from leavedesk.schemas.auth import OrgActor
    from leavedesk.services.directory import OrgDirectory
    from leavedesk.services.org_settings import OrgPermissions

# Role -> scope kind. Roles missing here fall through to the
# direct-reports-or-own rule, as does a TEAM_LEAD without a team.
_ROLE_SCOPES: dict[Role, ScopeKind] = {
    Role.ADMIN: ScopeKind.ALL,
    Role.HR: ScopeKind.ALL,
    Role.MANAGER: ScopeKind.DIRECT_REPORTS,
    Role.TEAM_LEAD: ScopeKind.TEAM,
}

_SCOPE_LABELS: dict[ScopeKind, str] = {
    ScopeKind.ALL: "all",
    ScopeKind.DIRECT_REPORTS: "direct_reports",
    ScopeKind.TEAM: "team",
    ScopeKind.OWN: "own",
}

# Roles allowed to ask for the pending-approvals queue.
_PENDING_QUEUE_ROLES = frozenset({Role.ADMIN, Role.HR, Role.MANAGER, Role.TEAM_LEAD})


@dataclass(frozen=True)
class RequestScope:
    """A predicate over request owners, anchored on the actor that owns it."""

    kind: ScopeKind
    actor_id: uuid.UUID
    team_id: uuid.UUID | None = None

    @property
    def label(self) -> str:
        return _SCOPE_LABELS[self.kind]

    def matches(self, owner: OrgActor) -> bool:
        """Whether ``owner`` falls inside this scope."""
        if self.kind is ScopeKind.ALL:
            return True
        if self.kind is ScopeKind.DIRECT_REPORTS:
            return owner.manager_id == self.actor_id
        if self.kind is ScopeKind.TEAM:
            return owner.team_id is not None and owner.team_id == self.team_id
        return owner.id == self.actor_id

    async def owner_ids(self, directory: OrgDirectory) -> list[uuid.UUID] | None:
        """IDs of every owner in scope, or None when the scope is unbounded."""
        if self.kind is ScopeKind.ALL:
            return None
        if self.kind is ScopeKind.DIRECT_REPORTS:
            return await directory.list_direct_report_ids(self.actor_id)
        if self.kind is ScopeKind.TEAM and self.team_id is not None:
            return await directory.list_team_member_ids(self.team_id)
        return [self.actor_id]


@dataclass(frozen=True)
class ListingFilter:
    """Resolved filter for a leave listing."""

    label: str
    user_ids: list[uuid.UUID] | None = None
    status: LeaveStatus | None = None


async def scope_for(actor: OrgActor, directory: OrgDirectory) -> RequestScope:
    """Resolve the actor's decision / hierarchical-listing scope."""
    kind = _ROLE_SCOPES.get(actor.role)
    if kind is ScopeKind.ALL:
        return RequestScope(ScopeKind.ALL, actor.id)
    if kind is ScopeKind.DIRECT_REPORTS:
        return RequestScope(ScopeKind.DIRECT_REPORTS, actor.id)
    if kind is ScopeKind.TEAM and actor.team_id is not None:
        return RequestScope(ScopeKind.TEAM, actor.id, team_id=actor.team_id)

    if await directory.list_direct_report_ids(actor.id):
        return RequestScope(ScopeKind.DIRECT_REPORTS, actor.id)
    return RequestScope(ScopeKind.OWN, actor.id)


async def can_act_on(actor: OrgActor, owner: OrgActor, directory: OrgDirectory) -> bool:
    """Whether ``owner``'s requests fall inside ``actor``'s scope."""
    scope = await scope_for(actor, directory)
    return scope.matches(owner)


async def peer_filter(
    actor: OrgActor,
    mode: ListMode,
    permissions: OrgPermissions,
    directory: OrgDirectory,
) -> ListingFilter | None:
    """Approved-only view of teammates' or department peers' leave.

    Returns None when the mode is switched off or the actor has no team or
    department to look at.
    """
    if mode is ListMode.TEAM and permissions.employees_can_view_team_leaves and actor.team_id is not None:
        ids = await directory.list_team_member_ids(actor.team_id)
        return ListingFilter(label="team_approved", user_ids=ids, status=LeaveStatus.APPROVED)
    if (
        mode is ListMode.DEPARTMENT
        and permissions.employees_can_view_department_leaves
        and actor.department_id is not None
    ):
        ids = await directory.list_department_member_ids(actor.department_id)
        return ListingFilter(label="department_approved", user_ids=ids, status=LeaveStatus.APPROVED)
    return None


async def resolve_listing(
    actor: OrgActor,
    mode: ListMode,
    permissions: OrgPermissions,
    directory: OrgDirectory,
    user_id: uuid.UUID | None = None,
) -> ListingFilter:
    """Turn a listing request into the owners and status it may cover.

    Anything the actor is not entitled to falls back to their own requests.
    """
    if mode is ListMode.ALL and actor.role in permissions.leave_request_view_roles:
        scope = await scope_for(actor, directory)
        return ListingFilter(label=scope.label, user_ids=await scope.owner_ids(directory))

    if mode in (ListMode.TEAM, ListMode.DEPARTMENT):
        peers = await peer_filter(actor, mode, permissions, directory)
        if peers is not None:
            return peers

    if mode is ListMode.PENDING and actor.role in _PENDING_QUEUE_ROLES:
        scope = await scope_for(actor, directory)
        return ListingFilter(
            label=f"{scope.label}_pending",
            user_ids=await scope.owner_ids(directory),
            status=LeaveStatus.PENDING,
        )

    if user_id is not None and actor.is_hr_or_above:
        return ListingFilter(label="specific_user", user_ids=[user_id])

    return ListingFilter(label="own", user_ids=[actor.id])
