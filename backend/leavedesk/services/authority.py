from __future__ import annotations

from typing import TYPE_CHECKING

from leavedesk.models.enums import Role

if TYPE_CHECKING:
    from leavedesk.services.org_settings import OrgPermissions

# Role -> name of the OrgPermissions toggle that gates approvals for it.
# ADMIN is absent because it is always allowed; EMPLOYEE because it never is.
_APPROVAL_TOGGLES: dict[Role, str] = {
    Role.HR: "hr_can_approve_leaves",
    Role.MANAGER: "manager_can_approve_leaves",
    Role.TEAM_LEAD: "team_lead_can_approve_leaves",
}


def can_approve(role: Role, permissions: OrgPermissions) -> bool:
    """Whether ``role`` may approve or reject leave at all, ignoring scope."""
    if role == Role.ADMIN:
        return True
    toggle = _APPROVAL_TOGGLES.get(role)
    if toggle is None:
        return False
    return bool(getattr(permissions, toggle))
