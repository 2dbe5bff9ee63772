from __future__ import annotations

import pytest

from leavedesk.models.enums import Role
from leavedesk.services.authority import can_approve
from leavedesk.services.org_settings import OrgPermissions

ALL_OFF = OrgPermissions(
    team_lead_can_approve_leaves=False,
    manager_can_approve_leaves=False,
    hr_can_approve_leaves=False,
)


@pytest.mark.parametrize("role", [Role.TEAM_LEAD, Role.MANAGER, Role.HR, Role.ADMIN])
def test_defaults_allow_approvers(role: Role) -> None:
    assert can_approve(role, OrgPermissions())


def test_employee_never_approves() -> None:
    assert not can_approve(Role.EMPLOYEE, OrgPermissions())


def test_admin_ignores_toggles() -> None:
    assert can_approve(Role.ADMIN, ALL_OFF)


@pytest.mark.parametrize("role", [Role.TEAM_LEAD, Role.MANAGER, Role.HR])
def test_toggle_off_denies(role: Role) -> None:
    assert not can_approve(role, ALL_OFF)


def test_toggles_are_independent() -> None:
    permissions = OrgPermissions(manager_can_approve_leaves=False)
    assert not can_approve(Role.MANAGER, permissions)
    assert can_approve(Role.TEAM_LEAD, permissions)
    assert can_approve(Role.HR, permissions)
