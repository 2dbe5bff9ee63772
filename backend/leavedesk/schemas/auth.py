# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from leavedesk.models.enums import Role


class OrgActor(BaseModel):
    """Identity and org-graph position of a person, as supplied by the directory."""

    id: uuid.UUID
    role: Role = Role.EMPLOYEE
    manager_id: uuid.UUID | None = None
    team_id: uuid.UUID | None = None
    department_id: uuid.UUID | None = None
    first_name: str = ""
    last_name: str = ""
    employee_code: str | None = None

    @property
    def is_hr_or_above(self) -> bool:
        return self.role in (Role.ADMIN, Role.HR)
