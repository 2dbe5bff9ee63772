from __future__ import annotations

import enum


class Role(enum.StrEnum):
    """Organizational role of an actor, lowest to highest privilege."""

    EMPLOYEE = "EMPLOYEE"
    TEAM_LEAD = "TEAM_LEAD"
    MANAGER = "MANAGER"
    HR = "HR"
    ADMIN = "ADMIN"


class LeaveStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class HalfDayType(enum.StrEnum):
    """Which half of the day a half-day request covers."""

    FIRST_HALF = "FIRST_HALF"
    SECOND_HALF = "SECOND_HALF"


class ScopeKind(enum.StrEnum):
    """Population of request owners an actor can see or decide on."""

    ALL = "ALL"
    DIRECT_REPORTS = "DIRECT_REPORTS"
    TEAM = "TEAM"
    OWN = "OWN"


class ListMode(enum.StrEnum):
    """Query mode requested by a leave listing."""

    OWN = "own"
    ALL = "all"
    PENDING = "pending"
    TEAM = "team"
    DEPARTMENT = "department"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"


class AuditEntity(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE_REQUEST = "LEAVE_REQUEST"
    LEAVE_TYPE = "LEAVE_TYPE"
    LEAVE_ALLOCATION = "LEAVE_ALLOCATION"
