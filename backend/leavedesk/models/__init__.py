from sqlmodel import SQLModel

from leavedesk.models.account import LeaveAccount
from leavedesk.models.audit import AuditLog
from leavedesk.models.base import TimestampMixin, UUIDBase
from leavedesk.models.enums import (
    AuditAction,
    AuditEntity,
    HalfDayType,
    LeaveStatus,
    ListMode,
    Role,
    ScopeKind,
)
from leavedesk.models.leave_type import LeaveType
from leavedesk.models.request import LeaveRequest

__all__ = [
    "AuditAction",
    "AuditEntity",
    "AuditLog",
    "HalfDayType",
    "LeaveAccount",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "ListMode",
    "Role",
    "SQLModel",
    "ScopeKind",
    "TimestampMixin",
    "UUIDBase",
]
