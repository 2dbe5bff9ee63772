from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from leavedesk.models.audit import AuditLog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.models.enums import AuditAction, AuditEntity

logger = logging.getLogger(__name__)


def to_audit_value(value: Any) -> Any:
    """Convert a single value to something JSON can hold."""
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def audit_details(**values: Any) -> dict[str, Any]:
    """Build a JSON-safe details dict, dropping None values."""
    return {key: to_audit_value(value) for key, value in values.items() if value is not None}


async def record_audit_event(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    action: AuditAction,
    entity: AuditEntity,
    entity_id: uuid.UUID | None = None,
    details: dict[str, Any] | None = None,
) -> AuditLog | None:
    """Write an audit entry in its own commit, after the business change.

    Failures are logged and swallowed: the business operation has already
    been committed and must not be reported as failed.
    """
    entry = AuditLog(
        actor_id=actor_id,
        action=action.value,
        entity=entity.value,
        entity_id=entity_id,
        details=details,
    )
    try:
        session.add(entry)
        await session.commit()
    except Exception:
        logger.exception("Audit log write failed: %s %s %s", action.value, entity.value, entity_id)
        await session.rollback()
        return None
    return entry
