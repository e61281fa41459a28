"""Fire-and-forget audit trail for security-relevant actions."""

import json
import logging
from enum import StrEnum

from sqlalchemy.ext.asyncio import AsyncSession

from billboard.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


class AuditAction(StrEnum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    FAILED_AUTH = "FAILED_AUTH"


async def log_audit(
    db: AsyncSession,
    *,
    action: str,
    entity_type: str,
    entity_id: int | None = None,
    user_id: int | None = None,
    success: bool = True,
    details: dict | None = None,
    ip_address: str | None = None,
) -> None:
    """Record an audit entry and commit it. Exceptions are caught and logged.

    The insert runs in a savepoint; a failure rolls back only the audit row,
    never the caller's committed work or the objects it still holds.
    """
    logger.info(
        "audit",
        extra={
            "action": action,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "user_id": user_id,
            "status": "success" if success else "failure",
        },
    )
    try:
        async with db.begin_nested():
            db.add(
                AuditLog(
                    user_id=user_id,
                    action=action,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    status="success" if success else "failure",
                    details=json.dumps(details, default=str) if details else None,
                    ip_address=ip_address,
                )
            )
        await db.commit()
    except Exception:
        logger.exception("Failed to write audit log: %s %s/%s", action, entity_type, entity_id)
