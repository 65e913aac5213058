"""Audit trail rows, written inside the caller's unit of work."""

import uuid
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.models.audit_log import AuditLog


def record_audit(
    db: AsyncSession,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
    action: str,
    resource: str,
    resource_id,
    details: dict | None = None,
) -> AuditLog:
    entry = AuditLog(
        user_id=user_id,
        organization_id=organization_id,
        action=action,
        resource=resource,
        resource_id=str(resource_id),
        details=details or {},
    )
    db.add(entry)
    return entry
