"""Audit Service — best-effort audit trail of catalog mutations, plus admin listing.

Invariants:
    - record_audit never raises: failures are logged at ERROR and dropped
    - record_audit runs after the response has been sent (FastAPI BackgroundTasks),
      so its outcome is unobservable to the caller of the triggering request
    - Listing is newest-first and paginated

Design Decisions:
    - Fire-and-forget on its own DB session (the request session is already closed
      when background tasks run); no retry, no dead-letter queue
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from fastapi import Request
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import AuditAction, AuditTargetType
from app.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


@dataclass
class AuditEntry:
    action: AuditAction
    target_id: UUID
    actor_id: UUID
    actor_email: str
    details: dict = field(default_factory=dict)
    ip: str | None = None
    user_agent: str | None = None
    target_type: AuditTargetType = AuditTargetType.PRODUCT


def build_audit_entry(
    action: AuditAction,
    target_id: UUID,
    actor,
    request: Request,
    details: dict | None = None,
) -> AuditEntry:
    """Capture actor and client metadata while the request is still alive."""
    return AuditEntry(
        action=action,
        target_id=target_id,
        actor_id=actor.id,
        actor_email=actor.email,
        details=details or {},
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


async def record_audit(entry: AuditEntry) -> None:
    """Background task: persist one audit entry, swallowing any failure."""
    from app.infrastructure.database import db_manager

    if not db_manager:
        logger.error(
            f"Cannot write audit {entry.action.value}: database not initialized",
            extra={"action": entry.action.value},
        )
        return

    try:
        async with db_manager.session() as db:
            db.add(AuditLog(
                action=entry.action.value,
                target_type=entry.target_type.value,
                target_id=entry.target_id,
                actor_id=entry.actor_id,
                actor_email=entry.actor_email,
                ip=entry.ip,
                user_agent=entry.user_agent,
                details=entry.details,
            ))
            await db.commit()
    except Exception as e:
        logger.error(
            f"Audit write failed for {entry.action.value} on {entry.target_id}: {e}",
            extra={"action": entry.action.value, "product_id": str(entry.target_id)},
            exc_info=True,
        )


async def list_audit_logs(
    db: AsyncSession,
    target_id: UUID | None = None,
    action: AuditAction | None = None,
    page: int = 1,
    limit: int = 20,
) -> dict:
    conditions = []
    if target_id:
        conditions.append(AuditLog.target_id == target_id)
    if action:
        conditions.append(AuditLog.action == action.value)

    total = (await db.execute(
        select(func.count(AuditLog.id)).where(*conditions),
    )).scalar_one()
    result = await db.execute(
        select(AuditLog)
        .where(*conditions)
        .order_by(AuditLog.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit),
    )
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "items": list(result.scalars().all()),
    }
