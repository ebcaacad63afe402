"""Audit Routes — admin-only, paginated view of the catalog audit trail."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import CurrentUser, require_admin
from app.core.domain_types import AuditAction
from app.infrastructure.database import get_db
from app.schemas.audit import AuditLogOut, AuditPage
from app.services.audit_service import list_audit_logs

router = APIRouter(prefix="/api/audit", tags=["audit"])


@router.get("", response_model=AuditPage)
async def list_audit(
    target_id: UUID | None = None,
    action: AuditAction | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await list_audit_logs(
        db, target_id=target_id, action=action, page=page, limit=limit,
    )
    result["items"] = [AuditLogOut.model_validate(a) for a in result["items"]]
    return AuditPage(**result)
