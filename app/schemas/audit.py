"""Audit Schemas — admin audit-trail listing."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuditLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    action: str
    target_type: str
    target_id: UUID
    actor_id: UUID
    actor_email: str
    ip: str | None
    user_agent: str | None
    details: dict
    created_at: datetime


class AuditPage(BaseModel):
    total: int
    page: int
    limit: int
    items: list[AuditLogOut]
