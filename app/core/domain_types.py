"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, ProductId wrap UUIDs; never use bare UUID in domain logic
    - Roles and audit actions encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
ProductId = NewType("ProductId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Account roles, mapped to DB `role` column."""
    USER = "user"
    ADMIN = "admin"


class AuditAction(str, Enum):
    """Catalog mutations recorded in the audit trail."""
    PRODUCT_CREATE = "PRODUCT_CREATE"
    PRODUCT_UPDATE = "PRODUCT_UPDATE"
    PRODUCT_DELETE = "PRODUCT_DELETE"


class AuditTargetType(str, Enum):
    PRODUCT = "product"
