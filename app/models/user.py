"""User ORM — registered account with role and session token version.

Invariants:
    - email is unique and stored lower-cased
    - password_hash is write-only from the API's point of view (never serialized)
    - token_version starts at 0 and only ever increases (password change)

Design Decisions:
    - token_version on the account row instead of a sessions table: revoking every
      issued credential is a single-column increment
"""

import uuid

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """Account entity."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    email: Mapped[str] = mapped_column(
        String(254), nullable=False, unique=True, index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(
        String(10), nullable=False, default="user",
    )
    token_version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )

    cart: Mapped["Cart | None"] = relationship(
        "Cart", back_populates="user",
        cascade="all, delete-orphan", uselist=False,
    )
