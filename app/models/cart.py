"""Cart ORM — one cart per user, holding (product, qty) lines.

Invariants:
    - carts.user_id is unique (1:1 with users); created lazily on first add
    - cart_items primary key is (cart_id, product_id): one line per product
    - qty >= 1; a zero quantity is expressed by deleting the line
    - cart_items.product_id has NO foreign key: lines for deleted products
      survive and render with sentinel values

Design Decisions:
    - Lines in their own table rather than a JSON array: quantity updates are
      keyed on (cart, product), so concurrent edits race per line (last write
      wins) instead of rewriting the whole cart
"""

import uuid
from datetime import datetime

from sqlalchemy import Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, TimestampMixin, utcnow


class Cart(TimestampMixin, Base):
    """Cart aggregate root; owns its lines."""
    __tablename__ = "carts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="cart")
    items: Mapped[list["CartItem"]] = relationship(
        "CartItem", back_populates="cart",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="CartItem.added_at",
    )


class CartItem(Base):
    """One (product, qty) line."""
    __tablename__ = "cart_items"
    __table_args__ = (
        CheckConstraint("qty >= 1", name="ck_cart_items_qty_positive"),
    )

    cart_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("carts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True,
    )
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    cart: Mapped["Cart"] = relationship("Cart", back_populates="items")
