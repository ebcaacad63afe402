"""Cart Schemas — quantity mutation payload and reconciled cart view."""

from uuid import UUID

from pydantic import BaseModel, Field


class CartUpsert(BaseModel):
    """Set the quantity for one product; qty=0 removes the line."""
    product_id: UUID
    qty: int = Field(ge=0, le=10_000)


class CartItemOut(BaseModel):
    product_id: UUID
    qty: int
    title: str
    price: float
    image: str | None
    slug: str | None


class CartResponse(BaseModel):
    items: list[CartItemOut]
    subtotal: float
    total: float
