"""Cart Reconciliation — joins stored cart lines against live product data.

Invariants:
    - A line is never dropped: unresolved products render with sentinel values
      but keep their product_id and qty verbatim
    - Inactive products resolve to the same sentinels as deleted ones
    - subtotal == total (no tax/shipping at this layer)
    - plan_quantity_change is PURE: returns an action, the shell persists it

Design Decisions:
    - Money as plain float summed with math.fsum: no fixed-point layer, and no
      accumulated drift from naive left-to-right addition
    - No cache: every view is re-joined per request so titles/prices are never stale
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from app.core.errors import BusinessRuleError, ProductUnavailableError


UNKNOWN_PRODUCT_TITLE = "Unknown Product"
UNKNOWN_PRODUCT_PRICE = 0


@dataclass(frozen=True)
class CartLine:
    """Persisted (product reference, quantity) pair."""
    product_id: UUID
    qty: int


@dataclass(frozen=True)
class ProductSnapshot:
    """The product fields the cart view needs, as fetched at read time."""
    id: UUID
    title: str
    price: float
    images: list[str] = field(default_factory=list)
    slug: str | None = None
    active: bool = True


@dataclass(frozen=True)
class CartLineView:
    product_id: UUID
    qty: int
    title: str
    price: float
    image: str | None
    slug: str | None


@dataclass(frozen=True)
class CartView:
    items: list[CartLineView]
    subtotal: float
    total: float

    def to_dict(self) -> dict:
        return {
            "items": [
                {
                    "product_id": str(item.product_id),
                    "qty": item.qty,
                    "title": item.title,
                    "price": item.price,
                    "image": item.image,
                    "slug": item.slug,
                }
                for item in self.items
            ],
            "subtotal": self.subtotal,
            "total": self.total,
        }


class CartMutation(str, Enum):
    """What the shell must do to the stored lines for a quantity change."""
    NOOP = "noop"
    REMOVE = "remove"
    OVERWRITE = "overwrite"
    APPEND = "append"


def empty_cart_view() -> CartView:
    return CartView(items=[], subtotal=0, total=0)


def distinct_product_ids(lines: Iterable[CartLine]) -> list[UUID]:
    """Distinct product ids in first-seen order: the batch lookup key set."""
    seen: dict[UUID, None] = {}
    for line in lines:
        seen.setdefault(line.product_id, None)
    return list(seen)


def _index_products(
    products: Mapping[UUID, ProductSnapshot] | Iterable[ProductSnapshot],
) -> Mapping[UUID, ProductSnapshot]:
    if isinstance(products, Mapping):
        return products
    return {p.id: p for p in products}


def resolve_line(line: CartLine, product: ProductSnapshot | None) -> CartLineView:
    """Build the display view for one line; missing/inactive → sentinels."""
    if product is None or not product.active:
        return CartLineView(
            product_id=line.product_id,
            qty=line.qty,
            title=UNKNOWN_PRODUCT_TITLE,
            price=UNKNOWN_PRODUCT_PRICE,
            image=None,
            slug=None,
        )
    return CartLineView(
        product_id=line.product_id,
        qty=line.qty,
        title=product.title,
        price=product.price,
        image=product.images[0] if product.images else None,
        slug=product.slug,
    )


def compute_subtotal(items: Iterable[CartLineView]) -> float:
    return math.fsum(item.price * item.qty for item in items)


def reconcile(
    lines: list[CartLine],
    products: Mapping[UUID, ProductSnapshot] | Iterable[ProductSnapshot],
) -> CartView:
    """Join lines against fetched products and total them."""
    if not lines:
        return empty_cart_view()
    by_id = _index_products(products)
    items = [resolve_line(line, by_id.get(line.product_id)) for line in lines]
    subtotal = compute_subtotal(items)
    return CartView(items=items, subtotal=subtotal, total=subtotal)


def plan_quantity_change(
    product_id: UUID,
    existing_qty: int | None,
    qty: int,
    product_active: bool,
) -> CartMutation:
    """Decide how "set quantity of product_id to qty" applies to the stored cart.

    existing_qty is None when the cart has no line for the product.
    product_active is only consulted when a new line would be appended.
    """
    if qty < 0:
        raise BusinessRuleError("qty must be >= 0")
    if qty == 0:
        return CartMutation.NOOP if existing_qty is None else CartMutation.REMOVE
    if existing_qty is not None:
        return CartMutation.OVERWRITE
    if not product_active:
        raise ProductUnavailableError(str(product_id))
    return CartMutation.APPEND
