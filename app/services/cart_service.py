"""Cart Service — cart storage, product batch lookup, and view orchestration.

Invariants:
    - Every response is a fresh reconcile() over the persisted lines (no cached titles/prices)
    - Empty or missing carts short-circuit to the empty view with ZERO product lookups
    - Non-empty carts use exactly ONE product lookup (batched by distinct product id)
    - Line writes are keyed on (cart, product): concurrent edits race per line, last write wins
    - A missing cart is created lazily, only when a line is appended

Design Decisions:
    - build_cart_view/apply_quantity are module functions over the
      CartStore/ProductLookup protocols; CartService binds them to SQL stores
    - Dialect-specific INSERT .. ON CONFLICT for upserts (PostgreSQL in production,
      SQLite in tests); both are atomic single statements
"""

import logging
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cart_reconcile import (
    CartLine, CartMutation, CartView, ProductSnapshot,
    distinct_product_ids, empty_cart_view, plan_quantity_change, reconcile,
)
from app.core.domain_types import ProductId, UserId
from app.core.repository_protocols import CartStore, ProductLookup
from app.models.cart import Cart, CartItem
from app.models.product import Product

logger = logging.getLogger(__name__)


def _insert_for(db: AsyncSession):
    """Dialect-specific insert() supporting on_conflict_* clauses."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise RuntimeError(f"Unsupported database dialect for cart upserts: {dialect}")


class SqlProductLookup:
    """ProductLookup over the products table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_many(
        self, product_ids: list[ProductId],
    ) -> dict[UUID, ProductSnapshot]:
        if not product_ids:
            return {}
        result = await self.db.execute(
            select(
                Product.id, Product.title, Product.price,
                Product.images, Product.slug, Product.active,
            ).where(Product.id.in_(product_ids)),
        )
        return {
            row.id: ProductSnapshot(
                id=row.id,
                title=row.title,
                price=row.price,
                images=list(row.images or []),
                slug=row.slug,
                active=row.active,
            )
            for row in result
        }


class SqlCartStore:
    """CartStore over the carts/cart_items tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_lines(self, owner_id: UserId) -> list[CartLine]:
        result = await self.db.execute(
            select(CartItem.product_id, CartItem.qty)
            .join(Cart, Cart.id == CartItem.cart_id)
            .where(Cart.user_id == owner_id)
            .order_by(CartItem.added_at, CartItem.product_id),
        )
        return [CartLine(product_id=row.product_id, qty=row.qty) for row in result]

    async def get_line_qty(
        self, owner_id: UserId, product_id: ProductId,
    ) -> int | None:
        result = await self.db.execute(
            select(CartItem.qty)
            .join(Cart, Cart.id == CartItem.cart_id)
            .where(Cart.user_id == owner_id, CartItem.product_id == product_id),
        )
        return result.scalar_one_or_none()

    async def ensure_cart(self, owner_id: UserId) -> UUID:
        """Return the owner's cart id, creating the cart if needed."""
        insert = _insert_for(self.db)
        await self.db.execute(
            insert(Cart)
            .values(user_id=owner_id)
            .on_conflict_do_nothing(index_elements=["user_id"]),
        )
        result = await self.db.execute(
            select(Cart.id).where(Cart.user_id == owner_id),
        )
        return result.scalar_one()

    async def upsert_line(
        self, owner_id: UserId, product_id: ProductId, qty: int,
    ) -> None:
        cart_id = await self.ensure_cart(owner_id)
        insert = _insert_for(self.db)
        stmt = insert(CartItem).values(cart_id=cart_id, product_id=product_id, qty=qty)
        await self.db.execute(
            stmt.on_conflict_do_update(
                index_elements=["cart_id", "product_id"],
                set_={"qty": stmt.excluded.qty},
            ),
        )

    async def remove_line(
        self, owner_id: UserId, product_id: ProductId,
    ) -> bool:
        cart_ids = select(Cart.id).where(Cart.user_id == owner_id).scalar_subquery()
        result = await self.db.execute(
            delete(CartItem).where(
                CartItem.cart_id == cart_ids,
                CartItem.product_id == product_id,
            ).execution_options(synchronize_session=False),
        )
        return (result.rowcount or 0) > 0


# ─── Orchestration ──────────────────────────────────────────────

async def build_cart_view(
    store: CartStore, lookup: ProductLookup, owner_id: UserId,
) -> CartView:
    """Read the owner's lines and reconcile them against live products."""
    lines = await store.get_lines(owner_id)
    if not lines:
        return empty_cart_view()
    products = await lookup.get_many(distinct_product_ids(lines))
    return reconcile(lines, products)


async def apply_quantity(
    store: CartStore,
    lookup: ProductLookup,
    owner_id: UserId,
    product_id: ProductId,
    qty: int,
) -> CartMutation:
    """Persist "set quantity of product to qty". Raises ProductUnavailableError."""
    existing = await store.get_line_qty(owner_id, product_id)
    product_active = False
    if qty > 0 and existing is None:
        snapshot = (await lookup.get_many([product_id])).get(product_id)
        product_active = snapshot is not None and snapshot.active

    mutation = plan_quantity_change(product_id, existing, qty, product_active)
    if mutation is CartMutation.REMOVE:
        await store.remove_line(owner_id, product_id)
    elif mutation in (CartMutation.OVERWRITE, CartMutation.APPEND):
        await store.upsert_line(owner_id, product_id, qty)
    return mutation


class CartService:
    """Request-scoped cart operations; commits after each mutation."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = SqlCartStore(db)
        self.lookup = SqlProductLookup(db)

    async def get_cart(self, owner_id: UserId) -> CartView:
        return await build_cart_view(self.store, self.lookup, owner_id)

    async def set_quantity(
        self, owner_id: UserId, product_id: ProductId, qty: int,
    ) -> CartView:
        mutation = await apply_quantity(
            self.store, self.lookup, owner_id, product_id, qty,
        )
        if mutation is not CartMutation.NOOP:
            await self.db.commit()
        logger.info(
            f"Cart quantity set: {mutation.value}",
            extra={"user_id": str(owner_id), "product_id": str(product_id)},
        )
        return await self.get_cart(owner_id)

    async def remove_item(
        self, owner_id: UserId, product_id: ProductId,
    ) -> CartView:
        if await self.store.remove_line(owner_id, product_id):
            await self.db.commit()
        return await self.get_cart(owner_id)
