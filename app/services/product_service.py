"""Product Service — admin catalog CRUD and public search.

Invariants:
    - Slugs are unique: first free candidate of slugify(title), -1, -2, ...
    - A title change regenerates the slug; the product's own slug never counts as taken
    - Only fields the client sent are applied on update
    - Public slug lookup only returns active products
    - Search limit capped at settings.product_page_size_max

Design Decisions:
    - Substring search via ILIKE (icontains) on title/description: portable between
      PostgreSQL and SQLite, no full-text index to maintain
    - Audit entries are NOT written here: routes schedule them as background tasks
      once the mutation has committed
"""

import logging
import math
from uuid import UUID

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import ProductId, UserId
from app.core.errors import ConflictError, ErrorContext, ResourceNotFoundError
from app.core.slugs import slugify, slug_candidates
from app.models.product import Product

logger = logging.getLogger(__name__)


class ProductService:
    """Request-scoped catalog operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _slug_taken(self, slug: str, exclude_id: UUID | None) -> bool:
        query = select(Product.id).where(Product.slug == slug)
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)
        return (await self.db.execute(query.limit(1))).first() is not None

    async def unique_slug(self, title: str, exclude_id: UUID | None = None) -> str:
        for candidate in slug_candidates(slugify(title)):
            if not await self._slug_taken(candidate, exclude_id):
                return candidate

    async def _commit(self, product: Product) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(
                "Duplicate key", details={"slug": product.slug},
                context=ErrorContext(product_id=str(product.id)),
            )
        await self.db.refresh(product)

    async def get_or_404(self, product_id: ProductId) -> Product:
        product = await self.db.get(Product, product_id)
        if not product:
            raise ResourceNotFoundError("Product", str(product_id))
        return product

    async def create(self, data: dict, created_by: UserId) -> Product:
        product = Product(
            **data,
            slug=await self.unique_slug(data["title"]),
            created_by=created_by,
        )
        self.db.add(product)
        await self._commit(product)
        logger.info(
            f"Product created: {product.slug}",
            extra={"product_id": str(product.id), "user_id": str(created_by)},
        )
        return product

    async def update(
        self, product_id: ProductId, changes: dict,
    ) -> tuple[Product, dict]:
        """Apply changes; returns the product and the fields actually sent."""
        product = await self.get_or_404(product_id)

        title = changes.get("title")
        if title and title.strip() and title.strip() != product.title:
            product.slug = await self.unique_slug(title, exclude_id=product.id)

        for key, value in changes.items():
            setattr(product, key, value)
        await self._commit(product)
        logger.info(
            f"Product updated: {sorted(changes)}",
            extra={"product_id": str(product.id)},
        )
        return product, dict(changes)

    async def delete(self, product_id: ProductId) -> Product:
        product = await self.get_or_404(product_id)
        await self.db.delete(product)
        await self.db.commit()
        logger.info(
            f"Product deleted: {product.slug}",
            extra={"product_id": str(product.id)},
        )
        return product

    async def get_active_by_slug(self, slug: str) -> Product:
        result = await self.db.execute(
            select(Product).where(Product.slug == slug, Product.active.is_(True)),
        )
        product = result.scalar_one_or_none()
        if not product:
            raise ResourceNotFoundError("Product", slug)
        return product

    async def search(
        self,
        q: str | None = None,
        category: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        active: bool | None = None,
        page: int = 1,
        limit: int = 12,
    ) -> dict:
        conditions = []
        if q and q.strip():
            term = q.strip()
            conditions.append(or_(
                Product.title.icontains(term, autoescape=True),
                Product.description.icontains(term, autoescape=True),
            ))
        if category:
            conditions.append(Product.category == category)
        if active is not None:
            conditions.append(Product.active.is_(active))
        if min_price is not None:
            conditions.append(Product.price >= min_price)
        if max_price is not None:
            conditions.append(Product.price <= max_price)

        total = (await self.db.execute(
            select(func.count(Product.id)).where(*conditions),
        )).scalar_one()
        result = await self.db.execute(
            select(Product)
            .where(*conditions)
            .order_by(Product.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit),
        )
        pages = math.ceil(total / limit) or 1
        return {
            "total": total,
            "page": page,
            "pages": pages,
            "limit": limit,
            "has_next": page < pages,
            "has_prev": page > 1,
            "items": list(result.scalars().all()),
        }
