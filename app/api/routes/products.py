"""Product Routes — public catalog search/detail and admin CRUD.

Invariants:
    - POST/PUT/DELETE require the admin role
    - Every successful mutation schedules exactly one audit entry as a background
      task; audit failure never changes the response
    - GET /{slug} serves active products only
"""

import logging
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import CurrentUser, require_admin
from app.config import Settings, get_settings
from app.core.domain_types import AuditAction
from app.infrastructure.database import get_db
from app.schemas.product import (
    ProductCreate, ProductEnvelope, ProductOut, ProductPage, ProductUpdate,
)
from app.services.audit_service import build_audit_entry, record_audit
from app.services.product_service import ProductService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/products", tags=["products"])


@router.post(
    "", response_model=ProductEnvelope,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    body: ProductCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a product with a unique slug derived from its title."""
    product = await ProductService(db).create(body.model_dump(), admin.id)
    background_tasks.add_task(record_audit, build_audit_entry(
        AuditAction.PRODUCT_CREATE, product.id, admin, request,
        {
            "title": product.title, "price": product.price,
            "stock": product.stock, "category": product.category,
        },
    ))
    return ProductEnvelope(
        message="Product created", product=ProductOut.model_validate(product),
    )


@router.get("", response_model=ProductPage)
async def list_products(
    q: str | None = Query(None, max_length=200),
    category: str | None = Query(None, max_length=80),
    min_price: float | None = Query(None, ge=0, alias="min"),
    max_price: float | None = Query(None, ge=0, alias="max"),
    active: bool | None = None,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Paginated search, newest first."""
    page_size = min(
        limit or settings.product_page_size_default,
        settings.product_page_size_max,
    )
    result = await ProductService(db).search(
        q=q,
        category=category.strip() if category else None,
        min_price=min_price,
        max_price=max_price,
        active=active,
        page=page,
        limit=page_size,
    )
    result["items"] = [ProductOut.model_validate(p) for p in result["items"]]
    return ProductPage(**result)


@router.get("/{slug}", response_model=ProductEnvelope)
async def get_product(
    slug: str, db: AsyncSession = Depends(get_db),
):
    product = await ProductService(db).get_active_by_slug(slug.strip())
    return ProductEnvelope(product=ProductOut.model_validate(product))


@router.put("/{product_id}", response_model=ProductEnvelope)
async def update_product(
    product_id: UUID,
    body: ProductUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Partial update; a new title regenerates the slug."""
    product, changed = await ProductService(db).update(product_id, body.changes())
    background_tasks.add_task(record_audit, build_audit_entry(
        AuditAction.PRODUCT_UPDATE, product.id, admin, request, changed,
    ))
    return ProductEnvelope(
        message="Product updated", product=ProductOut.model_validate(product),
    )


@router.delete("/{product_id}")
async def delete_product(
    product_id: UUID,
    request: Request,
    background_tasks: BackgroundTasks,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    product = await ProductService(db).delete(product_id)
    background_tasks.add_task(record_audit, build_audit_entry(
        AuditAction.PRODUCT_DELETE, product.id, admin, request,
        {"title": product.title, "slug": product.slug, "price": product.price},
    ))
    return {"message": "Product deleted", "id": str(product.id)}
