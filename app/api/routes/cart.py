"""Cart Routes — read, set quantity, and remove lines for the caller's cart.

Invariants:
    - Every response is the reconciled view of the persisted lines after the
      mutation (never an echo of the request)
    - No cart yet → empty view, not 404
    - POST with qty=0 removes the line; for a product not in the cart it is a no-op
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import CurrentUser, get_current_user
from app.infrastructure.database import get_db
from app.schemas.cart import CartResponse, CartUpsert
from app.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.get("", response_model=CartResponse)
async def get_cart(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    view = await CartService(db).get_cart(current_user.id)
    return view.to_dict()


@router.post("", response_model=CartResponse)
async def set_cart_quantity(
    body: CartUpsert,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Set (not add to) the quantity of one product."""
    view = await CartService(db).set_quantity(
        current_user.id, body.product_id, body.qty,
    )
    return view.to_dict()


@router.delete("/{product_id}", response_model=CartResponse)
async def remove_cart_item(
    product_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    view = await CartService(db).remove_item(current_user.id, product_id)
    return view.to_dict()
