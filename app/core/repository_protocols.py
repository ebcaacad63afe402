"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell (services/) via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - Async in Protocol: implementations do IO, but the core functions that
      consume their results (reconcile, check_session) are never async;
      the shell orchestrates the async calls around the pure logic
"""

from typing import Protocol
from uuid import UUID

from app.core.cart_reconcile import CartLine, ProductSnapshot
from app.core.domain_types import UserId, ProductId


class AccountLike(Protocol):
    """Structural contract for the account fields the auth check reads."""
    id: UUID
    role: str
    email: str
    token_version: int


class AccountLookup(Protocol):
    """Fetch-by-id for accounts; None when the account does not exist."""
    async def get_account(self, user_id: UserId) -> AccountLike | None: ...


class ProductLookup(Protocol):
    """Batch fetch; ids with no matching product are simply absent."""
    async def get_many(
        self, product_ids: list[ProductId],
    ) -> dict[UUID, ProductSnapshot]: ...


class CartStore(Protocol):
    """Per-owner cart storage keyed by (owner, product); no cart reads as no lines."""
    async def get_lines(self, owner_id: UserId) -> list[CartLine]: ...
    async def get_line_qty(
        self, owner_id: UserId, product_id: ProductId,
    ) -> int | None: ...
    async def upsert_line(
        self, owner_id: UserId, product_id: ProductId, qty: int,
    ) -> None: ...
    async def remove_line(
        self, owner_id: UserId, product_id: ProductId,
    ) -> bool: ...
