"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell - dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Repository methods are async because implementations do IO; cache
      invalidation and telemetry are synchronous fire-and-forget calls
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Protocol
from uuid import UUID

from catalog.core.domain_types import EventKind


class CreateRequestLike(Protocol):
    """Structural contract for an unvalidated create request."""
    name: str
    brand: str
    sku: str
    category: str
    price: Decimal
    release_date: datetime
    image_url: str | None
    stock_quantity: int


class ProductLike(Protocol):
    """Structural contract for a persisted product record.

    Lets the derivation functions run on the ORM model or any plain object.
    """
    id: UUID
    name: str
    brand: str
    sku: str
    category: str
    price: Decimal
    release_date: datetime
    created_at: datetime
    updated_at: datetime | None
    image_url: str | None
    stock_quantity: int
    is_available: bool


class ProductRepository(Protocol):
    """Contract for product persistence - implemented by shell."""
    async def exists_by_sku(self, sku: str) -> bool: ...
    async def exists_by_name_and_brand(self, name: str, brand: str) -> bool: ...
    async def count_created_on(self, day: date) -> int: ...
    async def add(self, product: Any) -> Any: ...


class ListingCache(Protocol):
    """Eviction side of the listing cache - all the creation pipeline needs."""
    def invalidate(self, key: str) -> None: ...


class TelemetrySink(Protocol):
    """Contract for structured pipeline events - implemented by shell."""
    def emit(self, kind: EventKind, fields: dict[str, Any]) -> None: ...
