"""Product ORM - persists one catalog product.

Invariants:
    - id is UUID primary key, sku carries a unique index (final guard against
      concurrent creates that both passed the SKU check)
    - is_available == (stock_quantity > 0) after the constructor and after any
      write to stock_quantity; is_available is never set on its own
    - created_at set once at creation; updated_at only by apply_update

Design Decisions:
    - @validates on stock_quantity recomputes is_available on every assignment,
      including constructor kwargs; set_stock() is the named mutator callers use
    - snapshot() detaches the columns into a frozen ProductSnapshot for the
      listing cache; views are always derived from a record or snapshot
    - category stored as its string value: enum membership is enforced by the
      validation rules, not the column
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Text, Integer, Boolean, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column, validates
from sqlalchemy.dialects.postgresql import UUID

from catalog.core.domain_types import ProductCategory
from catalog.core.repository_protocols import CreateRequestLike
from catalog.db.base import Base


@dataclass(frozen=True)
class ProductSnapshot:
    """Detached, immutable copy of a product's columns (safe to cache)."""
    id: uuid.UUID
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


class Product(Base):
    """Catalog product entity."""
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    brand: Mapped[str] = mapped_column(String(100), nullable=False)
    sku: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True,
    )
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    release_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    stock_quantity: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    is_available: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )

    def __init__(self, **kwargs):
        if "is_available" in kwargs:
            raise TypeError("is_available is derived from stock_quantity")
        kwargs.setdefault("stock_quantity", 0)
        super().__init__(**kwargs)

    @validates("stock_quantity")
    def _sync_availability(self, key: str, quantity: int) -> int:
        self.is_available = quantity > 0
        return quantity

    def set_stock(self, quantity: int) -> None:
        """Change stock; availability follows automatically."""
        self.stock_quantity = quantity

    @classmethod
    def from_request(cls, request: CreateRequestLike, now: datetime) -> "Product":
        """Build a new, not-yet-persisted record from a validated request."""
        category = ProductCategory.parse(request.category)
        return cls(
            id=uuid.uuid4(),
            name=request.name,
            brand=request.brand,
            sku=request.sku,
            category=category.value if category else request.category,
            price=request.price,
            release_date=request.release_date,
            created_at=now,
            updated_at=None,
            image_url=request.image_url or None,
            stock_quantity=request.stock_quantity,
        )

    def snapshot(self) -> ProductSnapshot:
        return ProductSnapshot(
            id=self.id,
            name=self.name,
            brand=self.brand,
            sku=self.sku,
            category=self.category,
            price=self.price,
            release_date=self.release_date,
            created_at=self.created_at,
            updated_at=self.updated_at,
            image_url=self.image_url,
            stock_quantity=self.stock_quantity,
            is_available=self.is_available,
        )

    def apply_update(self, changes: CreateRequestLike, now: datetime) -> None:
        """Overwrite the editable fields and stamp updated_at."""
        category = ProductCategory.parse(changes.category)
        self.name = changes.name
        self.brand = changes.brand
        self.sku = changes.sku
        self.category = category.value if category else changes.category
        self.price = changes.price
        self.release_date = changes.release_date
        self.image_url = changes.image_url or None
        self.set_stock(changes.stock_quantity)
        self.updated_at = now
