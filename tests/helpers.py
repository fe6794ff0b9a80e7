"""Shared test builders - valid requests, records and in-memory collaborators."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

from catalog.core.dates import as_utc
from catalog.core.domain_types import EventKind
from catalog.core.errors import DuplicateKeyError
from catalog.schemas.product import ProductCreate


NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def make_request(**overrides) -> ProductCreate:
    """A create request that passes every rule at NOW."""
    data = {
        "name": "Gaming Laptop Pro",
        "brand": "Acme Corp",
        "sku": "LAP-12345",
        "category": "Electronics",
        "price": Decimal("1500"),
        "release_date": NOW - timedelta(days=60),
        "image_url": "https://cdn.example.com/images/laptop.jpg",
        "stock_quantity": 3,
    }
    data.update(overrides)
    return ProductCreate(**data)


def make_record(**overrides) -> SimpleNamespace:
    """Plain object satisfying ProductLike, for the pure derivation functions."""
    data = {
        "id": uuid4(),
        "name": "Gaming Laptop Pro",
        "brand": "Acme Corp",
        "sku": "LAP-12345",
        "category": "Electronics",
        "price": Decimal("1500.00"),
        "release_date": NOW - timedelta(days=60),
        "created_at": NOW,
        "updated_at": None,
        "image_url": "https://cdn.example.com/images/laptop.jpg",
        "stock_quantity": 3,
        "is_available": True,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


class InMemoryProductRepository:
    """ProductRepository over a list; add() enforces SKU uniqueness like the DB."""

    def __init__(self, products=None):
        self.products = list(products or [])
        self.add_calls = 0

    async def exists_by_sku(self, sku):
        return any(p.sku == sku for p in self.products)

    async def exists_by_name_and_brand(self, name, brand):
        return any(p.name == name and p.brand == brand for p in self.products)

    async def count_created_on(self, day):
        return sum(1 for p in self.products if as_utc(p.created_at).date() == day)

    async def add(self, product):
        self.add_calls += 1
        if any(p.sku == product.sku for p in self.products):
            raise DuplicateKeyError("SKU", product.sku)
        self.products.append(product)
        return product


class RecordingTelemetry:
    """TelemetrySink that keeps every event in order."""

    def __init__(self):
        self.events: list[tuple[EventKind, dict]] = []

    def emit(self, kind, fields):
        self.events.append((kind, dict(fields)))

    @property
    def kinds(self) -> list[EventKind]:
        return [kind for kind, _ in self.events]

    def metrics(self) -> list[dict]:
        return [f for kind, f in self.events if kind is EventKind.METRICS_RECORDED]
