"""Tests for CreateProductHandler - stage order, telemetry, metrics and error taxonomy."""

import asyncio
from unittest.mock import AsyncMock, MagicMock
from datetime import timedelta
from decimal import Decimal

import pytest

from catalog.core.business_rules import BUSINESS_RULE_MESSAGE
from catalog.core.domain_types import ALL_PRODUCTS_CACHE_KEY, EventKind
from catalog.core.errors import (
    BusinessRuleViolationError, DuplicateKeyError, PersistenceError,
    ProductValidationError, UnexpectedError,
)
from catalog.infrastructure.listing_cache import InMemoryListingCache
from catalog.models.product import Product
from catalog.services.create_product import CreateProductHandler, Stopwatch
from catalog.services.product_validator import SKU_TAKEN, ProductValidator
from tests.helpers import (
    NOW, InMemoryProductRepository, RecordingTelemetry, make_request,
)


class FailingAddRepository(InMemoryProductRepository):
    """Passes every lookup, then fails the insert with the given exception."""

    def __init__(self, error: BaseException):
        super().__init__()
        self.error = error

    async def add(self, product):
        self.add_calls += 1
        raise self.error


def _handler(repository=None):
    repository = repository or InMemoryProductRepository()
    telemetry = RecordingTelemetry()
    cache = InMemoryListingCache(ttl_seconds=300)
    cache.set(ALL_PRODUCTS_CACHE_KEY, ["stale"])
    handler = CreateProductHandler(
        repository=repository,
        validator=ProductValidator(repository, clock=lambda: NOW),
        cache=cache,
        telemetry=telemetry,
        clock=lambda: NOW,
    )
    return handler, repository, telemetry, cache


# ─── Success ─────────────────────────────────────────────────────

async def test_success_persists_and_returns_view():
    handler, repository, telemetry, cache = _handler()

    view = await handler.handle(make_request())

    assert repository.add_calls == 1
    assert view.sku == "LAP-12345"
    assert view.is_available is True
    assert view.category_display_name == "Electronics & Technology"
    assert view.formatted_price == "$1,500.00"
    assert view.product_age == "2 months old"
    assert view.brand_initials == "AC"
    assert view.availability_status == "Limited Stock"
    assert view.created_at == NOW
    assert cache.get(ALL_PRODUCTS_CACHE_KEY) is None


async def test_success_event_order():
    handler, _, telemetry, _ = _handler()
    await handler.handle(make_request())
    assert telemetry.kinds == [
        EventKind.CREATION_STARTED,
        EventKind.SKU_VALIDATION_PERFORMED,
        EventKind.STOCK_VALIDATION_PERFORMED,
        EventKind.PERSISTENCE_STARTED,
        EventKind.PERSISTENCE_COMPLETED,
        EventKind.CACHE_INVALIDATED,
        EventKind.METRICS_RECORDED,
        EventKind.CREATION_COMPLETED,
    ]


async def test_success_metrics_record():
    handler, _, telemetry, _ = _handler()
    await handler.handle(make_request())
    [metrics] = telemetry.metrics()
    assert metrics["success"] is True
    assert metrics["error_reason"] is None
    assert metrics["sku"] == "LAP-12345"
    assert metrics["total_ms"] >= metrics["validation_ms"]
    assert "Error=None" in metrics["message"]


async def test_events_share_operation_id():
    handler, _, telemetry, _ = _handler()
    await handler.handle(make_request())
    ids = {fields["operation_id"] for _, fields in telemetry.events}
    assert len(ids) == 1
    assert len(ids.pop()) == 8


async def test_home_view_discounts_price_and_hides_image():
    handler, _, _, _ = _handler()
    request = make_request(
        name="Oak Dining Chair", brand="Oakwood Living", sku="HOM-00042",
        category="Home", price=Decimal("150"),
    )
    view = await handler.handle(request)
    assert view.price == Decimal("135.00")
    assert view.formatted_price == "$135.00"
    assert view.image_url is None
    assert view.category_display_name == "Home & Garden"


# ─── Validation failures ─────────────────────────────────────────

async def test_duplicate_sku_rejected_before_persistence():
    existing = Product.from_request(
        make_request(name="Older Laptop"), NOW - timedelta(days=2),
    )
    handler, repository, telemetry, cache = _handler(
        InMemoryProductRepository([existing]),
    )

    with pytest.raises(ProductValidationError) as exc_info:
        await handler.handle(make_request())

    assert [(e.field, e.message) for e in exc_info.value.field_errors] == [
        ("SKU", SKU_TAKEN),
    ]
    assert repository.add_calls == 0
    assert cache.get(ALL_PRODUCTS_CACHE_KEY) == ["stale"]
    assert EventKind.VALIDATION_FAILED in telemetry.kinds
    assert EventKind.PERSISTENCE_STARTED not in telemetry.kinds


async def test_business_only_failure_raises_business_rule_violation():
    handler, repository, telemetry, _ = _handler()
    request = make_request(name="Basic Widget", price=Decimal("40"))

    with pytest.raises(BusinessRuleViolationError) as exc_info:
        await handler.handle(request)

    assert exc_info.value.message == BUSINESS_RULE_MESSAGE
    assert repository.add_calls == 0
    [metrics] = telemetry.metrics()
    assert metrics["success"] is False
    assert metrics["error_reason"] == BUSINESS_RULE_MESSAGE
    assert metrics["persistence_ms"] == 0.0


async def test_mixed_failure_keeps_business_entry_in_details():
    handler, _, _, _ = _handler()
    request = make_request(name="Basic Widget", price=Decimal("20000"))

    with pytest.raises(ProductValidationError) as exc_info:
        await handler.handle(request)

    fields = [e.field for e in exc_info.value.field_errors]
    assert fields == ["Price", None]


async def test_validation_failure_context_carries_operation_id():
    handler, _, telemetry, _ = _handler()
    with pytest.raises(ProductValidationError) as exc_info:
        await handler.handle(make_request(sku=""))
    started = telemetry.events[0][1]
    assert exc_info.value.context.operation_id == started["operation_id"]
    assert exc_info.value.context.stage == "validating"


# ─── Persistence and unexpected failures ─────────────────────────

async def test_duplicate_key_from_storage_propagates_unchanged():
    error = DuplicateKeyError("SKU", "LAP-12345")
    handler, repository, telemetry, cache = _handler(FailingAddRepository(error))

    with pytest.raises(DuplicateKeyError) as exc_info:
        await handler.handle(make_request())

    assert exc_info.value is error
    assert exc_info.value.http_status == 409
    assert exc_info.value.context.stage == "persisting"
    assert exc_info.value.context.sku == "LAP-12345"
    assert exc_info.value.to_response()["error"]["context"]["sku"] == "LAP-12345"
    assert repository.add_calls == 1
    assert cache.get(ALL_PRODUCTS_CACHE_KEY) == ["stale"]
    [metrics] = telemetry.metrics()
    assert metrics["success"] is False
    assert EventKind.CREATION_COMPLETED not in telemetry.kinds


async def test_persistence_error_propagates_unchanged():
    handler, _, telemetry, _ = _handler(
        FailingAddRepository(PersistenceError("connection lost", "insert")),
    )
    with pytest.raises(PersistenceError):
        await handler.handle(make_request())
    assert len(telemetry.metrics()) == 1


async def test_unexpected_error_is_wrapped():
    cause = RuntimeError("disk on fire")
    handler, _, telemetry, _ = _handler(FailingAddRepository(cause))

    with pytest.raises(UnexpectedError) as exc_info:
        await handler.handle(make_request())

    assert exc_info.value.cause is cause
    assert exc_info.value.__cause__ is cause
    [metrics] = telemetry.metrics()
    assert metrics["error_reason"] == "disk on fire"


async def test_cancellation_records_metrics_and_propagates():
    handler, _, telemetry, cache = _handler(
        FailingAddRepository(asyncio.CancelledError()),
    )
    with pytest.raises(asyncio.CancelledError):
        await handler.handle(make_request())
    [metrics] = telemetry.metrics()
    assert metrics["error_reason"] == "Operation cancelled"
    assert cache.get(ALL_PRODUCTS_CACHE_KEY) == ["stale"]


# ─── Stopwatch ───────────────────────────────────────────────────

def test_stopwatch_accumulates_only_while_running():
    ticks = iter([1.0, 3.0, 10.0, 10.5])
    watch = Stopwatch(clock=lambda: next(ticks))
    watch.start()
    watch.stop()
    watch.start()
    watch.stop()
    assert watch.elapsed == 2.5


def test_unstarted_stopwatch_reads_zero():
    assert Stopwatch().elapsed == 0.0


async def test_cache_untouched_when_storage_mock_fails():
    repository = AsyncMock()
    repository.exists_by_sku.return_value = False
    repository.exists_by_name_and_brand.return_value = False
    repository.count_created_on.return_value = 0
    repository.add.side_effect = PersistenceError("timeout", "insert")
    cache = MagicMock()
    handler = CreateProductHandler(
        repository=repository,
        validator=ProductValidator(repository, clock=lambda: NOW),
        cache=cache,
        telemetry=RecordingTelemetry(),
        clock=lambda: NOW,
    )

    with pytest.raises(PersistenceError):
        await handler.handle(make_request())

    repository.add.assert_awaited_once()
    repository.count_created_on.assert_awaited_once_with(NOW.date())
    cache.invalidate.assert_not_called()


async def test_persistence_error_context_names_operation_and_sku():
    handler, _, telemetry, _ = _handler(
        FailingAddRepository(PersistenceError("connection lost", "insert")),
    )
    with pytest.raises(PersistenceError) as exc_info:
        await handler.handle(make_request(sku="LAP-77777"))
    context = exc_info.value.context
    assert context.sku == "LAP-77777"
    assert context.operation_id == telemetry.events[0][1]["operation_id"]


class EvictOnlyCache:
    """Exposes nothing but invalidate(), the whole cache contract of the pipeline."""

    def __init__(self):
        self.evicted: list[str] = []

    def invalidate(self, key):
        self.evicted.append(key)


async def test_pipeline_needs_only_cache_invalidation():
    repository = InMemoryProductRepository()
    cache = EvictOnlyCache()
    handler = CreateProductHandler(
        repository=repository,
        validator=ProductValidator(repository, clock=lambda: NOW),
        cache=cache,
        telemetry=RecordingTelemetry(),
        clock=lambda: NOW,
    )
    await handler.handle(make_request())
    assert cache.evicted == [ALL_PRODUCTS_CACHE_KEY]
