"""Tests for SqlProductRepository - lookups, daily count and key conflicts on SQLite."""

from datetime import timedelta

import pytest

from catalog.core.errors import DuplicateKeyError
from catalog.models.product import Product
from catalog.services.product_repository import SqlProductRepository
from tests.helpers import NOW, make_request


def _product(when=NOW, **overrides) -> Product:
    return Product.from_request(make_request(**overrides), when)


async def test_add_then_lookups(test_db):
    repository = SqlProductRepository(test_db)
    saved = await repository.add(_product())

    assert saved.id is not None
    assert await repository.exists_by_sku("LAP-12345") is True
    assert await repository.exists_by_sku("LAP-00000") is False
    assert await repository.exists_by_name_and_brand("Gaming Laptop Pro", "Acme Corp")
    assert not await repository.exists_by_name_and_brand("Gaming Laptop Pro", "Other")


async def test_count_created_on_uses_utc_day(test_db):
    repository = SqlProductRepository(test_db)
    await repository.add(_product())
    await repository.add(_product(NOW - timedelta(days=1), sku="LAP-00002", name="Old"))
    await repository.add(_product(
        NOW.replace(hour=0, minute=0), sku="LAP-00003", name="Midnight",
    ))

    assert await repository.count_created_on(NOW.date()) == 2
    assert await repository.count_created_on((NOW - timedelta(days=1)).date()) == 1
    assert await repository.count_created_on((NOW + timedelta(days=1)).date()) == 0


async def test_duplicate_sku_raises_duplicate_key(test_db):
    repository = SqlProductRepository(test_db)
    await repository.add(_product())

    with pytest.raises(DuplicateKeyError) as exc_info:
        await repository.add(_product(name="Another Laptop"))

    assert exc_info.value.field == "SKU"
    assert exc_info.value.http_status == 409
    # session is usable again after the rollback
    assert await repository.exists_by_sku("LAP-12345") is True


async def test_get_list_and_delete(test_db):
    repository = SqlProductRepository(test_db)
    first = await repository.add(_product(NOW - timedelta(hours=2)))
    second = await repository.add(_product(sku="LAP-00002", name="Second Laptop"))

    assert (await repository.get(first.id)).sku == "LAP-12345"
    assert [p.id for p in await repository.list_all()] == [second.id, first.id]

    await repository.delete(first)
    assert await repository.get(first.id) is None
    assert await repository.count_created_on(NOW.date()) == 1


async def test_save_persists_stock_change(test_db):
    repository = SqlProductRepository(test_db)
    product = await repository.add(_product())
    product.set_stock(0)
    await repository.save(product)

    reloaded = await repository.get(product.id)
    assert reloaded.stock_quantity == 0
    assert reloaded.is_available is False
