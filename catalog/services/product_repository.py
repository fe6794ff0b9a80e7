"""SQL Product Repository - ProductRepository over an AsyncSession.

Invariants:
    - add() commits exactly once; on failure the session is rolled back
    - A unique-constraint violation on sku surfaces as DuplicateKeyError("SKU"),
      every other database failure as PersistenceError (cause chained)
    - count_created_on uses the half-open UTC day [00:00, next 00:00)
"""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.dates import utc_day_bounds
from catalog.core.domain_types import ProductField
from catalog.core.errors import DuplicateKeyError, PersistenceError
from catalog.models.product import Product

logger = logging.getLogger(__name__)


class SqlProductRepository:
    """Product persistence backed by SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists_by_sku(self, sku: str) -> bool:
        result = await self.db.execute(
            select(Product.id).where(Product.sku == sku).limit(1),
        )
        return result.first() is not None

    async def exists_by_name_and_brand(self, name: str, brand: str) -> bool:
        result = await self.db.execute(
            select(Product.id)
            .where(Product.name == name)
            .where(Product.brand == brand)
            .limit(1),
        )
        return result.first() is not None

    async def count_created_on(self, day: date) -> int:
        start, end = utc_day_bounds(day)
        result = await self.db.execute(
            select(func.count(Product.id))
            .where(Product.created_at >= start)
            .where(Product.created_at < end),
        )
        return result.scalar_one()

    async def add(self, product: Product) -> Product:
        """Insert and commit; returns the committed record."""
        self.db.add(product)
        await self._commit(product, "insert")
        await self.db.refresh(product)
        return product

    async def save(self, product: Product) -> Product:
        """Commit pending changes to an already-tracked record."""
        await self._commit(product, "update")
        return product

    async def get(self, product_id: UUID) -> Product | None:
        result = await self.db.execute(
            select(Product).where(Product.id == product_id),
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Product]:
        result = await self.db.execute(
            select(Product).order_by(Product.created_at.desc()),
        )
        return list(result.scalars().all())

    async def delete(self, product: Product) -> None:
        await self.db.delete(product)
        await self._commit(product, "delete")

    async def _commit(self, product: Product, operation: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if "sku" in str(e.orig).lower():
                logger.warning(
                    f"Unique SKU conflict on {operation}",
                    extra={"sku": product.sku},
                )
                raise DuplicateKeyError(ProductField.SKU.value, product.sku) from e
            logger.error(f"DB integrity error on {operation}: {e}")
            raise PersistenceError("Integrity constraint violated", operation) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"DB error on {operation}: {e}")
            raise PersistenceError("Database operation failed", operation) from e
