"""Product Routes - create through the orchestrator, plus thin read/update/delete.

Invariants:
    - POST delegates everything to CreateProductHandler; errors reach the
      global CatalogError handler untouched
    - GET /products caches record snapshots under "all_products" (filled on
      miss); views are derived on every read, never cached
    - A fill is dropped when the key was evicted while the database was read
    - Every write (create, update, delete) evicts "all_products"

Design Decisions:
    - Handler built per request from the request-scoped session; the cache is
      a dependency so tests can swap it
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config import get_settings
from catalog.core.derive_fields import derive_product_view
from catalog.core.domain_types import ALL_PRODUCTS_CACHE_KEY
from catalog.core.errors import ResourceNotFoundError
from catalog.core.repository_protocols import ProductLike
from catalog.infrastructure.database import get_db
from catalog.infrastructure.listing_cache import InMemoryListingCache, get_listing_cache
from catalog.infrastructure.observability import LoggingTelemetrySink
from catalog.models.product import Product
from catalog.schemas.product import ProductCreate, ProductUpdate, ProductView
from catalog.services.create_product import CreateProductHandler
from catalog.services.product_repository import SqlProductRepository
from catalog.services.product_validator import ProductValidator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/products", tags=["products"])


def _today():
    return datetime.now(timezone.utc).date()


def _to_view(product: ProductLike) -> ProductView:
    return ProductView(**derive_product_view(product, _today()))


async def get_product_or_404(
    product_id: UUID, repository: SqlProductRepository,
) -> Product:
    product = await repository.get(product_id)
    if not product:
        raise ResourceNotFoundError("Product", str(product_id))
    return product


@router.post(
    "", response_model=ProductView,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    body: ProductCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    cache: InMemoryListingCache = Depends(get_listing_cache),
):
    """Create a product: validate, persist, evict the listing, return the view."""
    repository = SqlProductRepository(db)
    handler = CreateProductHandler(
        repository=repository,
        validator=ProductValidator(repository, get_settings().daily_creation_limit),
        cache=cache,
        telemetry=LoggingTelemetrySink(),
    )
    view = await handler.handle(body)
    response.headers["Location"] = f"{router.prefix}/{view.id}"
    return view


@router.get("", response_model=list[ProductView])
async def list_products(
    db: AsyncSession = Depends(get_db),
    cache: InMemoryListingCache = Depends(get_listing_cache),
):
    """All products, newest first."""
    snapshots = cache.get(ALL_PRODUCTS_CACHE_KEY)
    if snapshots is None:
        generation = cache.generation(ALL_PRODUCTS_CACHE_KEY)
        products = await SqlProductRepository(db).list_all()
        snapshots = tuple(p.snapshot() for p in products)
        cache.set(ALL_PRODUCTS_CACHE_KEY, snapshots, generation=generation)
    return [_to_view(s) for s in snapshots]


@router.get("/{product_id}", response_model=ProductView)
async def get_product(
    product_id: UUID, db: AsyncSession = Depends(get_db),
):
    product = await get_product_or_404(product_id, SqlProductRepository(db))
    return _to_view(product)


@router.put("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_product(
    product_id: UUID,
    body: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    cache: InMemoryListingCache = Depends(get_listing_cache),
):
    """Replace the editable fields of a product."""
    repository = SqlProductRepository(db)
    product = await get_product_or_404(product_id, repository)
    product.apply_update(body, datetime.now(timezone.utc))
    await repository.save(product)
    cache.invalidate(ALL_PRODUCTS_CACHE_KEY)
    logger.info(f"Product {product_id} updated", extra={"sku": product.sku})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_db),
    cache: InMemoryListingCache = Depends(get_listing_cache),
):
    repository = SqlProductRepository(db)
    product = await get_product_or_404(product_id, repository)
    await repository.delete(product)
    cache.invalidate(ALL_PRODUCTS_CACHE_KEY)
    logger.info(f"Product {product_id} deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
