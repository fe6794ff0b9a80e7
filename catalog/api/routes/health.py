"""Catalog Health - liveness and readiness of the product service.

Invariants:
    - GET /health/ answers from process state only (no IO)
    - GET /health/ready is 503 until the products table can be queried
    - Readiness also reports whether the product listing is currently cached
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

import catalog.infrastructure.database as database
from catalog.config import get_settings
from catalog.core.domain_types import ALL_PRODUCTS_CACHE_KEY
from catalog.infrastructure.listing_cache import InMemoryListingCache, get_listing_cache

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "catalog-api"


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    settings = get_settings()
    return {
        "status": "alive",
        "service": SERVICE_NAME,
        "daily_creation_limit": settings.daily_creation_limit,
    }


@router.get("/ready")
async def readiness(cache: InMemoryListingCache = Depends(get_listing_cache)):
    """Ready once the products table answers a query."""
    manager = database.db_manager
    products_ok = await manager.products_reachable() if manager else False
    if not products_ok:
        logger.warning("Readiness check failed: products table unreachable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "products_table_unreachable"},
        )
    listing = "warm" if cache.get(ALL_PRODUCTS_CACHE_KEY) is not None else "cold"
    return {"status": "ready", "checks": {"products_table": "ok", "listing_cache": listing}}
