"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - ProductId wraps UUID - never use bare UUID in domain logic
    - ProductCategory is closed: Electronics, Clothing, Books, Home
    - EventKind is the complete telemetry vocabulary of the creation pipeline

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

ProductId = NewType("ProductId", UUID)
OperationId = NewType("OperationId", str)


# ─── Constants ───────────────────────────────────────────────────

ALL_PRODUCTS_CACHE_KEY = "all_products"


# ─── Enums ───────────────────────────────────────────────────────

class ProductCategory(str, Enum):
    """Product categories accepted by the catalog."""
    ELECTRONICS = "Electronics"
    CLOTHING = "Clothing"
    BOOKS = "Books"
    HOME = "Home"

    @classmethod
    def parse(cls, value: object) -> "ProductCategory | None":
        """Return the matching category, or None for anything outside the enum."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class ProductField(str, Enum):
    """Field labels reported in validation errors."""
    NAME = "Name"
    BRAND = "Brand"
    SKU = "SKU"
    CATEGORY = "Category"
    PRICE = "Price"
    RELEASE_DATE = "ReleaseDate"
    STOCK_QUANTITY = "StockQuantity"
    IMAGE_URL = "ImageUrl"


class EventKind(str, Enum):
    """Telemetry events emitted by the creation orchestrator."""
    CREATION_STARTED = "CreationStarted"
    SKU_VALIDATION_PERFORMED = "SKUValidationPerformed"
    STOCK_VALIDATION_PERFORMED = "StockValidationPerformed"
    VALIDATION_FAILED = "ValidationFailed"
    PERSISTENCE_STARTED = "PersistenceStarted"
    PERSISTENCE_COMPLETED = "PersistenceCompleted"
    CACHE_INVALIDATED = "CacheInvalidated"
    CREATION_COMPLETED = "CreationCompleted"
    METRICS_RECORDED = "MetricsRecorded"


class CreationStage(str, Enum):
    """Stages of a single product creation call."""
    STARTED = "started"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"
