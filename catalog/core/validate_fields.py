"""Field Rules - pure syntactic checks for a create-product request.

Invariants:
    - All functions are PURE: no IO, no async, no DB; `now` is always passed in
    - FIELD_ORDER fixes the evaluation order; every triggered message is
      collected (no short-circuit within a field)
    - Storage-dependent checks (name+brand uniqueness, SKU uniqueness) are NOT
      here - services/product_validator.py interleaves them after their field

Design Decisions:
    - Explicit ordered tuples of FieldRule instead of declarative attributes:
      each rule names its field and message next to its predicate
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable
from urllib.parse import urlsplit

from catalog.core.dates import as_utc
from catalog.core.domain_types import ProductCategory, ProductField
from catalog.core.errors import FieldError
from catalog.core.repository_protocols import CreateRequestLike


INAPPROPRIATE_WORDS = ("banned", "illegal", "inappropriate")
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")

NAME_MAX_LENGTH = 200
BRAND_MIN_LENGTH = 2
BRAND_MAX_LENGTH = 100
PRICE_CEILING = Decimal("10000")
STOCK_CEILING = 100_000
EARLIEST_RELEASE = datetime(1900, 1, 1, tzinfo=timezone.utc)

_SKU_PATTERN = re.compile(r"[A-Za-z0-9-]{5,20}")
_BRAND_PATTERN = re.compile(r"[A-Za-z0-9 .'-]+")


@dataclass(frozen=True)
class FieldRule:
    """One syntactic rule: passes when check(request, now) is True."""
    field: ProductField
    message: str
    check: Callable[[CreateRequestLike, datetime], bool]
    applies: Callable[[CreateRequestLike], bool] = lambda request: True


# ─── Predicates ──────────────────────────────────────────────────

def is_valid_sku(sku: str | None) -> bool:
    """5-20 letters, digits or hyphens once internal spaces are stripped."""
    if sku is None:
        return False
    return _SKU_PATTERN.fullmatch(sku.replace(" ", "")) is not None


def is_valid_brand(brand: str | None) -> bool:
    return bool(brand) and _BRAND_PATTERN.fullmatch(brand) is not None


def is_appropriate_name(name: str | None) -> bool:
    lower = (name or "").lower()
    return not any(word in lower for word in INAPPROPRIATE_WORDS)


def is_valid_image_url(image_url: str) -> bool:
    """Absolute http(s) URL whose path ends in a known image extension."""
    try:
        parts = urlsplit(image_url.strip())
    except ValueError:
        return False
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        return False
    return parts.path.lower().endswith(IMAGE_EXTENSIONS)


def _has_text(value: str | None) -> bool:
    return bool(value and value.strip())


def _length_between(value: str | None, low: int, high: int) -> bool:
    return low <= len(value or "") <= high


def _release_at(request: CreateRequestLike) -> datetime | None:
    if request.release_date is None:
        return None
    return as_utc(request.release_date)


# ─── Rule table ──────────────────────────────────────────────────

FIELD_ORDER: tuple[ProductField, ...] = (
    ProductField.NAME,
    ProductField.BRAND,
    ProductField.SKU,
    ProductField.CATEGORY,
    ProductField.PRICE,
    ProductField.RELEASE_DATE,
    ProductField.STOCK_QUANTITY,
    ProductField.IMAGE_URL,
)

FIELD_RULES: dict[ProductField, tuple[FieldRule, ...]] = {
    ProductField.NAME: (
        FieldRule(
            ProductField.NAME, "Name is required.",
            lambda r, now: _has_text(r.name),
        ),
        FieldRule(
            ProductField.NAME,
            f"Name must be between 1 and {NAME_MAX_LENGTH} characters.",
            lambda r, now: _length_between(r.name, 1, NAME_MAX_LENGTH),
        ),
        FieldRule(
            ProductField.NAME, "Name contains inappropriate content.",
            lambda r, now: is_appropriate_name(r.name),
        ),
    ),
    ProductField.BRAND: (
        FieldRule(
            ProductField.BRAND, "Brand is required.",
            lambda r, now: _has_text(r.brand),
        ),
        FieldRule(
            ProductField.BRAND,
            f"Brand must be between {BRAND_MIN_LENGTH} and {BRAND_MAX_LENGTH} characters.",
            lambda r, now: _length_between(r.brand, BRAND_MIN_LENGTH, BRAND_MAX_LENGTH),
        ),
        FieldRule(
            ProductField.BRAND, "Brand contains invalid characters.",
            lambda r, now: is_valid_brand(r.brand),
        ),
    ),
    ProductField.SKU: (
        FieldRule(
            ProductField.SKU, "SKU is required.",
            lambda r, now: _has_text(r.sku),
        ),
        FieldRule(
            ProductField.SKU,
            "SKU must be alphanumeric, 5-20 characters, and may contain hyphens.",
            lambda r, now: is_valid_sku(r.sku),
        ),
    ),
    ProductField.CATEGORY: (
        FieldRule(
            ProductField.CATEGORY, "Category is not valid.",
            lambda r, now: ProductCategory.parse(r.category) is not None,
        ),
    ),
    ProductField.PRICE: (
        FieldRule(
            ProductField.PRICE, "Price must be greater than 0.",
            lambda r, now: r.price is not None and r.price > 0,
        ),
        FieldRule(
            ProductField.PRICE, "Price must be less than 10,000.",
            lambda r, now: r.price is not None and r.price < PRICE_CEILING,
        ),
    ),
    ProductField.RELEASE_DATE: (
        FieldRule(
            ProductField.RELEASE_DATE, "Release date cannot be before 1900.",
            lambda r, now: (
                _release_at(r) is not None and _release_at(r) >= EARLIEST_RELEASE
            ),
        ),
        FieldRule(
            ProductField.RELEASE_DATE, "Release date cannot be in the future.",
            lambda r, now: _release_at(r) is not None and _release_at(r) <= now,
        ),
    ),
    ProductField.STOCK_QUANTITY: (
        FieldRule(
            ProductField.STOCK_QUANTITY, "Stock quantity cannot be negative.",
            lambda r, now: r.stock_quantity is not None and r.stock_quantity >= 0,
        ),
        FieldRule(
            ProductField.STOCK_QUANTITY, "Stock quantity cannot exceed 100,000.",
            lambda r, now: (
                r.stock_quantity is not None and r.stock_quantity <= STOCK_CEILING
            ),
        ),
    ),
    ProductField.IMAGE_URL: (
        FieldRule(
            ProductField.IMAGE_URL,
            "ImageUrl must be a valid HTTP/HTTPS URL and point to an image file.",
            lambda r, now: is_valid_image_url(r.image_url),
            applies=lambda r: _has_text(r.image_url),
        ),
    ),
}


def check_field(
    field: ProductField, request: CreateRequestLike, now: datetime,
) -> list[FieldError]:
    """Run every rule of one field, returning the failures in rule order."""
    return [
        FieldError(rule.field.value, rule.message)
        for rule in FIELD_RULES[field]
        if rule.applies(request) and not rule.check(request, now)
    ]


def check_all_fields(request: CreateRequestLike, now: datetime) -> list[FieldError]:
    """Run the whole syntactic rule table in FIELD_ORDER."""
    errors: list[FieldError] = []
    for field in FIELD_ORDER:
        errors.extend(check_field(field, request, now))
    return errors


@dataclass(frozen=True)
class ValidationOutcome:
    """Aggregated result of the validation engine. Empty errors means valid."""
    errors: tuple[FieldError, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def has_field_errors(self) -> bool:
        """True when at least one error names a field (not only request-level)."""
        return any(e.field is not None for e in self.errors)

    def joined_messages(self) -> str:
        return "; ".join(e.message for e in self.errors)
