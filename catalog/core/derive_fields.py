"""Derived Fields - presentation-only values computed from a persisted product.

Invariants:
    - All functions are PURE and total: same record + same day -> same output,
      no error path
    - Derived values are never stored; derive_product_view builds a fresh dict
      on every call
    - Home products: 10% discount on the displayed price, image URL suppressed

Design Decisions:
    - DERIVED_FIELDS is a plain table of functions keyed by output field; every
      entry takes (record, today) so the table stays uniform
    - Age buckets past 5 years keep counting years; only exactly 1825 days
      reads "Classic"
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable

from catalog.core.dates import as_utc
from catalog.core.domain_types import ProductCategory
from catalog.core.repository_protocols import ProductLike


HOME_DISCOUNT_RATE = Decimal("0.9")
CURRENCY_SYMBOL = "$"

CATEGORY_DISPLAY_NAMES = {
    ProductCategory.ELECTRONICS: "Electronics & Technology",
    ProductCategory.CLOTHING: "Clothing & Fashion",
    ProductCategory.BOOKS: "Books & Media",
    ProductCategory.HOME: "Home & Garden",
}
UNCATEGORIZED = "Uncategorized"

DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365
CLASSIC_AGE_DAYS = 5 * DAYS_PER_YEAR

LIMITED_STOCK_THRESHOLD = 5


def _is_home(record: ProductLike) -> bool:
    return ProductCategory.parse(record.category) is ProductCategory.HOME


def _plural(count: int, unit: str) -> str:
    return f"1 {unit} old" if count == 1 else f"{count} {unit}s old"


# ─── Derivers ────────────────────────────────────────────────────

def category_display_name(record: ProductLike, today: date | None = None) -> str:
    category = ProductCategory.parse(record.category)
    return CATEGORY_DISPLAY_NAMES.get(category, UNCATEGORIZED)


def effective_price(record: ProductLike, today: date | None = None) -> Decimal:
    price = Decimal(str(record.price))
    return price * HOME_DISCOUNT_RATE if _is_home(record) else price


def format_currency(amount: Decimal) -> str:
    """Render an amount as en-US currency text, e.g. $1,234.50."""
    rounded = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{CURRENCY_SYMBOL}{rounded:,.2f}"


def formatted_price(record: ProductLike, today: date | None = None) -> str:
    return format_currency(effective_price(record))


def display_image_url(record: ProductLike, today: date | None = None) -> str | None:
    if _is_home(record):
        return None
    return record.image_url


def product_age(record: ProductLike, today: date) -> str:
    """Human-readable age bucket relative to `today` (UTC calendar day)."""
    released = as_utc(record.release_date).date()
    if released > today:
        return "Releases in the future"

    days = (today - released).days
    if days < DAYS_PER_MONTH:
        return "New Release"
    if days < DAYS_PER_YEAR:
        return _plural(max(1, days // DAYS_PER_MONTH), "month")
    if days == CLASSIC_AGE_DAYS:
        return "Classic"
    return _plural(max(1, days // DAYS_PER_YEAR), "year")


def brand_initials(record: ProductLike, today: date | None = None) -> str:
    parts = (record.brand or "").split()
    if not parts:
        return "?"
    if len(parts) == 1:
        return parts[0][0].upper()
    return f"{parts[0][0].upper()}{parts[-1][0].upper()}"


def availability_status(record: ProductLike, today: date | None = None) -> str:
    # "Out of Stock" and "Unavailable" only show if the stock flag drifted
    if not record.is_available:
        return "Out of Stock"
    if record.stock_quantity <= 0:
        return "Unavailable"
    if record.stock_quantity == 1:
        return "Last Item"
    if record.stock_quantity <= LIMITED_STOCK_THRESHOLD:
        return "Limited Stock"
    return "In Stock"


DERIVED_FIELDS: dict[str, Callable[[ProductLike, date], Any]] = {
    "category_display_name": category_display_name,
    "price": effective_price,
    "formatted_price": formatted_price,
    "image_url": display_image_url,
    "product_age": product_age,
    "brand_initials": brand_initials,
    "availability_status": availability_status,
}


def derive_product_view(record: ProductLike, today: date) -> dict:
    """Persisted fields overlaid with every derived field."""
    view = {
        "id": record.id,
        "name": record.name,
        "brand": record.brand,
        "sku": record.sku,
        "category": record.category,
        "release_date": record.release_date,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
        "stock_quantity": record.stock_quantity,
        "is_available": record.is_available,
    }
    for field_name, derive in DERIVED_FIELDS.items():
        view[field_name] = derive(record, today)
    return view
