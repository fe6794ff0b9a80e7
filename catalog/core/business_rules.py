"""Business Rules - cross-field, category-specific policy checks for new products.

Invariants:
    - All functions are PURE: the daily count and the clock are passed in
    - find_business_rule_violations returns EVERY violation (for logging);
      callers collapse them into one generic request-level error
    - Unknown categories get no category-specific checks (the field rule
      already reports them)
"""

from datetime import datetime
from decimal import Decimal

from catalog.core.dates import as_utc, years_before
from catalog.core.domain_types import ProductCategory
from catalog.core.repository_protocols import CreateRequestLike


BUSINESS_RULE_MESSAGE = "Product violates one or more business rules."

DAILY_CREATION_LIMIT = 500

TECHNOLOGY_KEYWORDS = (
    "phone", "laptop", "tablet", "camera", "tv", "monitor", "console",
)
HOME_RESTRICTED_WORDS = ("weapon", "explosive")

ELECTRONICS_MIN_PRICE = Decimal("50")
ELECTRONICS_MAX_AGE_YEARS = 5
HOME_MAX_PRICE = Decimal("200")
CLOTHING_MIN_BRAND_LENGTH = 3

HIGH_VALUE_PRICE = Decimal("500")
HIGH_VALUE_MAX_STOCK = 10
EXPENSIVE_PRICE = Decimal("100")
EXPENSIVE_MAX_STOCK = 20


def contains_technology_keyword(name: str | None) -> bool:
    lower = (name or "").lower()
    return any(keyword in lower for keyword in TECHNOLOGY_KEYWORDS)


def is_appropriate_for_home(name: str | None) -> bool:
    lower = (name or "").lower()
    return not any(word in lower for word in HOME_RESTRICTED_WORDS)


def check_daily_limit(todays_count: int, limit: int = DAILY_CREATION_LIMIT) -> str | None:
    """Global cap on records created per server day."""
    if todays_count >= limit:
        return f"Daily product addition limit reached: {todays_count}"
    return None


def check_electronics(request: CreateRequestLike, now: datetime) -> list[str]:
    violations = []
    if request.price is not None and request.price < ELECTRONICS_MIN_PRICE:
        violations.append(
            f"Electronics product {request.name} has price below minimum: {request.price}",
        )
    if not contains_technology_keyword(request.name):
        violations.append(
            f"Electronics product {request.name} does not contain technology keywords.",
        )
    if request.release_date is not None and as_utc(request.release_date) < years_before(
        now, ELECTRONICS_MAX_AGE_YEARS,
    ):
        violations.append(
            f"Electronics product {request.name} is older than "
            f"{ELECTRONICS_MAX_AGE_YEARS} years.",
        )
    return violations


def check_home(request: CreateRequestLike) -> list[str]:
    violations = []
    if request.price is not None and request.price > HOME_MAX_PRICE:
        violations.append(f"Home product {request.name} has price above maximum.")
    if not is_appropriate_for_home(request.name):
        violations.append(f"Home product {request.name} contains restricted content.")
    return violations


def check_clothing(request: CreateRequestLike) -> list[str]:
    if len(request.brand or "") < CLOTHING_MIN_BRAND_LENGTH:
        return [
            f"Clothing product {request.name} has brand shorter than "
            f"{CLOTHING_MIN_BRAND_LENGTH} characters.",
        ]
    return []


def check_stock_caps(request: CreateRequestLike) -> list[str]:
    """Price/stock caps. Both apply; a price above 500 can trip both."""
    if request.price is None or request.stock_quantity is None:
        return []
    violations = []
    if request.price > HIGH_VALUE_PRICE and request.stock_quantity > HIGH_VALUE_MAX_STOCK:
        violations.append(
            f"High value product {request.name} has stock "
            f"{request.stock_quantity} above allowed limit.",
        )
    if request.price > EXPENSIVE_PRICE and request.stock_quantity > EXPENSIVE_MAX_STOCK:
        violations.append(
            f"Expensive product {request.name} has stock "
            f"{request.stock_quantity} above {EXPENSIVE_MAX_STOCK}.",
        )
    return violations


def find_business_rule_violations(
    request: CreateRequestLike,
    todays_count: int,
    now: datetime,
    daily_limit: int = DAILY_CREATION_LIMIT,
) -> list[str]:
    """Every business policy the request breaks, as log-ready messages."""
    violations = []
    daily = check_daily_limit(todays_count, daily_limit)
    if daily:
        violations.append(daily)

    category = ProductCategory.parse(request.category)
    if category is ProductCategory.ELECTRONICS:
        violations.extend(check_electronics(request, now))
    elif category is ProductCategory.HOME:
        violations.extend(check_home(request))
    elif category is ProductCategory.CLOTHING:
        violations.extend(check_clothing(request))

    violations.extend(check_stock_caps(request))
    return violations
