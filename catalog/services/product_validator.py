"""Product Validator - runs field rules, storage lookups and business rules for a create.

Invariants:
    - Order is fixed: Name (+ name/brand uniqueness), Brand, SKU (+ SKU
      uniqueness), Category, Price, ReleaseDate, StockQuantity, ImageUrl,
      business rules
    - Collect everything: storage-dependent checks run even when the
      syntactic checks for the same field already failed
    - Business-rule violations are logged one by one but reported as a single
      request-level error (field=None)
    - Never raises on invalid input; returns a ValidationOutcome

Design Decisions:
    - Pure rules live in core/; this class only adds the awaits on the
      repository around them
"""

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

from catalog.core.business_rules import (
    BUSINESS_RULE_MESSAGE, DAILY_CREATION_LIMIT, find_business_rule_violations,
)
from catalog.core.domain_types import ProductField
from catalog.core.errors import FieldError
from catalog.core.repository_protocols import CreateRequestLike, ProductRepository
from catalog.core.validate_fields import FIELD_ORDER, ValidationOutcome, check_field

logger = logging.getLogger(__name__)

NAME_BRAND_TAKEN = "A product with the same name and brand already exists."
SKU_TAKEN = "SKU already exists."


class ProductValidator:
    """Validation engine for create-product requests."""

    def __init__(
        self,
        repository: ProductRepository,
        daily_limit: int = DAILY_CREATION_LIMIT,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.repository = repository
        self.daily_limit = daily_limit
        self.clock = clock
        self._storage_checks: dict[
            ProductField, Callable[[CreateRequestLike], Awaitable[FieldError | None]]
        ] = {
            ProductField.NAME: self._check_name_brand_unique,
            ProductField.SKU: self._check_sku_unique,
        }

    async def validate(self, request: CreateRequestLike) -> ValidationOutcome:
        now = self.clock()
        errors: list[FieldError] = []
        for field in FIELD_ORDER:
            errors.extend(check_field(field, request, now))
            storage_check = self._storage_checks.get(field)
            if storage_check:
                error = await storage_check(request)
                if error:
                    errors.append(error)

        business_error = await self._check_business_rules(request, now)
        if business_error:
            errors.append(business_error)
        return ValidationOutcome(tuple(errors))

    async def _check_name_brand_unique(
        self, request: CreateRequestLike,
    ) -> FieldError | None:
        logger.info(
            f"Checking uniqueness for product name {request.name} "
            f"and brand {request.brand}",
        )
        if await self.repository.exists_by_name_and_brand(request.name, request.brand):
            return FieldError(ProductField.NAME.value, NAME_BRAND_TAKEN)
        return None

    async def _check_sku_unique(self, request: CreateRequestLike) -> FieldError | None:
        logger.info(f"Checking SKU uniqueness for {request.sku}", extra={"sku": request.sku})
        if await self.repository.exists_by_sku(request.sku):
            return FieldError(ProductField.SKU.value, SKU_TAKEN)
        return None

    async def _check_business_rules(
        self, request: CreateRequestLike, now: datetime,
    ) -> FieldError | None:
        todays_count = await self.repository.count_created_on(now.date())
        violations = find_business_rule_violations(
            request, todays_count, now, self.daily_limit,
        )
        for violation in violations:
            logger.warning(violation, extra={"sku": request.sku})
        if violations:
            return FieldError(None, BUSINESS_RULE_MESSAGE)
        return None
