"""Create Product - orchestrates validation, persistence, cache eviction and the response view.

Invariants:
    - Stages run strictly in order: validate -> persist -> invalidate cache -> derive view
    - Nothing is persisted when validation fails; repository.add is never called
    - The listing cache is evicted only after add() returned (commit confirmed)
    - Every call ends in exactly one MetricsRecorded event, success or failure
    - Validation failures: field errors -> ProductValidationError, only the
      request-level business error -> BusinessRuleViolationError
    - Persistence errors (DuplicateKeyError, PersistenceError) propagate unchanged;
      anything unexpected is wrapped in UnexpectedError; cancellation propagates as-is

Design Decisions:
    - Durations measured with perf_counter stopwatches; wall clock only for
      created_at and the age bucket
    - No retries here: retry policy belongs to the storage layer or the caller
"""

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Callable

from catalog.core.creation_metrics import ProductCreationMetrics
from catalog.core.derive_fields import derive_product_view
from catalog.core.domain_types import (
    ALL_PRODUCTS_CACHE_KEY, CreationStage, EventKind, OperationId,
)
from catalog.core.errors import (
    BusinessRuleViolationError, CatalogError, ErrorContext,
    ProductValidationError, UnexpectedError,
)
from catalog.core.repository_protocols import (
    CreateRequestLike, ListingCache, ProductRepository, TelemetrySink,
)
from catalog.core.validate_fields import ValidationOutcome
from catalog.models.product import Product
from catalog.schemas.product import ProductView
from catalog.services.product_validator import ProductValidator

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Stopwatch:
    """Accumulates elapsed seconds between start() and stop()."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self._clock = clock
        self._started_at: float | None = None
        self._elapsed = 0.0

    def start(self) -> "Stopwatch":
        self._started_at = self._clock()
        return self

    def stop(self) -> None:
        if self._started_at is not None:
            self._elapsed += self._clock() - self._started_at
            self._started_at = None

    @property
    def elapsed(self) -> float:
        if self._started_at is None:
            return self._elapsed
        return self._elapsed + (self._clock() - self._started_at)


class CreateProductHandler:
    """Creation orchestrator for a single product."""

    def __init__(
        self,
        repository: ProductRepository,
        validator: ProductValidator,
        cache: ListingCache,
        telemetry: TelemetrySink,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.repository = repository
        self.validator = validator
        self.cache = cache
        self.telemetry = telemetry
        self.clock = clock

    async def handle(self, request: CreateRequestLike) -> ProductView:
        operation_id = OperationId(uuid.uuid4().hex[:8])
        total = Stopwatch().start()
        validation = Stopwatch()
        persistence = Stopwatch()
        context = ErrorContext(operation_id=operation_id, sku=request.sku)
        stage = CreationStage.STARTED

        def record_metrics(success: bool, error_reason: str | None = None) -> None:
            total.stop()
            self._record_metrics(ProductCreationMetrics(
                operation_id=operation_id,
                product_name=request.name,
                sku=request.sku,
                category=str(request.category),
                validation_duration=validation.elapsed,
                persistence_duration=persistence.elapsed,
                total_duration=total.elapsed,
                success=success,
                error_reason=error_reason,
            ))

        self._emit(
            EventKind.CREATION_STARTED, operation_id,
            f"Starting product creation for {request.name}, Brand {request.brand}, "
            f"SKU {request.sku}, Category {request.category}",
            product_name=request.name, brand=request.brand,
            sku=request.sku, category=str(request.category),
        )

        try:
            stage = CreationStage.VALIDATING
            validation.start()
            outcome = await self.validator.validate(request)
            validation.stop()

            if not outcome.is_valid:
                reason = outcome.joined_messages()
                self._emit(
                    EventKind.VALIDATION_FAILED, operation_id,
                    f"Product validation failed for SKU {request.sku}. Errors: {reason}",
                    sku=request.sku, errors=reason,
                )
                record_metrics(False, reason)
                context.stage = CreationStage.VALIDATING.value
                raise self._outcome_error(outcome, context)

            self._emit(
                EventKind.SKU_VALIDATION_PERFORMED, operation_id,
                f"SKU validation performed for {request.sku}", sku=request.sku,
            )
            self._emit(
                EventKind.STOCK_VALIDATION_PERFORMED, operation_id,
                f"Stock validation performed for {request.sku} "
                f"with quantity {request.stock_quantity}",
                sku=request.sku, stock_quantity=request.stock_quantity,
            )

            stage = CreationStage.PERSISTING
            persistence.start()
            self._emit(
                EventKind.PERSISTENCE_STARTED, operation_id,
                f"Starting database operation for SKU {request.sku}", sku=request.sku,
            )
            product = Product.from_request(request, self.clock())
            saved = await self.repository.add(product)
            persistence.stop()
            self._emit(
                EventKind.PERSISTENCE_COMPLETED, operation_id,
                f"Database operation completed for ProductId {saved.id}",
                product_id=str(saved.id),
            )

            self.cache.invalidate(ALL_PRODUCTS_CACHE_KEY)
            self._emit(
                EventKind.CACHE_INVALIDATED, operation_id,
                f"Cache invalidated for key {ALL_PRODUCTS_CACHE_KEY}",
                cache_key=ALL_PRODUCTS_CACHE_KEY,
            )

            view = ProductView(**derive_product_view(saved, self.clock().date()))
            stage = CreationStage.COMPLETED
            record_metrics(True)
            self._emit(
                EventKind.CREATION_COMPLETED, operation_id,
                f"Product creation completed successfully for ProductId {saved.id}",
                product_id=str(saved.id),
            )
            return view

        except (ProductValidationError, BusinessRuleViolationError):
            raise
        except CatalogError as e:
            validation.stop()
            persistence.stop()
            record_metrics(False, e.message)
            e.context.operation_id = operation_id
            e.context.sku = request.sku
            e.context.stage = stage.value
            raise
        except asyncio.CancelledError:
            validation.stop()
            persistence.stop()
            record_metrics(False, "Operation cancelled")
            raise
        except Exception as e:
            validation.stop()
            persistence.stop()
            record_metrics(False, str(e))
            logger.error(
                f"Error during product creation for SKU {request.sku} at stage {stage.value}",
                exc_info=True, extra={"operation_id": operation_id, "sku": request.sku},
            )
            context.stage = stage.value
            raise UnexpectedError(e, context) from e

    @staticmethod
    def _outcome_error(
        outcome: ValidationOutcome, context: ErrorContext,
    ) -> CatalogError:
        if outcome.has_field_errors:
            return ProductValidationError(list(outcome.errors), context)
        return BusinessRuleViolationError(outcome.joined_messages(), context)

    def _emit(
        self, kind: EventKind, operation_id: str, message: str, **fields,
    ) -> None:
        self.telemetry.emit(
            kind, {"operation_id": operation_id, "message": message, **fields},
        )

    def _record_metrics(self, metrics: ProductCreationMetrics) -> None:
        self.telemetry.emit(
            EventKind.METRICS_RECORDED,
            {"message": metrics.summary(), **metrics.to_fields()},
        )
