"""Creation Metrics - the single record emitted at the end of every creation call.

Invariants:
    - Exactly one metrics record per creation call, success or failure
    - Durations are seconds (float) internally, milliseconds in emitted fields
    - error_reason is None on success
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProductCreationMetrics:
    """Stage timings and outcome of one creation call."""
    operation_id: str
    product_name: str
    sku: str
    category: str
    validation_duration: float
    persistence_duration: float
    total_duration: float
    success: bool
    error_reason: str | None = None

    def to_fields(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "product_name": self.product_name,
            "sku": self.sku,
            "category": self.category,
            "validation_ms": round(self.validation_duration * 1000, 3),
            "persistence_ms": round(self.persistence_duration * 1000, 3),
            "total_ms": round(self.total_duration * 1000, 3),
            "success": self.success,
            "error_reason": self.error_reason,
        }

    def summary(self) -> str:
        """One-line human summary used as the log message."""
        f = self.to_fields()
        return (
            f"Product creation metrics | OperationId={f['operation_id']} "
            f"| Name={f['product_name']} | SKU={f['sku']} | Category={f['category']} "
            f"| Validation={f['validation_ms']}ms | DB={f['persistence_ms']}ms "
            f"| Total={f['total_ms']}ms | Success={f['success']} "
            f"| Error={f['error_reason'] or 'None'}"
        )
