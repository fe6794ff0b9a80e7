"""Error Hierarchy - typed, categorized exceptions for all catalog failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages (causes stay chained, not rendered)

Design Decisions:
    - Single hierarchy with CatalogError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability data without coupling to the logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class FieldError:
    """One validation message. field is None for request-level errors."""
    field: str | None
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass
class ErrorContext:
    """Context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation_id: str | None = None
    sku: str | None = None
    stage: str | None = None
    debug_info: dict[str, Any] | None = None


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "operation_id": self.context.operation_id,
                    "sku": self.context.sku,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ProductValidationError(CatalogError):
    """One or more field rules rejected the create request."""
    def __init__(
        self, field_errors: list[FieldError], context: ErrorContext | None = None,
    ):
        super().__init__(
            "; ".join(e.message for e in field_errors),
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field_errors = list(field_errors)

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["details"] = [e.to_dict() for e in self.field_errors]
        return response


class BusinessRuleViolationError(CatalogError):
    """The request broke a business policy. Which one is only logged."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "BUSINESS_RULE_VIOLATION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class ResourceNotFoundError(CatalogError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class DuplicateKeyError(CatalogError):
    """Storage rejected the write because a unique key already exists."""
    def __init__(
        self, field: str, value: str | None = None, context: ErrorContext | None = None,
    ):
        message = (
            f"A product with {field} '{value}' already exists."
            if value is not None else f"A product with the same {field} already exists."
        )
        super().__init__(
            message, "DUPLICATE_KEY", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.field = field
        self.value = value


# ─── Infrastructure Errors (500-level) ──────────────────────────

class PersistenceError(CatalogError):
    """Database operation failed for a reason other than a key conflict."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "PERSISTENCE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation


class UnexpectedError(CatalogError):
    """Anything the pipeline did not anticipate."""
    def __init__(self, cause: BaseException, context: ErrorContext | None = None):
        super().__init__(
            "An unexpected error occurred",
            "INTERNAL_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.cause = cause
