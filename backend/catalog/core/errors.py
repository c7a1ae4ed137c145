"""Error Hierarchy — typed, categorized exceptions for every catalog failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; store outages (503) are critical
    - to_response() produces the REST envelope {status: "error", code, message, errors?}
    - Debug detail only rendered when the caller asks for it (non-production)

Design Decisions:
    - Single hierarchy with CatalogError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Conflict maps to 400, not 409: keeps parity with the existing client contract
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
    CONFLICT = "conflict"
    RESOURCE_NOT_FOUND = "resource_not_found"
    BUSINESS_RULE = "business_rule"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    book_id: int | None = None
    operation: str | None = None
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
        errors: list[dict] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.errors = errors or []

    def to_response(self, include_debug: bool = False) -> dict:
        """Convert to standardized REST error envelope."""
        body: dict[str, Any] = {
            "status": "error",
            "code": self.code,
            "message": self.message,
        }
        if self.errors:
            body["errors"] = self.errors
        if include_debug:
            body["detail"] = {
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "book_id": self.context.book_id,
                "operation": self.context.operation,
                "debug_info": self.context.debug_info,
            }
        return body


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidInputError(CatalogError):
    """Malformed or missing fields that slipped past schema validation."""
    def __init__(
        self, message: str, errors: list[dict] | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400, errors,
        )


class ConflictError(CatalogError):
    """Uniqueness violation (duplicate isbn)."""
    def __init__(
        self, message: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        errors = [{"field": field, "message": message}] if field else None
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 400, errors,
        )
        self.field = field


class ResourceNotFoundError(CatalogError):
    """Requested record does not exist (or is hidden as soft-deleted)."""
    def __init__(
        self, resource_type: str, resource_id: int | str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class InvalidStateError(CatalogError):
    """Illegal lifecycle transition (e.g. restoring an active record)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_STATE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )


# ─── Store Errors ───────────────────────────────────────────────

class StoreUnavailableError(CatalogError):
    """Backing store unreachable."""
    def __init__(
        self, message: str = "Service unavailable",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "STORE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )


class StoreError(CatalogError):
    """Any other persistence failure. Recoverable ones surface as 400."""
    def __init__(
        self, message: str = "Database error", recoverable: bool = True,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "STORE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.ERROR if recoverable else ErrorSeverity.CRITICAL,
            context, 400 if recoverable else 500,
        )
        self.recoverable = recoverable
