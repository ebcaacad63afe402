"""Error Hierarchy — typed, categorized exceptions for all Eclipse Shop failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable at the request boundary;
      infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with EclipseError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
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
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    product_id: str | None = None
    debug_info: dict[str, Any] | None = None


class EclipseError(Exception):
    """Base exception for all Eclipse Shop errors."""

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
                    "user_id": self.context.user_id,
                    "product_id": self.context.product_id,
                },
            }
        }


# ─── Authentication / Authorization ─────────────────────────────

class AuthenticationError(EclipseError):
    """Base for failures that require the caller to (re-)authenticate."""


class MissingCredentialError(AuthenticationError):
    """No bearer credential on a protected request."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Access token required",
            "MISSING_CREDENTIAL", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class StaleOrInvalidCredentialError(AuthenticationError):
    """Credential present but unusable: bad signature, expired, or revoked."""
    def __init__(
        self,
        message: str = "Token is no longer valid. Please log in again.",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "STALE_OR_INVALID_CREDENTIAL", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class InvalidLoginError(AuthenticationError):
    """Email/password pair rejected."""
    def __init__(
        self,
        message: str = "Account doesn't exist or invalid credentials",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "INVALID_CREDENTIALS", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class InsufficientPermissionsError(EclipseError):
    """Authenticated, but the role is not allowed on this route."""
    def __init__(self, required: list[str], context: ErrorContext | None = None):
        super().__init__(
            "Insufficient permissions",
            "INSUFFICIENT_PERMISSIONS", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )
        self.required = required


# ─── Domain Errors (400-level) ──────────────────────────────────

class BusinessRuleError(EclipseError):
    """Request is well-formed but violates a domain rule."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "BUSINESS_RULE_VIOLATION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class ProductUnavailableError(EclipseError):
    """Cart line cannot be added: product missing or inactive."""
    def __init__(self, product_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.product_id = product_id
        super().__init__(
            "Product not found or inactive",
            "PRODUCT_UNAVAILABLE", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )


class ResourceNotFoundError(EclipseError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type


class ConflictError(EclipseError):
    """Unique constraint (email, slug) would be violated."""
    def __init__(
        self, message: str, details: dict | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.debug_info = details
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(EclipseError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
