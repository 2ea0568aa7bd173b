"""Error Hierarchy — every way a ledger request can fail, as one exception family.

Invariants:
    - Each error carries a code, a category and a severity; handlers never
      inspect message text
    - Rule violations (bad input, overdraw, missing confirm) are 4xx and leave
      the ledger untouched; StorageError is 503 and critical
    - to_response() never includes debug_info

Design Decisions:
    - LessonbookError base caught by one FastAPI handler: uniform error envelope
    - ErrorContext names the student and slot involved, so logs can be filtered by them
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHENTICATION = "authentication"
    CONFIRMATION = "confirmation"
    STORAGE = "storage"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Which student / slot an error concerns; debug_info stays server-side."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    student_id: str | None = None
    slot: str | None = None
    debug_info: dict[str, Any] | None = None

    def public_fields(self) -> dict[str, str]:
        return {
            key: value
            for key, value in (("student_id", self.student_id), ("slot", self.slot))
            if value is not None
        }


class LessonbookError(Exception):
    """Base for all ledger, gate and storage errors."""

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
        body = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
        }
        context = self.context.public_fields()
        if context:
            body["context"] = context
        return {"error": body}


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidInputError(LessonbookError):
    """Operation input violates a core rule (empty name, rating out of range...)."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class InsufficientBalanceError(LessonbookError):
    """Consume requested more lessons than the student has left."""
    def __init__(
        self, requested: int, available: int, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Insufficient lesson balance: requested {requested}, "
            f"remaining {available}.",
            "INSUFFICIENT_BALANCE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )
        self.requested = requested
        self.available = available


class ConfirmationRequiredError(LessonbookError):
    """Destructive action submitted without explicit confirmation."""
    def __init__(self, action: str, context: ErrorContext | None = None):
        super().__init__(
            f"{action} is destructive and requires confirm=true.",
            "CONFIRMATION_REQUIRED", ErrorCategory.CONFIRMATION,
            ErrorSeverity.WARNING, context, 409,
        )
        self.action = action


class ResourceNotFoundError(LessonbookError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Access Gate Errors ─────────────────────────────────────────

class AuthenticationError(LessonbookError):
    """Passcode mismatch or missing/unknown session token."""
    def __init__(self, message: str = "Incorrect passcode", context: ErrorContext | None = None):
        super().__init__(
            message, "AUTH_FAILED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class PasscodeTooShortError(LessonbookError):
    """First-run passcode shorter than the minimum length."""
    def __init__(self, min_length: int, context: ErrorContext | None = None):
        super().__init__(
            f"Passcode must be at least {min_length} characters.",
            "PASSCODE_TOO_SHORT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.min_length = min_length


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StorageError(LessonbookError):
    """Durable store read or write failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
