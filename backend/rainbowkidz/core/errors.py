"""Error Hierarchy — typed, categorized exceptions for every gateway failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - The code is the exact string returned to the client in {"ok": false, "error": code}
    - Client errors (400-level) never carry upstream detail; only the AI pathway
      exposes its underlying message (expose_message=True)
    - No automatic retry is implied by any error class

Design Decisions:
    - Single hierarchy with RainbowKidzError base: one FastAPI handler renders all
      (ADR: uniform error envelope)
    - Codes are stable snake_case strings: the board frontend switches on them
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity — drives the log level in the global handler."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and observability."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RATE_LIMIT = "rate_limit"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    CONFIGURATION = "configuration"
    DATA_STORE = "data_store"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Observability context attached to an error (never rendered verbatim)."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    guest_id: str | None = None
    retry_after_seconds: int | None = None
    debug_info: dict[str, Any] | None = None


class RainbowKidzError(Exception):
    """Base exception for all gateway errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        expose_message: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.expose_message = expose_message

    def to_response(self) -> dict:
        """Convert to the board's error envelope."""
        body: dict[str, Any] = {"ok": False, "error": self.code}
        if self.expose_message:
            body["message"] = self.message
        return body

    def response_headers(self) -> dict[str, str] | None:
        if self.context.retry_after_seconds is not None:
            return {"Retry-After": str(self.context.retry_after_seconds)}
        return None


# ─── Client Errors (400-level) ──────────────────────────────────

class InputValidationError(RainbowKidzError):
    """A user-supplied field violated a specific rule."""
    def __init__(self, code: str, message: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            message or f"Validation failed: {code}", code, ErrorCategory.VALIDATION,
            ErrorSeverity.INFO, context, 400,
        )


class UnauthorizedError(RainbowKidzError):
    """Identity missing: no guest session or no valid admin key."""
    def __init__(self, code: str = "unauthorized", context: ErrorContext | None = None):
        super().__init__(
            f"Unauthorized: {code}", code, ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(RainbowKidzError):
    """Identity present but not allowed to perform the mutation."""
    def __init__(self, code: str, context: ErrorContext | None = None):
        super().__init__(
            f"Forbidden: {code}", code, ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(RainbowKidzError):
    """Requested row does not exist (or is tombstoned)."""
    def __init__(self, code: str = "not_found", context: ErrorContext | None = None):
        super().__init__(
            f"Not found: {code}", code, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, context, 404,
        )


class ConflictError(RainbowKidzError):
    """Remote uniqueness check rejected the write."""
    def __init__(self, code: str, context: ErrorContext | None = None):
        super().__init__(
            f"Conflict: {code}", code, ErrorCategory.CONFLICT,
            ErrorSeverity.INFO, context, 409,
        )


class RateLimitedError(RainbowKidzError):
    """Caller exceeded a fixed-window limit or a remote cooldown."""
    def __init__(
        self,
        code: str = "rate_limit",
        retry_after_seconds: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_seconds = retry_after_seconds
        super().__init__(
            f"Rate limited: {code}", code, ErrorCategory.RATE_LIMIT,
            ErrorSeverity.INFO, ctx, 429,
        )


# ─── Server / Upstream Errors (500-level) ───────────────────────

class ConfigurationError(RainbowKidzError):
    """A required secret or endpoint is not configured."""
    def __init__(self, code: str, message: str | None = None):
        super().__init__(
            message or f"Missing configuration: {code}", code,
            ErrorCategory.CONFIGURATION, ErrorSeverity.CRITICAL, None, 500,
        )


class DataStoreError(RainbowKidzError):
    """Data store unreachable or returned a non-success status."""
    def __init__(
        self,
        message: str,
        operation: str,
        status_code: int | None = None,
        code: str = "upstream_error",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Data store {operation} failed: {message}", code,
            ErrorCategory.DATA_STORE, ErrorSeverity.ERROR, context, 502,
        )
        self.operation = operation
        self.status_code = status_code


class BoardFetchError(DataStoreError):
    """Board reference table could not be refreshed."""
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(
            message, "board refresh", status_code, code="board_fetch_failed",
        )


class StorageUploadError(DataStoreError):
    """Object storage rejected an upload."""
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(
            message, "storage upload", status_code, code="storage_upload_failed",
        )


class GenerationServiceError(RainbowKidzError):
    """Generative-text service failed; message is surfaced for operators."""
    def __init__(self, message: str, code: str = "generation_error", http_status: int = 502):
        super().__init__(
            message, code, ErrorCategory.EXTERNAL_API, ErrorSeverity.ERROR,
            None, http_status, expose_message=True,
        )


class GenerationParseError(RainbowKidzError):
    """Generated text did not contain a JSON object."""
    def __init__(self, raw_text: str):
        super().__init__(
            "Generated text is not valid JSON", "generation_parse_error",
            ErrorCategory.EXTERNAL_API, ErrorSeverity.ERROR,
            ErrorContext(debug_info={"raw_text": raw_text[:500]}), 500,
            expose_message=True,
        )
