"""Error Hierarchy — status codes, envelopes and Retry-After.

Tests cover:
    - Each error class maps to its HTTP status and default code
    - Envelope is {"ok": false, "error": code}; only the AI pathway adds "message"
    - RateLimitedError exposes Retry-After when known
"""

from rainbowkidz.core.errors import (
    BoardFetchError,
    ConfigurationError,
    ConflictError,
    DataStoreError,
    ForbiddenError,
    GenerationServiceError,
    InputValidationError,
    RateLimitedError,
    ResourceNotFoundError,
    StorageUploadError,
    UnauthorizedError,
)


def test_status_codes():
    assert InputValidationError("title_too_short").http_status == 400
    assert UnauthorizedError().http_status == 401
    assert ForbiddenError("user_blocked").http_status == 403
    assert ResourceNotFoundError().http_status == 404
    assert ConflictError("nickname_taken").http_status == 409
    assert RateLimitedError().http_status == 429
    assert ConfigurationError("data_store_env_missing").http_status == 500
    assert DataStoreError("HTTP 500", "select").http_status == 502
    assert BoardFetchError("HTTP 500").http_status == 502
    assert StorageUploadError("denied").http_status == 502


def test_default_codes():
    assert UnauthorizedError().code == "unauthorized"
    assert ResourceNotFoundError().code == "not_found"
    assert DataStoreError("x", "select").code == "upstream_error"
    assert StorageUploadError("x").code == "storage_upload_failed"


def test_client_error_envelope_has_no_message():
    assert InputValidationError("body_too_short").to_response() == {
        "ok": False, "error": "body_too_short",
    }


def test_upstream_detail_not_exposed():
    body = DataStoreError("relation posts does not exist", "select", 400).to_response()
    assert body == {"ok": False, "error": "upstream_error"}


def test_generation_error_exposes_message():
    body = GenerationServiceError("overloaded").to_response()
    assert body == {"ok": False, "error": "generation_error", "message": "overloaded"}


def test_retry_after_header():
    assert RateLimitedError("rate_limit_post", retry_after_seconds=12).response_headers() == {
        "Retry-After": "12",
    }
    assert RateLimitedError("nickname_cooldown_7days").response_headers() is None
