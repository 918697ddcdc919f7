"""Error Handlers — global exception handlers rendering the board's error envelope.

Invariants:
    - Every failure is {"ok": false, "error": code} (+ "message" on the AI pathway,
      + "details" on schema errors)
    - RainbowKidzError → its own status and code; rate limits carry Retry-After
    - RequestValidationError (malformed JSON, wrong types) → 400 invalid_request
    - Unmatched route or method → 404 not_found
    - Exception (catch-all) → 500 internal_error, never leaks internal details.
      It renders outside the app middleware, so it sets Vary: Origin itself

Design Decisions:
    - Four-layer handler: domain (RainbowKidzError), validation (Pydantic),
      routing (Starlette HTTPException), catch-all (Exception)
    - Log level follows error severity: client mistakes are not operator errors
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rainbowkidz.core.errors import ErrorSeverity, RainbowKidzError

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_routing_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RainbowKidzError)
    async def domain_error_handler(request: Request, exc: RainbowKidzError):
        """Handle all gateway domain/infrastructure errors."""
        logger.log(
            _LOG_LEVELS.get(exc.severity, logging.ERROR),
            f"{type(exc).__name__}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "method": request.method,
                "status_code": exc.http_status,
            },
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(),
            headers=exc.response_headers(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Malformed or mistyped request data."""
        logger.info(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"error_code": "invalid_request", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_routing_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Unknown route/method → not_found; anything else keeps its status."""
        if exc.status_code in (
            status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED,
        ):
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={"ok": False, "error": "not_found"},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "error": _snake_case(str(exc.detail))},
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"error_code": "internal_error", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "error": "internal_error"},
            headers={"Vary": "Origin"},
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "ok": False,
        "error": "invalid_request",
        "details": [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ],
    }


def _snake_case(detail: str) -> str:
    return "_".join(detail.lower().split()) or "http_error"
