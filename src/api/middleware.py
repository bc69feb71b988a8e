"""API middleware for the training-set console.

Three pieces, all wired in :func:`src.main.create_app`:

- :func:`configure_cors` lets the dashboard origin call the console.
- :class:`RequestLoggingMiddleware` writes one ``http_request`` line per
  request and binds ``customer_id`` / ``path`` as structlog context vars,
  so service log lines emitted while handling it carry the tenant.
- :class:`ErrorHandlingMiddleware` turns ``TrainingSetError`` subclasses
  into JSON ``ErrorResponse`` bodies using :func:`status_code_for`.

# ─── MIDDLEWARE EXECUTION ORDER ───────────────────────────────────────
#
# Starlette middleware is a stack (last added, first executed):
#
#   In main.py:
#     app.add_middleware(ErrorHandlingMiddleware)   # added 1st → inner
#     app.add_middleware(RequestLoggingMiddleware)  # added 2nd → outer
#
#   Request flow:
#     Client → RequestLogging → ErrorHandling → route handler
#
# So RequestLoggingMiddleware sees the final status code, including the
# ones ErrorHandlingMiddleware produced.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.schemas import ErrorResponse
from src.utils.errors import (
    BackendTimeoutError,
    DispatchError,
    LoadError,
    OperationInProgressError,
    TrainingSetError,
    ValidationError,
)
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# Most specific first: BackendTimeoutError is also a DispatchError.
_STATUS_CODES: tuple[tuple[type[TrainingSetError], int], ...] = (
    (ValidationError, 422),
    (OperationInProgressError, 409),
    (BackendTimeoutError, 504),
    (DispatchError, 502),
    (LoadError, 502),
)


def status_code_for(exc: TrainingSetError) -> int:
    """HTTP status for an application error; 500 when unmapped."""
    for error_type, status_code in _STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Allow *allowed_origins* (every origin when omitted) to call the console.

    Browsers must be able to send ``X-Customer-Id`` and multipart uploads,
    so headers are not restricted.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One ``http_request`` line per request, with the tenant bound as context."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        status_code = 500

        with structlog.contextvars.bound_contextvars(
            customer_id=request.headers.get("x-customer-id"),
            path=request.url.path,
        ):
            try:
                response = await call_next(request)
                status_code = response.status_code
                return response
            finally:
                _logger.info(
                    "http_request",
                    method=request.method,
                    status=status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``TrainingSetError`` subclasses and return structured JSON errors.

    The status code follows :func:`status_code_for`; the body carries the
    exception class name and its operator-facing message.  Stack traces
    stay in the server log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except TrainingSetError as exc:
            status_code = status_code_for(exc)
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                status=status_code,
                path=str(request.url.path),
            )
            detail = exc.message
            if isinstance(exc, DispatchError) and exc.backend_message:
                detail = exc.backend_message
            body = ErrorResponse(error=type(exc).__name__, detail=detail)
            return JSONResponse(status_code=status_code, content=body.model_dump())
