"""Training-set console API layer -- routes, schemas, and middleware."""

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    status_code_for,
)
from src.api.routes import router
from src.api.schemas import (
    BulkRequest,
    BulkResponse,
    DocumentListResponse,
    DocumentResponse,
    ErrorResponse,
    HealthResponse,
    ScheduleResponse,
    ScheduleUpdateRequest,
    SubmissionResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "status_code_for",
    "router",
    "BulkRequest",
    "BulkResponse",
    "DocumentListResponse",
    "DocumentResponse",
    "ErrorResponse",
    "HealthResponse",
    "ScheduleResponse",
    "ScheduleUpdateRequest",
    "SubmissionResponse",
]
