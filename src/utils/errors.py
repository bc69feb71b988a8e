"""Custom exception hierarchy for the training-set manager.

All application exceptions inherit from :class:`TrainingSetError`, which
carries an optional ``provider_name`` so error handlers can identify which
collaborator (e.g. "http_backend") caused the failure.

The hierarchy mirrors the lifecycle of an operator action:

    TrainingSetError  (base -- catch-all for any training-set error)
    +-- ValidationError           (local, pre-dispatch rejection)
    +-- DispatchError             (backend call failed or returned an error)
    |   +-- BackendTimeoutError   (backend call exceeded the deadline)
    +-- LoadError                 (registry fetch failed)
    +-- OperationInProgressError  (single-slot gate already held)
    +-- ConfigurationError        (startup / missing config)

Validation errors never reach the network layer.  Dispatch errors are
terminal for the invocation that raised them -- nothing here is retried.
"""


class TrainingSetError(Exception):
    """Base exception for all training-set errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which collaborator triggered the error.
    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[http_backend] Upload failed``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Pre-dispatch
# ---------------------------------------------------------------------------

class ValidationError(TrainingSetError):
    """Raised when a submission or schedule edit is rejected before any I/O.

    The ``message`` is the operator-facing rejection reason.
    """

    def __init__(
        self,
        message: str = "Submission is invalid",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class OperationInProgressError(TrainingSetError):
    """Raised when a mutating operation is attempted while one is in flight."""

    def __init__(
        self,
        message: str = "Another operation is already in progress",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Backend errors
# ---------------------------------------------------------------------------

class DispatchError(TrainingSetError):
    """Raised when a backend call fails or returns an error payload.

    ``backend_message`` holds the message the backend supplied (if any).
    Services show it to the operator verbatim and fall back to a static
    per-operation message when it is ``None``.
    """

    def __init__(
        self,
        message: str = "Backend request failed",
        provider_name: str | None = None,
        status_code: int | None = None,
        backend_message: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._status_code = status_code
        self._backend_message = backend_message

    @property
    def status_code(self) -> int | None:
        return self._status_code

    @property
    def backend_message(self) -> str | None:
        return self._backend_message


class BackendTimeoutError(DispatchError):
    """Raised when a backend call exceeds the configured deadline.

    The operator sees the timeout text itself, so ``backend_message`` is
    populated with it.
    """

    def __init__(
        self,
        message: str = "Backend request timed out",
        provider_name: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        if timeout_seconds is not None:
            message = f"Request timed out after {timeout_seconds:g}s"
        super().__init__(
            message=message,
            provider_name=provider_name,
            backend_message=message,
        )
        self._timeout_seconds = timeout_seconds

    @property
    def timeout_seconds(self) -> float | None:
        return self._timeout_seconds


class LoadError(TrainingSetError):
    """Raised when the document list cannot be fetched for a bot."""

    def __init__(
        self,
        message: str = "Failed to load documents",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigurationError(TrainingSetError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
