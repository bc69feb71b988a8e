"""Utility modules for the training-set manager.

Available utility modules (re-exported here for convenience):

- **errors** -- Exception hierarchy rooted at TrainingSetError; validation,
  in-flight, backend and load failures each have their own subclass so the
  CLI and the API can map them without broad ``except Exception`` blocks.
- **concurrency** -- The single-slot in-flight gate and the backend call
  deadline.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

# -- Exception hierarchy ---------------------------------------------------
from src.utils.errors import (
    BackendTimeoutError,
    ConfigurationError,
    DispatchError,
    LoadError,
    OperationInProgressError,
    TrainingSetError,
    ValidationError,
)

# -- Async concurrency helpers ---------------------------------------------
from src.utils.concurrency import SingleSlotGate, with_deadline

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "BackendTimeoutError",
    "ConfigurationError",
    "DispatchError",
    "LoadError",
    "OperationInProgressError",
    "SingleSlotGate",
    "TrainingSetError",
    "ValidationError",
    "configure_logging",
    "get_logger",
    "with_deadline",
]
