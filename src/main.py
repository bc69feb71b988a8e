"""Training-set console FastAPI application entry point.

Wires the HTTP content backend, per-customer workspaces, middleware and
routes together.  Loads configuration from ``.env``, ``config/config.yaml``
and the environment, and configures structured logging.

Run with ``python -m src.main`` or ``uvicorn src.main:app``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import load_settings
from src.config.settings import Settings
from src.interfaces.content_backend import IContentBackend
from src.providers.backend.http_backend import HttpContentBackend
from src.services.workspace import TrainingSetWorkspace
from src.utils.logging import configure_logging, get_logger

_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = load_settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Log startup; close the backend's HTTP client on shutdown if we own it."""
    backend: IContentBackend = application.state.backend
    _logger.info(
        "app_startup",
        version=_VERSION,
        environment=application.state.settings.app_env,
        backend=backend.get_provider_name(),
        backend_url=application.state.settings.backend_base_url,
    )

    yield

    if isinstance(backend, HttpContentBackend):
        await backend.aclose()
    _logger.info("app_shutdown", workspaces=len(application.state.workspaces))


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    app_settings: Settings | None = None,
    backend: IContentBackend | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    app_settings:
        Settings to use; defaults to the module-level settings.
    backend:
        Content backend shared by every workspace; defaults to an
        :class:`HttpContentBackend` built from the settings.
    """
    app_settings = app_settings or settings
    application = FastAPI(
        title="Training-Set Manager",
        version=_VERSION,
        description=(
            "Manage a bot's training documents: upload files, text, Q&A, "
            "websites and videos, retrain or delete documents, and schedule "
            "recurring re-scrapes of URL-backed content."
        ),
        lifespan=_lifespan,
    )

    application.state.settings = app_settings
    application.state.backend = backend if backend is not None else HttpContentBackend(app_settings)
    workspaces: dict[int, TrainingSetWorkspace] = {}
    application.state.workspaces = workspaces

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
