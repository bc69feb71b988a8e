"""Public interface definitions for the content backend.

The services never talk HTTP directly: they call an ``IContentBackend``,
and the concrete adapter is injected at startup (``src/main.py`` for the
API, ``src/cli/trainset.py`` for the CLI).  Unit tests inject an
``AsyncMock(spec=IContentBackend)`` instead.

PROVIDER MAP:
    Interface          →  Concrete implementation (in src/providers/)
    ─────────────────────────────────────────────────────────────────
    IContentBackend    →  HttpContentBackend (httpx)
"""

from src.interfaces.content_backend import IContentBackend

__all__ = ["IContentBackend"]
