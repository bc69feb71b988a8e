"""Abstract base class for the Content Processing Backend.

The backend does the heavy lifting -- text extraction, crawling,
transcription, embedding, persistence.  The training-set manager only
calls it and interprets its responses.  Keeping the contract behind an
ABC lets the services run against the HTTP adapter in production and an
``AsyncMock(spec=IContentBackend)`` in tests.

Tenant identity travels with the session (the adapter's auth header);
``customer_id`` is still sent where the backend's payloads expect it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from src.models.document import Document, RetrainSchedule
from src.models.submission import ScrapeResult, UploadedFile


class IContentBackend(ABC):
    """Contract for the service that ingests and stores training content.

    Every method is a suspension point.  Implementations raise
    :class:`src.utils.errors.DispatchError` (or its
    :class:`~src.utils.errors.BackendTimeoutError` subclass) on failure;
    they never retry.
    """

    # -- Reads ---------------------------------------------------------------

    @abstractmethod
    async def list_documents(self, bot_id: int) -> list[Document]:
        """Return the bot's documents in backend order."""

    @abstractmethod
    async def get_retrain_schedule(self, bot_id: int) -> RetrainSchedule:
        """Return the bot's stored retrain schedule."""

    # -- Ingestion -----------------------------------------------------------

    @abstractmethod
    async def upload_files(
        self,
        customer_id: int,
        bot_id: int,
        files: Sequence[UploadedFile],
    ) -> None:
        """Upload one or more files as new documents."""

    @abstractmethod
    async def add_text(
        self,
        customer_id: int,
        bot_id: int,
        title: str,
        content: str,
    ) -> None:
        """Create a document from pasted text."""

    @abstractmethod
    async def scrape_website(
        self,
        customer_id: int,
        bot_id: int,
        url: str,
        full_site: bool,
    ) -> ScrapeResult:
        """Scrape one page, or crawl a whole site when *full_site* is set."""

    @abstractmethod
    async def extract_video(self, customer_id: int, bot_id: int, url: str) -> None:
        """Create a document from a video's transcript."""

    # -- Bulk operations -----------------------------------------------------

    @abstractmethod
    async def retrain_documents(
        self,
        customer_id: int,
        bot_id: int,
        document_ids: Sequence[int],
    ) -> int | None:
        """Re-process documents; return the backend's count if it reports one."""

    @abstractmethod
    async def delete_documents(
        self,
        customer_id: int,
        bot_id: int,
        document_ids: Sequence[int],
    ) -> int | None:
        """Delete documents irreversibly; return the backend's count if reported."""

    # -- Schedule ------------------------------------------------------------

    @abstractmethod
    async def save_retrain_schedule(
        self,
        bot_id: int,
        schedule: RetrainSchedule,
    ) -> RetrainSchedule | None:
        """Persist *schedule*; return the stored schedule if the backend echoes it."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for log lines, e.g. ``"http_backend"``."""
