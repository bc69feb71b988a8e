"""Shared pytest fixtures for the training-set manager test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from src.config.settings import Settings
from src.interfaces.content_backend import IContentBackend
from src.models.document import Document, RetrainSchedule
from src.models.submission import ScrapeResult, UploadedFile
from src.services.document_registry import DocumentRegistry
from src.services.notification_center import NotificationCenter
from src.services.workspace import TrainingSetWorkspace

CUSTOMER_ID = 42
BOT_ID = 7


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Settings and clock
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    """Settings with test defaults, ignoring any local .env file."""
    return Settings(
        _env_file=None,
        backend_base_url="https://backend.test/api",
        backend_api_token="test-token",
        customer_id=CUSTOMER_ID,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Documents and backend
# ---------------------------------------------------------------------------


def make_documents() -> list[Document]:
    return [
        Document(
            id=1,
            title="Staff handbook",
            content_type="pdf",
            char_count=12345,
            created_at=datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc),
        ),
        Document(id=2, title="Price list", content_type="csv", char_count=800),
        Document(
            id=3,
            title="Example",
            content_type="website",
            source_url="https://example.com",
            char_count=4200,
        ),
        Document(id=4, title="Q&A: Hours?", content_type="qa"),
    ]


@pytest.fixture
def sample_documents() -> list[Document]:
    return make_documents()


@pytest.fixture
def backend(sample_documents: list[Document]) -> AsyncMock:
    """An ``IContentBackend`` whose calls all succeed with neutral results."""
    mock = AsyncMock(spec=IContentBackend)
    mock.list_documents.return_value = sample_documents
    mock.get_retrain_schedule.return_value = RetrainSchedule.disabled()
    mock.upload_files.return_value = None
    mock.add_text.return_value = None
    mock.scrape_website.return_value = ScrapeResult()
    mock.extract_video.return_value = None
    mock.retrain_documents.return_value = None
    mock.delete_documents.return_value = None
    mock.save_retrain_schedule.return_value = None
    mock.get_provider_name.return_value = "fake_backend"
    return mock


@pytest.fixture
def notifications(settings: Settings, clock: FakeClock) -> NotificationCenter:
    return NotificationCenter(settings=settings, clock=clock)


@pytest.fixture
def registry(backend: AsyncMock, notifications: NotificationCenter) -> DocumentRegistry:
    return DocumentRegistry(backend, notifications)


@pytest.fixture
def workspace(backend: AsyncMock, settings: Settings, clock: FakeClock) -> TrainingSetWorkspace:
    return TrainingSetWorkspace(CUSTOMER_ID, backend, settings, clock=clock)


# ---------------------------------------------------------------------------
# Upload payloads
# ---------------------------------------------------------------------------


def make_file(
    filename: str = "handbook.pdf",
    size: int = 1024,
    media_type: str | None = "application/pdf",
) -> UploadedFile:
    return UploadedFile(filename=filename, content=b"x" * size, media_type=media_type)


@pytest.fixture
def file_factory():
    """Return :func:`make_file` so tests can build uploads of any size / type."""
    return make_file
