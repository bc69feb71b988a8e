"""Pydantic request/response schemas for the training-set console API.

Defines the public contract for the REST endpoints: document listing and
selection, content submission, bulk retrain/delete, the retrain
schedule, notifications, and health.

Convention: request schemas end with "Request", response schemas end
with "Response".
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from src.models.document import RetrainFrequency


class DocumentResponse(BaseModel):
    """One document row, with display strings alongside the raw values."""

    id: int
    title: str
    content_type: str
    label: str
    source_url: str | None = None
    source_display: str | None = None
    char_count: int | None = None
    char_count_display: str
    created_at: str | None = None
    created_display: str
    last_retrained_at: str | None = None
    selected: bool = False


class DocumentListResponse(BaseModel):
    """The active bot's documents and selection state."""

    bot_id: int
    documents: list[DocumentResponse] = Field(default_factory=list)
    selected_ids: list[int] = Field(default_factory=list)
    all_selected: bool = False
    uploading: bool = False
    bulk_action: str | None = None


class SelectionRequest(BaseModel):
    """Replace the selection with exactly these ids."""

    ids: list[int] = Field(default_factory=list)


class SelectionResponse(BaseModel):
    selected_ids: list[int] = Field(default_factory=list)
    all_selected: bool = False


class TextContentRequest(BaseModel):
    title: str = ""
    content: str


class QAContentRequest(BaseModel):
    question: str
    answer: str


class WebsiteContentRequest(BaseModel):
    url: str
    full_site: bool = Field(default=False, description="Crawl the whole site, not one page")


class VideoContentRequest(BaseModel):
    url: str


class SubmissionResponse(BaseModel):
    """Outcome of a successful content submission."""

    kind: str
    message: str
    pages_scraped: int | None = None
    title: str | None = None


class BulkRequest(BaseModel):
    """Target ids for a bulk operation; omitted means the current selection.

    Delete additionally requires ``confirm=true``.
    """

    ids: list[int] | None = None
    confirm: bool = False


class BulkResponse(BaseModel):
    action: str
    count: int
    message: str


class ScheduleUpdateRequest(BaseModel):
    frequency: RetrainFrequency
    time: str | None = Field(default=None, description="HH:MM 24-hour UTC")


class ScheduleResponse(BaseModel):
    """The schedule as edited (``frequency``/``time``) and as stored (``committed_*``)."""

    frequency: str
    time: str | None = None
    committed_frequency: str
    committed_time: str | None = None
    banner: str | None = None
    dirty: bool = False


class NotificationResponse(BaseModel):
    id: int
    level: str
    message: str


class ActiveNotificationResponse(BaseModel):
    notification: NotificationResponse | None = None


class DismissResponse(BaseModel):
    dismissed: bool


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    backend: str
    workspaces: int = 0


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
