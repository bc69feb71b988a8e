"""Ingestion dispatcher -- sends one content submission to the backend.

Flow for every submission:

    validate ──✗──→ error notification, ValidationError (no network call)
       │
       ✓
    hold "uploading" gate ──busy──→ OperationInProgressError
       │
    backend call ──✗──→ error notification (backend message or fallback),
       │                form stays open, DispatchError re-raised
       ✓
    success notification → close form → registry refresh

Nothing is retried.  Closing the form while a call is in flight does not
cancel the call; its notification still fires when it resolves.
"""

from __future__ import annotations

import structlog

from src.config.settings import Settings
from src.interfaces.content_backend import IContentBackend
from src.models.submission import (
    FileBatchSubmission,
    FileSubmission,
    QASubmission,
    SubmissionOutcome,
    TextSubmission,
    UploadMode,
    UploadSubmission,
    VideoSubmission,
    WebsiteSubmission,
)
from src.services.document_registry import DocumentRegistry
from src.services.notification_center import NotificationCenter
from src.services.validation_gate import check_submission
from src.utils.concurrency import SingleSlotGate
from src.utils.errors import DispatchError, ValidationError
from src.utils.logging import get_logger

# Fallback error text per submission kind when the backend gives none.
FALLBACK_MESSAGES: dict[str, str] = {
    "file": "Upload failed",
    "file_batch": "Upload failed",
    "text": "Upload failed",
    "qa": "Failed to add",
    "website": "Scrape failed",
    "video": "Extraction failed",
}


def format_scrape_message(full_site: bool, pages_scraped: int | None, title: str | None) -> str:
    """Success text for a website submission."""
    if full_site:
        return f"Website crawled — {pages_scraped or 'multiple'} pages scraped"
    return f'Page scraped — "{title or "page"}"'


class IngestionDispatcher:
    """Routes submissions to the right backend endpoint, one at a time.

    Parameters
    ----------
    backend:
        The content backend.
    registry:
        Refreshed after every successful submission.
    notifications:
        Receives exactly one notification per terminal outcome.
    settings:
        Supplies the upload size limit.
    """

    def __init__(
        self,
        backend: IContentBackend,
        registry: DocumentRegistry,
        notifications: NotificationCenter,
        settings: Settings | None = None,
    ) -> None:
        self._backend = backend
        self._registry = registry
        self._notifications = notifications
        self._settings = settings or Settings()
        self._gate: SingleSlotGate[str] = SingleSlotGate("upload")
        self._mode: UploadMode | None = None
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Form state
    # ------------------------------------------------------------------

    @property
    def uploading(self) -> bool:
        return self._gate.busy

    @property
    def mode(self) -> UploadMode | None:
        return self._mode

    def open_form(self, mode: UploadMode) -> None:
        self._mode = mode

    def close_form(self) -> None:
        self._mode = None

    def toggle_form(self, mode: UploadMode) -> UploadMode | None:
        """Open *mode*, or close it if it is already the open form."""
        self._mode = None if self._mode is mode else mode
        return self._mode

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self, submission: UploadSubmission) -> SubmissionOutcome:
        """Validate and dispatch *submission*.

        Raises
        ------
        ValidationError
            The submission failed a local check (already notified).
        OperationInProgressError
            Another submission is in flight.
        DispatchError
            The backend call failed (already notified).
        """
        reason = check_submission(submission, self._settings.max_upload_bytes)
        if reason is not None:
            self._logger.info("submission_rejected", kind=submission.kind, reason=reason)
            await self._notifications.error(reason)
            raise ValidationError(reason)

        async with self._gate.hold(submission.kind):
            self._logger.info(
                "submission_dispatched",
                kind=submission.kind,
                bot_id=submission.bot_id,
            )
            try:
                outcome = await self._dispatch(submission)
            except DispatchError as exc:
                message = exc.backend_message or FALLBACK_MESSAGES[submission.kind]
                self._logger.error(
                    "submission_failed",
                    kind=submission.kind,
                    bot_id=submission.bot_id,
                    error=str(exc),
                )
                await self._notifications.error(message)
                raise

        self._logger.info("submission_succeeded", kind=submission.kind, bot_id=submission.bot_id)
        await self._notifications.success(outcome.message)
        self.close_form()
        await self._registry.refresh()
        return outcome

    async def _dispatch(self, submission: UploadSubmission) -> SubmissionOutcome:
        customer_id, bot_id = submission.customer_id, submission.bot_id

        if isinstance(submission, FileSubmission):
            await self._backend.upload_files(customer_id, bot_id, [submission.file])
            return SubmissionOutcome(
                kind=submission.kind,
                message=f'"{submission.file.filename}" uploaded successfully',
            )

        if isinstance(submission, FileBatchSubmission):
            await self._backend.upload_files(customer_id, bot_id, list(submission.files))
            if len(submission.files) == 1:
                message = f'"{submission.files[0].filename}" uploaded successfully'
            else:
                message = f"{len(submission.files)} files uploaded"
            return SubmissionOutcome(kind=submission.kind, message=message)

        if isinstance(submission, TextSubmission):
            await self._backend.add_text(
                customer_id, bot_id, submission.effective_title, submission.content
            )
            return SubmissionOutcome(
                kind=submission.kind,
                message="Text content uploaded successfully",
            )

        if isinstance(submission, QASubmission):
            await self._backend.add_text(customer_id, bot_id, submission.title, submission.content)
            return SubmissionOutcome(kind=submission.kind, message="Q&A pair added!")

        if isinstance(submission, WebsiteSubmission):
            result = await self._backend.scrape_website(
                customer_id, bot_id, submission.url.strip(), submission.full_site
            )
            return SubmissionOutcome(
                kind=submission.kind,
                message=format_scrape_message(
                    submission.full_site, result.pages_scraped, result.title
                ),
                scrape=result,
            )

        if isinstance(submission, VideoSubmission):
            await self._backend.extract_video(customer_id, bot_id, submission.url.strip())
            return SubmissionOutcome(
                kind=submission.kind,
                message="YouTube transcript extracted successfully",
            )

        raise TypeError(f"Unknown submission type: {type(submission).__name__}")
