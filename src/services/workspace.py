"""Training-set workspace -- one operator's view of one customer's bots.

Wires the services together around a shared notification center and
document registry:

    TrainingSetWorkspace
    ├── notifications  NotificationCenter
    ├── registry       DocumentRegistry        (documents + selection)
    ├── dispatcher     IngestionDispatcher     (uploads, "uploading" gate)
    ├── bulk           BulkOperationCoordinator (retrain / delete, bulk gate)
    └── schedule       RetrainScheduleManager  (lazy per bot)

The upload gate and the bulk gate are independent: an upload may run
while a bulk operation is in flight.  Switching bots reloads the
registry and forgets the previous bot's schedule; it is refused while
an upload or bulk operation is in flight, since that operation refreshes
and clears the registry when it completes.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence

import structlog

from src.config.settings import Settings
from src.interfaces.content_backend import IContentBackend
from src.models.document import RetrainSchedule
from src.models.notification import BulkAction
from src.models.submission import (
    FileBatchSubmission,
    FileSubmission,
    QASubmission,
    SubmissionOutcome,
    TextSubmission,
    UploadedFile,
    VideoSubmission,
    WebsiteSubmission,
)
from src.services.bulk_coordinator import BulkOperationCoordinator
from src.services.document_registry import DocumentRegistry
from src.services.ingestion_dispatcher import IngestionDispatcher
from src.services.notification_center import NotificationCenter
from src.services.retrain_schedule import RetrainScheduleManager
from src.utils.errors import OperationInProgressError, ValidationError
from src.utils.logging import get_logger

MSG_NO_BOT = "Select a bot first"
MSG_SWITCH_BUSY = "Wait for the current operation to finish before switching bots"


class TrainingSetWorkspace:
    """Facade over the training-set services for a single customer.

    Parameters
    ----------
    customer_id:
        Tenant every submission and bulk operation is issued for.
    backend:
        The content backend shared by all services.
    settings:
        Application settings (limits, durations, default retrain time).
    clock:
        Monotonic clock handed to the notification center.
    """

    def __init__(
        self,
        customer_id: int,
        backend: IContentBackend,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        settings = settings or Settings()
        self.customer_id = customer_id
        self.notifications = NotificationCenter(settings=settings, clock=clock)
        self.registry = DocumentRegistry(backend, self.notifications)
        self.dispatcher = IngestionDispatcher(backend, self.registry, self.notifications, settings)
        self.bulk = BulkOperationCoordinator(backend, self.registry, self.notifications, customer_id)
        self.schedule = RetrainScheduleManager(backend, self.notifications, settings)
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def bot_id(self) -> int | None:
        return self.registry.bot_id

    def _require_bot(self) -> int:
        if self.registry.bot_id is None:
            raise ValidationError(MSG_NO_BOT)
        return self.registry.bot_id

    # ------------------------------------------------------------------
    # Bot selection
    # ------------------------------------------------------------------

    async def switch_bot(self, bot_id: int) -> None:
        """Make *bot_id* active and load its documents.

        Raises :class:`OperationInProgressError` if an upload or bulk
        operation is still running for the current bot, and
        :class:`LoadError` (already notified) if the list cannot be fetched;
        the bot stays active so a later refresh can recover.
        """
        if bot_id != self.registry.bot_id and (
            self.dispatcher.uploading or self.bulk.current_action is not None
        ):
            raise OperationInProgressError(MSG_SWITCH_BUSY)
        if bot_id != self.schedule.bot_id:
            self.schedule.reset(bot_id)
        if bot_id != self.registry.bot_id:
            self.dispatcher.close_form()
        self._logger.info("bot_selected", customer_id=self.customer_id, bot_id=bot_id)
        await self.registry.load(bot_id)

    async def open_schedule(self) -> RetrainSchedule:
        """Fetch the active bot's schedule on first use and return the draft."""
        self._require_bot()
        return await self.schedule.ensure_loaded()

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    async def upload_files(self, files: Sequence[UploadedFile]) -> SubmissionOutcome:
        bot_id = self._require_bot()
        if len(files) == 1:
            submission = FileSubmission(customer_id=self.customer_id, bot_id=bot_id, file=files[0])
        else:
            submission = FileBatchSubmission(
                customer_id=self.customer_id, bot_id=bot_id, files=tuple(files)
            )
        return await self.dispatcher.submit(submission)

    async def add_text(self, content: str, title: str = "") -> SubmissionOutcome:
        bot_id = self._require_bot()
        return await self.dispatcher.submit(
            TextSubmission(customer_id=self.customer_id, bot_id=bot_id, title=title, content=content)
        )

    async def add_qa(self, question: str, answer: str) -> SubmissionOutcome:
        bot_id = self._require_bot()
        return await self.dispatcher.submit(
            QASubmission(
                customer_id=self.customer_id, bot_id=bot_id, question=question, answer=answer
            )
        )

    async def scrape_website(self, url: str, full_site: bool = False) -> SubmissionOutcome:
        bot_id = self._require_bot()
        return await self.dispatcher.submit(
            WebsiteSubmission(
                customer_id=self.customer_id, bot_id=bot_id, url=url, full_site=full_site
            )
        )

    async def extract_video(self, url: str) -> SubmissionOutcome:
        bot_id = self._require_bot()
        return await self.dispatcher.submit(
            VideoSubmission(customer_id=self.customer_id, bot_id=bot_id, url=url)
        )

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    async def retrain(self, document_ids: Iterable[int] | None = None) -> int:
        self._require_bot()
        return await self.bulk.apply(BulkAction.RETRAIN, document_ids)

    async def delete(self, document_ids: Iterable[int] | None = None) -> int:
        """Delete *document_ids* (default: the selection); the caller confirms first."""
        self._require_bot()
        return await self.bulk.apply(BulkAction.DELETE, document_ids)

    async def delete_document(self, document_id: int) -> int:
        self._require_bot()
        return await self.bulk.delete_document(document_id)
