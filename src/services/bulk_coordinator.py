"""Bulk operation coordinator -- retrain or delete a set of documents as one unit.

One bulk operation at a time: the coordinator holds a single-slot gate
tagged with the running :class:`BulkAction`, and a second request while it
is held is rejected rather than queued.

Delete is irreversible.  The coordinator never prompts; callers must get
the operator's confirmation first (see :func:`bulk_delete_prompt` and
:func:`single_delete_prompt` for the wording).

On completion the gate is released first, then:

    success → notification with the count → selection cleared → refresh
    failure → notification with the backend message or fallback
              → refresh (selection kept so the operator can retry)
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from src.interfaces.content_backend import IContentBackend
from src.models.document import Document
from src.models.notification import BulkAction
from src.services.document_registry import DocumentRegistry
from src.services.notification_center import NotificationCenter
from src.utils.concurrency import SingleSlotGate
from src.utils.errors import DispatchError
from src.utils.logging import get_logger

FALLBACK_MESSAGES: dict[BulkAction, str] = {
    BulkAction.RETRAIN: "Retrain failed",
    BulkAction.DELETE: "Delete failed",
}
_PAST_TENSE: dict[BulkAction, str] = {
    BulkAction.RETRAIN: "retrained",
    BulkAction.DELETE: "deleted",
}


def bulk_delete_prompt(count: int) -> str:
    return f"Delete {count} document(s)? This cannot be undone."


def single_delete_prompt(document: Document) -> str:
    return f'Delete "{document.title}"?'


class BulkOperationCoordinator:
    """Applies retrain / delete to the registry's selection (or explicit ids).

    Parameters
    ----------
    backend:
        The content backend.
    registry:
        Supplies the active bot, the selection, and is refreshed afterwards.
    notifications:
        Receives one notification per completed operation.
    customer_id:
        Tenant the operations are issued for.
    """

    def __init__(
        self,
        backend: IContentBackend,
        registry: DocumentRegistry,
        notifications: NotificationCenter,
        customer_id: int,
    ) -> None:
        self._backend = backend
        self._registry = registry
        self._notifications = notifications
        self._customer_id = customer_id
        self._gate: SingleSlotGate[BulkAction] = SingleSlotGate("bulk")
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def current_action(self) -> BulkAction | None:
        """The bulk action in flight, or ``None``."""
        return self._gate.tag

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def apply(self, action: BulkAction, ids: Iterable[int] | None = None) -> int:
        """Apply *action* to *ids* (default: the current selection).

        Returns the affected count (the backend's, or the number of ids
        sent when it reports none).  An empty id set is a silent no-op
        returning 0.

        Raises
        ------
        KeyError
            If an id is not in the loaded registry.
        OperationInProgressError
            If another bulk operation is in flight.
        DispatchError
            If the backend call failed (already notified).
        """
        target = self._registry.selected_ids if ids is None else frozenset(ids)
        if not target or self._registry.bot_id is None:
            return 0
        unknown = target - self._registry.ids
        if unknown:
            raise KeyError(f"Documents not loaded: {sorted(unknown)}")

        count = await self._run(action, sorted(target))

        await self._notifications.success(f"{count} document(s) {_PAST_TENSE[action]}")
        self._registry.clear()
        await self._registry.refresh()
        return count

    async def delete_document(self, document_id: int) -> int:
        """Delete one document (confirmation already obtained by the caller).

        Uses the same in-flight slot as :meth:`apply` but leaves the rest of
        the selection alone; the refresh prunes the deleted id from it.
        """
        if self._registry.get(document_id) is None or self._registry.bot_id is None:
            raise KeyError(f"Document {document_id} is not loaded")

        count = await self._run(BulkAction.DELETE, [document_id])

        await self._notifications.success("Document deleted")
        await self._registry.refresh()
        return count

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _run(self, action: BulkAction, document_ids: list[int]) -> int:
        """Call the backend under the gate; on failure notify, refresh, re-raise."""
        bot_id = self._registry.bot_id
        failure: DispatchError | None = None
        reported: int | None = None

        async with self._gate.hold(action):
            self._logger.info(
                "bulk_operation_started",
                operation=action.value,
                bot_id=bot_id,
                document_count=len(document_ids),
            )
            try:
                if action is BulkAction.RETRAIN:
                    reported = await self._backend.retrain_documents(
                        self._customer_id, bot_id, document_ids
                    )
                else:
                    reported = await self._backend.delete_documents(
                        self._customer_id, bot_id, document_ids
                    )
            except DispatchError as exc:
                failure = exc

        if failure is not None:
            self._logger.error(
                "bulk_operation_failed",
                operation=action.value,
                bot_id=bot_id,
                error=str(failure),
            )
            await self._notifications.error(failure.backend_message or FALLBACK_MESSAGES[action])
            await self._registry.refresh()
            raise failure

        count = reported if reported is not None else len(document_ids)
        self._logger.info(
            "bulk_operation_succeeded",
            operation=action.value,
            bot_id=bot_id,
            document_count=count,
        )
        return count
