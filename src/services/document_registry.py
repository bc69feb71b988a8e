"""Document registry -- the cached document list for the active bot plus
the operator's selection over it.

# ─── INVARIANTS ────────────────────────────────────────────────────────
#
#   - A load replaces the whole list; nothing is merged or patched, so a
#     mix of stale and fresh documents is never shown.
#   - The selection is always a subset of the loaded ids.  Switching bots
#     clears it; reloading the same bot prunes ids that disappeared.
#   - A load that is overtaken by a newer one (e.g. the operator switched
#     bots while it was in flight) is discarded when it resolves.
#   - Refresh is only ever called after the mutating call has resolved.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from src.interfaces.content_backend import IContentBackend
from src.models.document import Document
from src.services.notification_center import NotificationCenter
from src.utils.errors import DispatchError, LoadError
from src.utils.logging import get_logger

MSG_LOAD_FAILED = "Failed to load documents"


class DocumentRegistry:
    """Holds the active bot's documents and the current selection.

    Parameters
    ----------
    backend:
        Source of the document list.
    notifications:
        Where load failures are reported.
    """

    def __init__(self, backend: IContentBackend, notifications: NotificationCenter) -> None:
        self._backend = backend
        self._notifications = notifications
        self._bot_id: int | None = None
        self._documents: tuple[Document, ...] = ()
        self._selected: set[int] = set()
        self._generation = 0
        self._loading = False
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def bot_id(self) -> int | None:
        return self._bot_id

    @property
    def documents(self) -> tuple[Document, ...]:
        return self._documents

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def ids(self) -> frozenset[int]:
        return frozenset(doc.id for doc in self._documents)

    def get(self, document_id: int) -> Document | None:
        return next((doc for doc in self._documents if doc.id == document_id), None)

    def __len__(self) -> int:
        return len(self._documents)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, bot_id: int) -> tuple[Document, ...]:
        """Fetch *bot_id*'s documents and replace the cached list.

        Switching to a different bot clears the selection before the fetch
        starts.  On failure the list is emptied, an error notification is
        pushed, and :class:`LoadError` is raised.
        """
        if bot_id != self._bot_id:
            self._selected.clear()
            self._documents = ()
            self._bot_id = bot_id

        self._generation += 1
        generation = self._generation
        self._loading = True
        try:
            documents = await self._backend.list_documents(bot_id)
        except DispatchError as exc:
            if generation != self._generation:
                self._logger.debug("stale_load_discarded", bot_id=bot_id)
                return self._documents
            self._documents = ()
            self._selected.clear()
            self._logger.error("documents_load_failed", bot_id=bot_id, error=str(exc))
            await self._notifications.error(MSG_LOAD_FAILED)
            raise LoadError(provider_name=exc.provider_name) from exc
        finally:
            if generation == self._generation:
                self._loading = False

        if generation != self._generation:
            self._logger.debug("stale_load_discarded", bot_id=bot_id)
            return self._documents

        self._documents = tuple(documents)
        surviving = self.ids
        dropped = self._selected - surviving
        self._selected &= surviving
        self._logger.info(
            "documents_loaded",
            bot_id=bot_id,
            document_count=len(self._documents),
            selection_dropped=len(dropped),
        )
        return self._documents

    async def refresh(self) -> tuple[Document, ...]:
        """Re-run the most recent load for the same bot.

        A failed refresh has already been reported to the operator by
        :meth:`load`; it is logged here and the (now empty) list returned.
        """
        if self._bot_id is None:
            return self._documents
        try:
            return await self.load(self._bot_id)
        except LoadError:
            self._logger.warning("documents_refresh_failed", bot_id=self._bot_id)
            return self._documents

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selected_ids(self) -> frozenset[int]:
        return frozenset(self._selected)

    @property
    def selected_documents(self) -> list[Document]:
        """Selected documents in registry order."""
        return [doc for doc in self._documents if doc.id in self._selected]

    def is_selected(self, document_id: int) -> bool:
        return document_id in self._selected

    def is_all_selected(self) -> bool:
        return len(self._documents) > 0 and len(self._selected) == len(self._documents)

    def has_selection(self) -> bool:
        return bool(self._selected)

    def select_all(self) -> None:
        self._selected = set(self.ids)

    def clear(self) -> None:
        self._selected.clear()

    def toggle(self, document_id: int) -> bool:
        """Flip *document_id*'s selection; return whether it is now selected.

        Raises
        ------
        KeyError
            If *document_id* is not in the loaded list.
        """
        if document_id not in self.ids:
            raise KeyError(f"Document {document_id} is not loaded")
        if document_id in self._selected:
            self._selected.discard(document_id)
            return False
        self._selected.add(document_id)
        return True

    def toggle_all(self) -> None:
        """Select everything, or clear if everything is already selected."""
        if self.is_all_selected():
            self.clear()
        else:
            self.select_all()

    def select(self, document_ids: Iterable[int]) -> None:
        """Replace the selection with *document_ids*.

        Raises
        ------
        KeyError
            If any id is not in the loaded list.
        """
        requested = set(document_ids)
        unknown = requested - self.ids
        if unknown:
            raise KeyError(f"Documents not loaded: {sorted(unknown)}")
        self._selected = requested
