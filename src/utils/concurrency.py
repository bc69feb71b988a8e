"""Concurrency primitives for the training-set manager.

Everything runs on one event loop.  Two things need care:

1. **SingleSlotGate** -- the "one mutating operation of a kind in flight"
   rule.  The gate holds a tag (e.g. ``BulkAction.DELETE``) while an
   operation runs and rejects a second ``hold()`` outright instead of
   queueing it.  The check-and-set has no ``await`` between the check and
   the set, so no lock is needed on a single loop.

2. **with_deadline** -- every backend call is bounded.  A hung call raises
   :class:`BackendTimeoutError` so the gate holding it is released by the
   normal ``finally`` path.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

import structlog

from src.utils.errors import BackendTimeoutError, OperationInProgressError
from src.utils.logging import get_logger

_T = TypeVar("_T")
_TagT = TypeVar("_TagT")

_logger: structlog.BoundLogger = get_logger(__name__)


class SingleSlotGate(Generic[_TagT]):
    """A one-slot in-flight marker carrying the tag of the running operation.

    Parameters
    ----------
    name:
        Gate name for log lines and error messages (e.g. ``"bulk"``).
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._tag: _TagT | None = None

    @property
    def tag(self) -> _TagT | None:
        """The tag of the operation in flight, or ``None`` when idle."""
        return self._tag

    @property
    def busy(self) -> bool:
        return self._tag is not None

    @asynccontextmanager
    async def hold(self, tag: _TagT) -> AsyncIterator[_TagT]:
        """Occupy the slot for the duration of the ``async with`` block.

        Raises
        ------
        OperationInProgressError
            If the slot is already held.
        """
        if self._tag is not None:
            _logger.warning(
                "gate_rejected",
                gate=self._name,
                running=str(self._tag),
                requested=str(tag),
            )
            raise OperationInProgressError(
                f"A {self._name} operation is already in progress"
            )
        self._tag = tag
        try:
            yield tag
        finally:
            self._tag = None


async def with_deadline(
    awaitable: Awaitable[_T],
    timeout_seconds: float,
    provider_name: str | None = None,
) -> _T:
    """Await *awaitable*, raising :class:`BackendTimeoutError` past the deadline.

    The underlying task is cancelled on timeout; whatever the backend does
    with the half-sent request is out of our hands.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError as exc:
        _logger.warning(
            "backend_deadline_exceeded",
            timeout_seconds=timeout_seconds,
            provider=provider_name,
        )
        raise BackendTimeoutError(
            provider_name=provider_name,
            timeout_seconds=timeout_seconds,
        ) from exc
