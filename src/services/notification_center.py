"""Single-slot notification queue for operator-facing outcome messages.

Every terminal outcome -- upload done, scrape failed, bulk delete done --
produces exactly one notification.  Only one notification is active at a
time: pushing a new one replaces whatever is showing.  Successes expire
after ``notification_success_seconds``, errors after
``notification_error_seconds``; the operator can dismiss either at any
time.

Listeners follow the same observer shape as the progress tracker:

    service ──push()──→ NotificationCenter ──callback()──→ CLI printer
                                           ──→ (any other listener)

A listener that raises is logged and skipped so it cannot break the
operation that produced the notification.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

import structlog

from src.config.settings import Settings
from src.models.notification import Notification, NotificationLevel
from src.utils.logging import get_logger


class NotificationCenter:
    """Owns the single active notification and its expiry.

    Parameters
    ----------
    settings:
        Supplies the success / error display durations.
    clock:
        Monotonic clock in seconds; injectable so tests can advance time.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        settings = settings or Settings()
        self._durations = {
            NotificationLevel.SUCCESS: settings.notification_success_seconds,
            NotificationLevel.ERROR: settings.notification_error_seconds,
        }
        self._clock = clock
        self._active: Notification | None = None
        self._next_id = 1
        self._listeners: list[Callable] = []
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def active(self) -> Notification | None:
        """The showing notification, or ``None`` once expired or dismissed."""
        if self._active is not None and self._clock() >= self._active.expires_at:
            self._active = None
        return self._active

    async def success(self, message: str) -> Notification:
        return await self.push(NotificationLevel.SUCCESS, message)

    async def error(self, message: str) -> Notification:
        return await self.push(NotificationLevel.ERROR, message)

    async def push(self, level: NotificationLevel, message: str) -> Notification:
        """Replace the active notification and notify listeners."""
        now = self._clock()
        notification = Notification(
            id=self._next_id,
            level=level,
            message=message,
            created_at=now,
            expires_at=now + self._durations[level],
        )
        self._next_id += 1
        self._active = notification

        if level is NotificationLevel.ERROR:
            self._logger.warning("notification", level=level.value, message=message)
        else:
            self._logger.info("notification", level=level.value, message=message)

        await self._notify_listeners(notification)
        return notification

    def dismiss(self, notification_id: int | None = None) -> bool:
        """Dismiss the active notification.

        With *notification_id*, only dismisses if that notification is
        still the active one.  Returns ``True`` if something was dismissed.
        """
        current = self.active
        if current is None:
            return False
        if notification_id is not None and current.id != notification_id:
            return False
        self._active = None
        return True

    def register_listener(self, callback: Callable) -> None:
        """Register a sync or async callable receiving each :class:`Notification`."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unregister_listener(self, callback: Callable) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _notify_listeners(self, notification: Notification) -> None:
        for callback in list(self._listeners):
            try:
                result = callback(notification)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                self._logger.error(
                    "notification_listener_error",
                    notification_id=notification.id,
                    error=str(exc),
                )
