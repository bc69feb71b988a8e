"""Retrain schedule manager -- the recurring re-scrape policy for a bot.

State machine over :class:`RetrainSchedule`:

    Disabled ──set_frequency(daily|weekly|monthly)──→ Scheduled(f, time)
    Scheduled ──set_frequency(none)──→ Disabled (time cleared)
    Scheduled ──set_time(t)──→ Scheduled(f, t)
    Disabled ──set_time(t)──→ Disabled (no-op)

The manager keeps two schedules:

  - ``draft``     -- what the operator is editing and sees.
  - ``committed`` -- the last schedule the backend acknowledged (or loaded).

``save()`` sends the draft and only moves ``committed`` once the backend
acknowledges it.  A failed save leaves the draft on screen (so the
operator can retry) while ``committed`` still reflects the backend; the
two can be compared with ``is_dirty`` and reconciled with
``discard_changes()``.

Loading is lazy: the schedule is fetched the first time it is needed for
a bot, and a failed fetch is treated as "no schedule set", not an error.
"""

from __future__ import annotations

import structlog

from src.config.settings import Settings
from src.interfaces.content_backend import IContentBackend
from src.models.document import RetrainFrequency, RetrainSchedule, is_valid_time_of_day
from src.services.notification_center import NotificationCenter
from src.utils.errors import DispatchError, ValidationError
from src.utils.logging import get_logger

MSG_SAVE_FAILED = "Failed to save schedule"
MSG_REMOVED = "Retrain schedule removed"
MSG_BAD_TIME = "Time must be HH:MM (24-hour)"


def format_saved_message(schedule: RetrainSchedule) -> str:
    if not schedule.is_enabled:
        return MSG_REMOVED
    return f"Retrain scheduled {schedule.frequency.value} at {schedule.time} UTC"


class RetrainScheduleManager:
    """Loads, edits and saves one bot's retrain schedule.

    Parameters
    ----------
    backend:
        Where schedules are read from and persisted to.
    notifications:
        Receives the save outcome.
    settings:
        Supplies the default time-of-day for a newly enabled schedule.
    """

    def __init__(
        self,
        backend: IContentBackend,
        notifications: NotificationCenter,
        settings: Settings | None = None,
    ) -> None:
        self._backend = backend
        self._notifications = notifications
        self._default_time = (settings or Settings()).default_retrain_time
        self._bot_id: int | None = None
        self._loaded = False
        self._committed = RetrainSchedule.disabled()
        self._draft = RetrainSchedule.disabled()
        # Remembered across none -> daily round-trips, like the time picker.
        self._time = self._default_time
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def bot_id(self) -> int | None:
        return self._bot_id

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def draft(self) -> RetrainSchedule:
        return self._draft

    @property
    def committed(self) -> RetrainSchedule:
        return self._committed

    @property
    def is_dirty(self) -> bool:
        return self._draft != self._committed

    def reset(self, bot_id: int) -> None:
        """Forget everything and point at *bot_id*; nothing is fetched yet."""
        self._bot_id = bot_id
        self._loaded = False
        self._committed = RetrainSchedule.disabled()
        self._draft = RetrainSchedule.disabled()
        self._time = self._default_time

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, bot_id: int | None = None) -> RetrainSchedule:
        """Fetch the stored schedule; a failed fetch yields Disabled."""
        if bot_id is not None and bot_id != self._bot_id:
            self.reset(bot_id)
        if self._bot_id is None:
            raise ValueError("No bot selected")

        try:
            schedule = await self._backend.get_retrain_schedule(self._bot_id)
        except DispatchError as exc:
            self._logger.debug("retrain_schedule_unavailable", bot_id=self._bot_id, error=str(exc))
            schedule = RetrainSchedule.disabled()

        if schedule.is_enabled and schedule.time is None:
            schedule = schedule.model_copy(update={"time": self._default_time})

        self._committed = schedule
        self._draft = schedule
        self._time = schedule.time or self._default_time
        self._loaded = True
        self._logger.info(
            "retrain_schedule_loaded",
            bot_id=self._bot_id,
            frequency=schedule.frequency.value,
            time=schedule.time,
        )
        return schedule

    async def ensure_loaded(self) -> RetrainSchedule:
        if not self._loaded:
            return await self.load()
        return self._draft

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def set_frequency(self, frequency: RetrainFrequency | str) -> RetrainSchedule:
        """Move to Disabled (``none``) or Scheduled(frequency, current time)."""
        try:
            frequency = RetrainFrequency(str(getattr(frequency, "value", frequency)).lower())
        except ValueError as exc:
            raise ValidationError(f"Unknown frequency: {frequency}") from exc

        if frequency is RetrainFrequency.NONE:
            self._draft = RetrainSchedule.disabled()
        else:
            self._draft = RetrainSchedule(frequency=frequency, time=self._time)
        return self._draft

    def set_time(self, time_of_day: str) -> RetrainSchedule:
        """Change the time of an enabled schedule; no-op while Disabled.

        Raises
        ------
        ValidationError
            If *time_of_day* is not ``HH:MM`` 24-hour.
        """
        if not is_valid_time_of_day(time_of_day):
            raise ValidationError(MSG_BAD_TIME)
        if not self._draft.is_enabled:
            return self._draft
        self._time = time_of_day
        self._draft = self._draft.model_copy(update={"time": time_of_day})
        return self._draft

    def discard_changes(self) -> RetrainSchedule:
        self._draft = self._committed
        if self._committed.time is not None:
            self._time = self._committed.time
        return self._draft

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def save(self) -> RetrainSchedule:
        """Persist the draft; commit it locally only after the backend acknowledges.

        Raises
        ------
        DispatchError
            If the backend rejected or failed the save (already notified).
        """
        if self._bot_id is None:
            raise ValueError("No bot selected")

        draft = self._draft
        try:
            stored = await self._backend.save_retrain_schedule(self._bot_id, draft)
        except DispatchError as exc:
            self._logger.error(
                "retrain_schedule_save_failed",
                bot_id=self._bot_id,
                frequency=draft.frequency.value,
                error=str(exc),
            )
            await self._notifications.error(exc.backend_message or MSG_SAVE_FAILED)
            raise

        self._committed = stored if stored is not None else draft
        self._loaded = True
        self._logger.info(
            "retrain_schedule_saved",
            bot_id=self._bot_id,
            frequency=self._committed.frequency.value,
            time=self._committed.time,
        )
        await self._notifications.success(format_saved_message(draft))
        return self._committed
