"""Notification and bulk-operation models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class NotificationLevel(str, Enum):  # noqa: UP042
    SUCCESS = "success"
    ERROR = "error"


class Notification(BaseModel):
    """A transient operator notification ("toast").

    ``created_at`` and ``expires_at`` are readings of the notification
    center's monotonic clock, not wall-clock times.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    level: NotificationLevel
    message: str
    created_at: float
    expires_at: float

    @property
    def is_error(self) -> bool:
        return self.level is NotificationLevel.ERROR


class BulkAction(str, Enum):  # noqa: UP042
    """A state-changing operation applied to a set of documents."""

    RETRAIN = "retrain"
    DELETE = "delete"
