"""Document registry models: documents, content types, and retrain schedules.

Defines Pydantic v2 models for the documents that make up a bot's training
set and for the recurring retrain policy applied to URL-backed documents.
All models are frozen -- state changes produce new instances via
``model_copy(update={...})``.

Field names follow the backend's snake_case payloads; the camelCase
spellings are accepted as validation aliases so either wire shape parses.
"""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

_TIME_OF_DAY = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_TIME_WITH_SECONDS = re.compile(r"^([01]\d|2[0-3]):[0-5]\d:[0-5]\d$")
_FREQUENCY_KEYS = ("frequency", "retrain_frequency", "retrainFrequency")
_TIME_KEYS = ("time", "retrain_time", "retrainTime")


# ---------------------------------------------------------------------------
# ContentType -- closed set of known document kinds.
# ---------------------------------------------------------------------------
class ContentType(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Kinds of training content the backend reports.

    Presentation only: ``Document.content_type`` stays a plain string so
    unknown values from newer backends still load.
    """

    PDF = "pdf"
    WORD = "word"
    DOCX = "docx"
    TEXT = "text"
    CSV = "csv"
    WEBSITE = "website"
    YOUTUBE = "youtube"
    QA = "qa"


CONTENT_TYPE_LABELS: dict[str, str] = {
    ContentType.PDF.value: "PDF",
    ContentType.WORD.value: "Word",
    ContentType.DOCX.value: "Word",
    ContentType.TEXT.value: "Text",
    ContentType.CSV.value: "CSV",
    ContentType.WEBSITE.value: "Website",
    ContentType.YOUTUBE.value: "YouTube",
    ContentType.QA.value: "Q&A",
}


def content_type_label(content_type: str | None) -> str:
    """Map a content type to its display label.

    Matching is case-insensitive.  Unknown values degrade to the raw value,
    and a missing value to ``"Unknown"``.
    """
    if not content_type:
        return "Unknown"
    return CONTENT_TYPE_LABELS.get(content_type.lower(), content_type)


# ---------------------------------------------------------------------------
# Document -- one unit of ingested training content.
# ---------------------------------------------------------------------------
class Document(BaseModel):
    """A document in a bot's training set, as reported by the backend."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Unique within the owning bot.
    id: int
    title: str = ""
    content_type: str = Field(
        default="",
        validation_alias=AliasChoices("content_type", "contentType"),
    )
    # Only set for website / video documents.
    source_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("source_url", "sourceUrl"),
    )
    char_count: int | None = Field(
        default=None,
        validation_alias=AliasChoices("char_count", "charCount"),
    )
    created_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt"),
    )
    last_retrained_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("last_retrained_at", "lastRetrainedAt"),
    )

    @field_validator("title", "content_type", mode="before")
    @classmethod
    def _null_as_empty(cls, value: object) -> object:
        return "" if value is None else value

    @property
    def label(self) -> str:
        return content_type_label(self.content_type)

    @property
    def is_url_backed(self) -> bool:
        return self.source_url is not None


# ---------------------------------------------------------------------------
# RetrainSchedule -- recurring re-ingestion policy for URL-backed documents.
# ---------------------------------------------------------------------------
class RetrainFrequency(str, Enum):  # noqa: UP042
    """How often URL-backed documents are re-scraped."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def is_valid_time_of_day(value: str) -> bool:
    """Return ``True`` if *value* is a 24-hour ``HH:MM`` string."""
    return bool(_TIME_OF_DAY.match(value))


class RetrainSchedule(BaseModel):
    """A bot's retrain schedule.

    ``frequency == NONE`` is the canonical disabled state and always carries
    ``time = None``; the validator enforces it regardless of input.  Times
    are 24-hour UTC.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    frequency: RetrainFrequency = Field(
        default=RetrainFrequency.NONE,
        validation_alias=AliasChoices("frequency", "retrain_frequency", "retrainFrequency"),
    )
    time: str | None = Field(
        default=None,
        validation_alias=AliasChoices("time", "retrain_time", "retrainTime"),
    )

    @field_validator("frequency", mode="before")
    @classmethod
    def _null_means_disabled(cls, value: object) -> object:
        if value is None or value == "":
            return RetrainFrequency.NONE
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("time", mode="before")
    @classmethod
    def _drop_seconds(cls, value: object) -> object:
        # SQL TIME columns come back as HH:MM:SS.
        if isinstance(value, str) and _TIME_WITH_SECONDS.match(value):
            return value[:5]
        return value

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str | None) -> str | None:
        if value is not None and not is_valid_time_of_day(value):
            raise ValueError(f"time must be HH:MM (24-hour), got {value!r}")
        return value

    @model_validator(mode="before")
    @classmethod
    def _disabled_has_no_time(cls, data: object) -> object:
        if not isinstance(data, dict):
            return data
        frequency = next(
            (data[key] for key in _FREQUENCY_KEYS if key in data),
            None,
        )
        if frequency is None or str(getattr(frequency, "value", frequency)).lower() in ("", "none"):
            data = {key: value for key, value in data.items() if key not in _TIME_KEYS}
        return data

    @classmethod
    def disabled(cls) -> RetrainSchedule:
        return cls()

    @property
    def is_enabled(self) -> bool:
        return self.frequency is not RetrainFrequency.NONE

    def describe(self) -> str | None:
        """Banner text for an enabled schedule, ``None`` when disabled."""
        if not self.is_enabled:
            return None
        return f"Auto-retrain: {self.frequency.value} at {self.time} UTC"
