"""Training-set domain models -- re-exports all public model classes.

Other parts of the codebase can import from ``src.models`` directly instead
of the individual submodules:
    - document.py      -- Documents, content-type labels, retrain schedules
    - submission.py    -- Upload submission variants and their outcomes
    - notification.py  -- Operator notifications and bulk action tags
"""

from __future__ import annotations

from src.models.document import (
    CONTENT_TYPE_LABELS,
    ContentType,
    Document,
    RetrainFrequency,
    RetrainSchedule,
    content_type_label,
    is_valid_time_of_day,
)
from src.models.notification import BulkAction, Notification, NotificationLevel
from src.models.submission import (
    DEFAULT_TEXT_TITLE,
    FileBatchSubmission,
    FileSubmission,
    QASubmission,
    ScrapeResult,
    SubmissionOutcome,
    TextSubmission,
    UploadedFile,
    UploadMode,
    UploadSubmission,
    VideoSubmission,
    WebsiteSubmission,
)

__all__ = [
    "BulkAction",
    "CONTENT_TYPE_LABELS",
    "ContentType",
    "DEFAULT_TEXT_TITLE",
    "Document",
    "FileBatchSubmission",
    "FileSubmission",
    "Notification",
    "NotificationLevel",
    "QASubmission",
    "RetrainFrequency",
    "RetrainSchedule",
    "ScrapeResult",
    "SubmissionOutcome",
    "TextSubmission",
    "UploadMode",
    "UploadSubmission",
    "UploadedFile",
    "VideoSubmission",
    "WebsiteSubmission",
    "content_type_label",
    "is_valid_time_of_day",
]
