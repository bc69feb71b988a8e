"""Validation gate -- local checks a submission must pass before dispatch.

Pure predicates: no I/O, no notifications.  :func:`check_submission`
returns the operator-facing rejection reason (or ``None``);
:func:`ensure_valid` raises :class:`ValidationError` carrying it.

File rules: at most ``max_upload_bytes`` (20 MiB by default), and either a
known media type or -- as a fallback for missing/wrong metadata -- a known
extension.  URLs are only checked for presence; the backend rejects
malformed ones.
"""

from __future__ import annotations

import re

from src.models.submission import (
    FileBatchSubmission,
    FileSubmission,
    QASubmission,
    TextSubmission,
    UploadedFile,
    UploadSubmission,
    VideoSubmission,
    WebsiteSubmission,
)
from src.utils.errors import ValidationError

DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024

ALLOWED_MEDIA_TYPES = frozenset({
    "application/pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
    "text/plain",
    "text/csv",
})
_ALLOWED_EXTENSION = re.compile(r"\.(pdf|docx?|txt|csv)$", re.IGNORECASE)

MSG_FILE_TOO_LARGE = "File too large. Maximum size is 20 MB."
MSG_UNSUPPORTED_TYPE = "Unsupported file type. Use PDF, Word, TXT, or CSV."
MSG_NO_FILES = "Please choose a file to upload"
MSG_EMPTY_TEXT = "Please enter some content"
MSG_EMPTY_URL = "Please enter a URL"
MSG_EMPTY_VIDEO_URL = "Please enter a YouTube URL"
MSG_EMPTY_QA = "Please fill in question and answer"


def check_file(file: UploadedFile, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> str | None:
    """Return the rejection reason for *file*, or ``None`` if it may be uploaded."""
    if file.size > max_bytes:
        if max_bytes == DEFAULT_MAX_UPLOAD_BYTES:
            return MSG_FILE_TOO_LARGE
        return f"File too large. Maximum size is {max_bytes / (1024 * 1024):g} MB."
    media_type = (file.media_type or "").split(";")[0].strip().lower()
    if media_type not in ALLOWED_MEDIA_TYPES and not _ALLOWED_EXTENSION.search(file.filename):
        return MSG_UNSUPPORTED_TYPE
    return None


def check_submission(
    submission: UploadSubmission,
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> str | None:
    """Return the rejection reason for *submission*, or ``None`` if valid."""
    if isinstance(submission, FileSubmission):
        return check_file(submission.file, max_upload_bytes)

    if isinstance(submission, FileBatchSubmission):
        if not submission.files:
            return MSG_NO_FILES
        for file in submission.files:
            reason = check_file(file, max_upload_bytes)
            if reason is not None:
                return f"{file.filename}: {reason}"
        return None

    if isinstance(submission, TextSubmission):
        return MSG_EMPTY_TEXT if not submission.content.strip() else None

    if isinstance(submission, QASubmission):
        if not submission.question.strip() or not submission.answer.strip():
            return MSG_EMPTY_QA
        return None

    if isinstance(submission, WebsiteSubmission):
        return MSG_EMPTY_URL if not submission.url.strip() else None

    if isinstance(submission, VideoSubmission):
        return MSG_EMPTY_VIDEO_URL if not submission.url.strip() else None

    raise TypeError(f"Unknown submission type: {type(submission).__name__}")


def ensure_valid(
    submission: UploadSubmission,
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> None:
    """Raise :class:`ValidationError` if *submission* fails :func:`check_submission`."""
    reason = check_submission(submission, max_upload_bytes)
    if reason is not None:
        raise ValidationError(reason)
