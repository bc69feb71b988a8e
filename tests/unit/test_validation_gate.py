"""Unit tests for the validation gate's local submission checks."""

from __future__ import annotations

import pytest

from src.models.submission import (
    FileBatchSubmission,
    FileSubmission,
    QASubmission,
    TextSubmission,
    UploadedFile,
    VideoSubmission,
    WebsiteSubmission,
)
from src.services.validation_gate import (
    DEFAULT_MAX_UPLOAD_BYTES,
    MSG_EMPTY_QA,
    MSG_EMPTY_TEXT,
    MSG_EMPTY_URL,
    MSG_EMPTY_VIDEO_URL,
    MSG_FILE_TOO_LARGE,
    MSG_NO_FILES,
    MSG_UNSUPPORTED_TYPE,
    check_file,
    check_submission,
    ensure_valid,
)
from src.utils.errors import ValidationError

_IDS = {"customer_id": 42, "bot_id": 7}


def _file(filename: str, size: int = 10, media_type: str | None = None) -> UploadedFile:
    return UploadedFile(filename=filename, content=b"x" * size, media_type=media_type)


class TestCheckFile:
    def test_rejects_file_over_twenty_mib(self) -> None:
        big = _file("big.pdf", DEFAULT_MAX_UPLOAD_BYTES + 1, "application/pdf")
        assert check_file(big) == MSG_FILE_TOO_LARGE

    def test_accepts_file_of_exactly_twenty_mib(self) -> None:
        exact = _file("exact.pdf", DEFAULT_MAX_UPLOAD_BYTES, "application/pdf")
        assert check_file(exact) is None

    def test_custom_limit_is_named_in_message(self) -> None:
        small_limit = 1024 * 1024
        assert check_file(_file("a.txt", small_limit + 1, "text/plain"), small_limit) == (
            "File too large. Maximum size is 1 MB."
        )

    @pytest.mark.parametrize(
        "media_type",
        [
            "application/pdf",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "application/msword",
            "text/plain; charset=utf-8",
            "text/csv",
        ],
    )
    def test_accepts_allowed_media_types(self, media_type: str) -> None:
        assert check_file(_file("upload.bin", media_type=media_type)) is None

    def test_extension_fallback_when_media_type_missing(self) -> None:
        assert check_file(_file("REPORT.PDF")) is None
        assert check_file(_file("notes.docx", media_type="application/octet-stream")) is None

    def test_rejects_unknown_type_and_extension(self) -> None:
        exe = _file("setup.exe", media_type="application/x-msdownload")
        assert check_file(exe) == MSG_UNSUPPORTED_TYPE

    def test_size_is_checked_before_type(self) -> None:
        big_exe = _file("setup.exe", DEFAULT_MAX_UPLOAD_BYTES + 1)
        assert check_file(big_exe) == MSG_FILE_TOO_LARGE


class TestCheckSubmission:
    def test_valid_file_submission(self) -> None:
        submission = FileSubmission(file=_file("a.csv", media_type="text/csv"), **_IDS)
        assert check_submission(submission) is None

    def test_empty_batch_is_rejected(self) -> None:
        assert check_submission(FileBatchSubmission(files=(), **_IDS)) == MSG_NO_FILES

    def test_batch_reports_first_bad_file_by_name(self) -> None:
        submission = FileBatchSubmission(
            files=(_file("good.pdf"), _file("bad.exe"), _file("worse.exe")),
            **_IDS,
        )
        assert check_submission(submission) == f"bad.exe: {MSG_UNSUPPORTED_TYPE}"

    def test_whitespace_only_text_is_rejected(self) -> None:
        submission = TextSubmission(title="Notes", content="   \n\t ", **_IDS)
        assert check_submission(submission) == MSG_EMPTY_TEXT

    def test_text_without_title_is_valid(self) -> None:
        assert check_submission(TextSubmission(content="Opening hours 9-5", **_IDS)) is None

    @pytest.mark.parametrize(("question", "answer"), [("Hours?", " "), ("", "9-5")])
    def test_qa_needs_both_parts(self, question: str, answer: str) -> None:
        submission = QASubmission(question=question, answer=answer, **_IDS)
        assert check_submission(submission) == MSG_EMPTY_QA

    def test_blank_website_url_is_rejected(self) -> None:
        assert check_submission(WebsiteSubmission(url="  ", **_IDS)) == MSG_EMPTY_URL

    def test_blank_video_url_is_rejected(self) -> None:
        assert check_submission(VideoSubmission(url="", **_IDS)) == MSG_EMPTY_VIDEO_URL

    def test_malformed_url_is_left_to_backend(self) -> None:
        assert check_submission(WebsiteSubmission(url="not a url", **_IDS)) is None


class TestEnsureValid:
    def test_raises_with_reason(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ensure_valid(TextSubmission(content="", **_IDS))
        assert exc_info.value.message == MSG_EMPTY_TEXT

    def test_passes_valid_submission(self) -> None:
        ensure_valid(QASubmission(question="Hours?", answer="9-5", **_IDS))
