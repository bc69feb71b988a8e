"""Unit tests for document presentation formatting."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.models.document import Document, RetrainFrequency, RetrainSchedule
from src.services.document_formatter import (
    PLACEHOLDER,
    DocumentFormatter,
    format_char_count,
    format_date,
    format_source,
)


def test_char_count_uses_thousands_separators() -> None:
    assert format_char_count(12345) == "12,345"
    assert format_char_count(0) == "0"
    assert format_char_count(None) == PLACEHOLDER


def test_date_format() -> None:
    assert format_date(datetime(2026, 10, 19, 23, 59, tzinfo=timezone.utc)) == "19 Oct 2026"
    assert format_date(None) == PLACEHOLDER


class TestDocumentFormatter:
    def test_format_document(self, sample_documents) -> None:
        data = DocumentFormatter().format_document(sample_documents[0], selected=True)

        assert data["id"] == 1
        assert data["label"] == "PDF"
        assert data["char_count_display"] == "12,345"
        assert data["created_display"] == "19 Oct 2026"
        assert data["created_at"] == "2026-10-19T09:30:00+00:00"
        assert data["last_retrained_at"] is None
        assert data["selected"] is True

    def test_unknown_fields_use_placeholder(self) -> None:
        data = DocumentFormatter().format_document(Document(id=5, content_type="podcast"))
        assert data["label"] == "podcast"
        assert data["char_count_display"] == PLACEHOLDER
        assert data["created_display"] == PLACEHOLDER

    def test_table_with_schedule_banner(self, sample_documents) -> None:
        schedule = RetrainSchedule(frequency=RetrainFrequency.WEEKLY, time="02:00")

        lines = DocumentFormatter().format_table(sample_documents, frozenset({2}), schedule)

        assert lines[0] == "Auto-retrain: weekly at 02:00 UTC"
        assert lines[-1] == "4 document(s), 1 selected"
        price_row = next(line for line in lines if "Price list" in line)
        assert price_row.startswith("*")
        assert "CSV" in price_row

    def test_empty_table_without_schedule(self) -> None:
        lines = DocumentFormatter().format_table([], schedule=RetrainSchedule.disabled())
        assert lines == ["No documents yet."]


@pytest.mark.parametrize(
    ("url", "shown"),
    [
        ("https://www.example.com/pricing", "example.com/pricing"),
        ("http://docs.example.com", "docs.example.com"),
        ("https://example.com/" + "a" * 80, ("example.com/" + "a" * 80)[:50]),
        (None, None),
    ],
)
def test_source_display(url, shown) -> None:
    assert format_source(url) == shown


def test_row_shows_source(sample_documents) -> None:
    row = DocumentFormatter().format_row(sample_documents[2])
    assert row.endswith("Example  (example.com)")
    assert DocumentFormatter().format_document(sample_documents[2])["source_display"] == "example.com"
