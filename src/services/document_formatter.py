"""Presentation formatting for documents and the registry view.

Turns :class:`Document` models into plain JSON-serialisable dictionaries
for the console API and into the row strings the CLI prints.  No state,
no I/O.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from src.models.document import Document, RetrainSchedule

# Shown where a count or date is unknown.
PLACEHOLDER = "—"
SOURCE_DISPLAY_CHARS = 50
_SCHEME_PREFIX = re.compile(r"^https?://(www\.)?")


def format_char_count(count: int | None) -> str:
    """``12345`` → ``"12,345"``; unknown → ``"—"``."""
    if count is None:
        return PLACEHOLDER
    return f"{count:,}"


def format_date(value: datetime | None) -> str:
    """``2026-10-19T…`` → ``"19 Oct 2026"``; unknown → ``"—"``."""
    if value is None:
        return PLACEHOLDER
    return value.strftime("%d %b %Y")


def format_source(url: str | None) -> str | None:
    """Source URL without scheme or ``www.``, cut to 50 characters."""
    if not url:
        return None
    return _SCHEME_PREFIX.sub("", url)[:SOURCE_DISPLAY_CHARS]


class DocumentFormatter:
    """Formats documents for the CLI and the console API."""

    def format_document(self, document: Document, selected: bool = False) -> dict[str, Any]:
        return {
            "id": document.id,
            "title": document.title,
            "content_type": document.content_type,
            "label": document.label,
            "source_url": document.source_url,
            "source_display": format_source(document.source_url),
            "char_count": document.char_count,
            "char_count_display": format_char_count(document.char_count),
            "created_at": document.created_at.isoformat() if document.created_at else None,
            "created_display": format_date(document.created_at),
            "last_retrained_at": (
                document.last_retrained_at.isoformat() if document.last_retrained_at else None
            ),
            "selected": selected,
        }

    def format_row(self, document: Document, selected: bool = False) -> str:
        """One line of the CLI document table."""
        marker = "*" if selected else " "
        row = (
            f"{marker} {document.id:>6}  {document.label:<8}  "
            f"{format_char_count(document.char_count):>10}  "
            f"{format_date(document.created_at):>11}  {document.title}"
        )
        source = format_source(document.source_url)
        return f"{row}  ({source})" if source else row

    def format_table(
        self,
        documents: tuple[Document, ...] | list[Document],
        selected_ids: frozenset[int] = frozenset(),
        schedule: RetrainSchedule | None = None,
    ) -> list[str]:
        """Header, banner (if a schedule is enabled) and one row per document."""
        lines: list[str] = []
        banner = schedule.describe() if schedule is not None else None
        if banner:
            lines.append(banner)
        if not documents:
            lines.append("No documents yet.")
            return lines
        lines.append(f"  {'ID':>6}  {'Type':<8}  {'Chars':>10}  {'Added':>11}  Title")
        lines.extend(self.format_row(doc, doc.id in selected_ids) for doc in documents)
        lines.append(f"{len(documents)} document(s), {len(selected_ids)} selected")
        return lines
