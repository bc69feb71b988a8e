"""Upload submission models -- the transient payloads an operator sends.

``UploadSubmission`` is a tagged union over the content variants, keyed by
the ``kind`` field.  A submission lives only as long as one dispatch: it is
created on operator action, validated, sent, and dropped once the success
or error notification fires.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# Q&A titles quote at most this many characters of the question.
QA_TITLE_MAX_CHARS = 50
DEFAULT_TEXT_TITLE = "Untitled Document"


class UploadMode(str, Enum):  # noqa: UP042
    """Which upload form is open."""

    FILE = "file"
    TEXT = "text"
    WEBSITE = "website"
    VIDEO = "video"


class UploadedFile(BaseModel):
    """A file picked by the operator, held in memory until dispatch."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content: bytes = Field(repr=False)
    # Declared media type; may be missing or wrong, see the validation gate.
    media_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


class _SubmissionBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    customer_id: int
    bot_id: int


class FileSubmission(_SubmissionBase):
    kind: Literal["file"] = "file"
    file: UploadedFile


class FileBatchSubmission(_SubmissionBase):
    """Several files sent in one multipart request."""

    kind: Literal["file_batch"] = "file_batch"
    files: tuple[UploadedFile, ...]


class TextSubmission(_SubmissionBase):
    kind: Literal["text"] = "text"
    title: str = ""
    content: str

    @property
    def effective_title(self) -> str:
        return self.title if self.title.strip() else DEFAULT_TEXT_TITLE


class QASubmission(_SubmissionBase):
    """A question/answer pair, sent to the backend as a text document."""

    kind: Literal["qa"] = "qa"
    question: str
    answer: str

    @property
    def title(self) -> str:
        excerpt = self.question[:QA_TITLE_MAX_CHARS]
        suffix = "..." if len(self.question) > QA_TITLE_MAX_CHARS else ""
        return f"Q&A: {excerpt}{suffix}"

    @property
    def content(self) -> str:
        return f"Q: {self.question}\n\nA: {self.answer}"


class WebsiteSubmission(_SubmissionBase):
    kind: Literal["website"] = "website"
    url: str
    full_site: bool = False


class VideoSubmission(_SubmissionBase):
    kind: Literal["video"] = "video"
    url: str


UploadSubmission = Annotated[
    Union[
        FileSubmission,
        FileBatchSubmission,
        TextSubmission,
        QASubmission,
        WebsiteSubmission,
        VideoSubmission,
    ],
    Field(discriminator="kind"),
]


class ScrapeResult(BaseModel):
    """What the backend reports after a scrape or crawl."""

    model_config = ConfigDict(frozen=True)

    pages_scraped: int | None = None
    title: str | None = None


class SubmissionOutcome(BaseModel):
    """The terminal success of one submission."""

    model_config = ConfigDict(frozen=True)

    kind: str
    message: str
    scrape: ScrapeResult | None = None
