"""Data models for extracted book content and library metadata."""

import html
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from book_extract.models.extraction import (
    CoverSource,
    ExtractionStatus,
    FailureReason,
    SegmentationTier,
    TitleSource,
)

UNKNOWN_AUTHOR = "Unknown"


class _PayloadModel(BaseModel):
    """Base model serialized with camelCase keys for the host process."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-ready dict with camelCase keys and no null optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: int | None = None) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)


class Chapter(_PayloadModel):
    """A chapter as plain-text and markup paragraph pairs."""

    title: str
    paragraphs: list[str] = Field(default_factory=list)
    html_paragraphs: list[str] = Field(default_factory=list)
    title_source: TitleSource = TitleSource.FIXED
    segmentation: SegmentationTier | None = None

    @model_validator(mode="after")
    def _check_pairing(self) -> "Chapter":
        if not self.title:
            raise ValueError("chapter title must not be empty")
        if len(self.paragraphs) != len(self.html_paragraphs):
            raise ValueError(
                f"paragraph count mismatch: {len(self.paragraphs)} plain vs "
                f"{len(self.html_paragraphs)} html"
            )
        return self


class BookContent(_PayloadModel):
    """Complete readable content of a book."""

    chapters: list[Chapter]
    # For image archives: paragraphs hold data URIs instead of text
    is_image_book: bool = False
    font_family: str | None = None
    font_size_px: float | None = None
    css: str | None = None
    status: ExtractionStatus = ExtractionStatus.OK
    failure: FailureReason | None = None

    @model_validator(mode="after")
    def _check_image_pages(self) -> "BookContent":
        if self.is_image_book:
            for chapter in self.chapters:
                for page in chapter.paragraphs:
                    if not page.startswith("data:image/"):
                        raise ValueError("image books may only contain image pages")
        return self

    @property
    def is_sentinel(self) -> bool:
        """True when the document reports a failure rather than real content."""
        return self.status is not ExtractionStatus.OK

    @classmethod
    def sentinel(
        cls,
        title: str,
        message: str,
        status: ExtractionStatus,
        failure: FailureReason | None = None,
    ) -> "BookContent":
        """Build a one-chapter document carrying a human-readable message."""
        chapter = Chapter(
            title=title,
            paragraphs=[message],
            html_paragraphs=[f"<p>{html.escape(message, quote=False)}</p>"],
        )
        return cls(chapters=[chapter], status=status, failure=failure)


class BookMetadata(_PayloadModel):
    """Library-listing metadata."""

    title: str
    author: str = UNKNOWN_AUTHOR
    # data:image/...;base64,... or ""
    cover: str = ""
    cover_source: CoverSource = CoverSource.NONE
