"""Data models."""

from book_extract.models.book import (
    UNKNOWN_AUTHOR,
    BookContent,
    BookMetadata,
    Chapter,
)
from book_extract.models.extraction import (
    BookFormat,
    CoverSource,
    ExtractionStatus,
    FailureReason,
    SegmentationTier,
    TitleSource,
)
from book_extract.models.settings import ExtractionSettings

__all__ = [
    # Book models
    "Chapter",
    "BookContent",
    "BookMetadata",
    "UNKNOWN_AUTHOR",
    # Extraction enums
    "BookFormat",
    "ExtractionStatus",
    "FailureReason",
    "TitleSource",
    "SegmentationTier",
    "CoverSource",
    # Settings
    "ExtractionSettings",
]
