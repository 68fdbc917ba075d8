"""Content extraction for archive-based book formats (EPUB, CBZ/CBR).

Two entry points, both synchronous and safe to call concurrently for
independent files:

    • extract_content(path, format_tag) -> BookContent
    • extract_metadata(path) -> BookMetadata

Bad input files never raise; they come back as sentinel documents or
file-name metadata.
"""

from book_extract.core.metadata import extract_metadata
from book_extract.core.parser_factory import extract_content
from book_extract.models import (
    BookContent,
    BookFormat,
    BookMetadata,
    Chapter,
    ExtractionSettings,
    ExtractionStatus,
    FailureReason,
)

__all__ = [
    "extract_content",
    "extract_metadata",
    "BookContent",
    "BookMetadata",
    "Chapter",
    "BookFormat",
    "ExtractionSettings",
    "ExtractionStatus",
    "FailureReason",
]
