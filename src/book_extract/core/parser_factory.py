"""Route a (path, format) pair to the right book parser."""

import logging
import zipfile
import zlib
from abc import ABC, abstractmethod
from pathlib import Path

from book_extract.models.book import BookContent
from book_extract.models.extraction import BookFormat, ExtractionStatus, FailureReason
from book_extract.models.settings import ExtractionSettings

log = logging.getLogger(__name__)

PDF_NOT_SUPPORTED = "PDF reading is not yet supported. Please use an external PDF reader."


class BookParser(ABC):
    """Abstract base class for book parsers."""

    @abstractmethod
    def parse(self) -> BookContent:
        """Parse the book and return its readable content."""
        pass


class StubParser(BookParser):
    """Returns a fixed one-chapter document for formats that cannot be read."""

    def __init__(self, title: str, message: str):
        self.title = title
        self.message = message

    def parse(self) -> BookContent:
        return BookContent.sentinel(
            self.title,
            self.message,
            ExtractionStatus.UNSUPPORTED,
            FailureReason.UNSUPPORTED_FORMAT,
        )


class ParserFactory:
    """Factory for creating appropriate parser based on format."""

    SUPPORTED_FORMATS = {
        ".epub": BookFormat.EPUB,
        ".cbz": BookFormat.CBZ,
        ".cbr": BookFormat.CBR,
        ".pdf": BookFormat.PDF,
    }

    @classmethod
    def create(
        cls,
        path: Path,
        format_tag: str | BookFormat,
        settings: ExtractionSettings | None = None,
    ) -> BookParser:
        """Create the parser for a format tag.

        Args:
            path: Path to the book file
            format_tag: Case-insensitive tag (EPUB, CBZ, CBR, PDF, ...)
            settings: Extraction settings passed to the parser

        Returns:
            BookParser instance; unknown formats get a stub parser
        """
        book_format = (
            format_tag if isinstance(format_tag, BookFormat) else BookFormat.from_tag(format_tag)
        )

        if book_format is BookFormat.EPUB:
            from book_extract.core.epub_parser import EpubParser

            return EpubParser(path, settings)
        elif book_format in (BookFormat.CBZ, BookFormat.CBR):
            # .cbr files are frequently renamed zips; real RAR archives fail
            # to open and come back as an "Error" document
            from book_extract.core.image_archive import ImageArchiveParser

            return ImageArchiveParser(path, settings)
        elif book_format is BookFormat.PDF:
            return StubParser("PDF Viewer", PDF_NOT_SUPPORTED)

        tag = format_tag.value if isinstance(format_tag, BookFormat) else format_tag
        return StubParser(
            "Unsupported Format",
            f'The format "{tag}" is not yet supported for reading.',
        )

    @classmethod
    def detect_format(cls, path: Path) -> BookFormat:
        """Detect file format from extension."""
        return cls.SUPPORTED_FORMATS.get(path.suffix.lower(), BookFormat.UNKNOWN)

    @classmethod
    def is_supported(cls, path: Path) -> bool:
        """Check if file format is supported."""
        return path.suffix.lower() in cls.SUPPORTED_FORMATS


def extract_content(
    path: Path | str,
    format_tag: str | BookFormat,
    settings: ExtractionSettings | None = None,
) -> BookContent:
    """Extract readable content from a book file.

    Never raises for bad input files: unreadable archives become an "Error"
    document with ``failure=unreadable_archive``.
    """
    path = Path(path)
    parser = ParserFactory.create(path, format_tag, settings)
    try:
        return parser.parse()
    # RuntimeError covers encrypted entries and unsupported compression methods
    except (zipfile.BadZipFile, zlib.error, RuntimeError, OSError, EOFError) as e:
        log.warning(f"Could not read archive {path.name}: {e}")
        return BookContent.sentinel(
            "Error",
            f"Could not read archive: {path.name}",
            ExtractionStatus.ERROR,
            FailureReason.UNREADABLE_ARCHIVE,
        )
