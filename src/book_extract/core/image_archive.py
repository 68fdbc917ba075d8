"""Comic archive (CBZ/CBR) page extraction."""

import logging
from pathlib import Path

from book_extract.core.archive import ArchiveReader
from book_extract.core.parser_factory import BookParser
from book_extract.models.book import BookContent, Chapter
from book_extract.models.extraction import ExtractionStatus, FailureReason
from book_extract.models.settings import ExtractionSettings

log = logging.getLogger(__name__)


class ImageArchiveParser(BookParser):
    """Turn a zip of page images into chapters of embedded pages.

    Pages are ordered by plain string comparison of entry names, so
    "page10.jpg" sorts before "page2.jpg". Archives are expected to use
    zero-padded names.
    """

    def __init__(self, path: Path, settings: ExtractionSettings | None = None):
        self.path = path
        self.settings = settings or ExtractionSettings()

    def parse(self) -> BookContent:
        """Read every image page and group them into fixed-size chapters."""
        with ArchiveReader(self.path) as archive:
            entries = sorted(archive.image_entries(), key=lambda info: info.filename)

            if not entries:
                log.info(f"No images found in {self.path.name}")
                return BookContent.sentinel(
                    "Empty",
                    "No images found in CBZ archive.",
                    ExtractionStatus.EMPTY,
                    FailureReason.NO_CONTENT,
                )

            per_chapter = self.settings.pages_per_chapter
            total = len(entries)
            chapters: list[Chapter] = []

            for start in range(0, total, per_chapter):
                pages = [archive.read_image(info) for info in entries[start : start + per_chapter]]
                if total <= per_chapter:
                    title = "All Pages"
                else:
                    title = f"Pages {start + 1}–{min(start + per_chapter, total)}"
                chapters.append(
                    Chapter(title=title, paragraphs=pages, html_paragraphs=list(pages))
                )

        log.debug(f"Extracted {total} pages into {len(chapters)} chapters")
        return BookContent(chapters=chapters, is_image_book=True)
