"""EPUB parsing: spine-ordered chapters, paragraphs and typography."""

import logging
from pathlib import Path

from book_extract.core.archive import ArchiveReader
from book_extract.core.markup import ChapterExtraction, MarkupDocument
from book_extract.core.package import PackageDocument, resolve_package
from book_extract.core.parser_factory import BookParser
from book_extract.core.typography import extract_typography
from book_extract.exceptions import PackageResolutionError
from book_extract.models.book import BookContent, Chapter
from book_extract.models.extraction import ExtractionStatus, FailureReason, TitleSource
from book_extract.models.settings import ExtractionSettings

log = logging.getLogger(__name__)


class EpubParser(BookParser):
    """Parse EPUB files into readable chapters."""

    def __init__(self, epub_path: Path, settings: ExtractionSettings | None = None):
        self.path = epub_path
        self.settings = settings or ExtractionSettings()

    def parse(self) -> BookContent:
        """Parse the EPUB and return its content.

        Structural problems (missing container.xml, OPF or spine) come back
        as a one-chapter "Error" document rather than an exception.
        """
        with ArchiveReader(self.path) as archive:
            try:
                package = resolve_package(archive, self.settings)
            except PackageResolutionError as e:
                log.warning(f"{self.path.name}: {e.message}")
                return BookContent.sentinel(
                    "Error", e.message, ExtractionStatus.ERROR, e.reason
                )

            chapters = self._get_chapters(archive, package)
            if not chapters:
                return BookContent.sentinel(
                    "Empty",
                    "This EPUB has no readable text content.",
                    ExtractionStatus.EMPTY,
                    FailureReason.NO_CONTENT,
                )

            typography = extract_typography(archive, package, self.settings)

        return BookContent(
            chapters=chapters,
            font_family=typography.font_family,
            font_size_px=typography.font_size_px,
            css=typography.css,
        )

    def _get_chapters(
        self, archive: ArchiveReader, package: PackageDocument
    ) -> list[Chapter]:
        """Extract spine documents in reading order, dropping empty ones."""
        chapters: list[Chapter] = []

        for item_id in package.spine:
            extraction = self._extract_spine_item(archive, package, item_id)
            # Cover pages and image-only documents have no paragraphs
            if extraction is None or extraction.is_empty:
                continue

            if extraction.title:
                title = extraction.title
                title_source = extraction.title_source
            else:
                # Numbered over emitted chapters only
                title = f"Chapter {len(chapters) + 1}"
                title_source = TitleSource.POSITIONAL

            chapters.append(
                Chapter(
                    title=title,
                    paragraphs=extraction.paragraphs,
                    html_paragraphs=extraction.html_paragraphs,
                    title_source=title_source,
                    segmentation=extraction.segmentation,
                )
            )

        log.debug(
            f"{self.path.name}: {len(chapters)} of {len(package.spine)} spine items kept"
        )
        return chapters

    def _extract_spine_item(
        self, archive: ArchiveReader, package: PackageDocument, item_id: str
    ) -> ChapterExtraction | None:
        entry_path = package.item_path(item_id)
        if entry_path is None:
            log.debug(f"Spine id {item_id!r} has no manifest item")
            return None

        content = archive.read(entry_path)
        if content is None:
            log.debug(f"Spine item {entry_path} missing from archive")
            return None

        return MarkupDocument(content).extract_chapter(self.settings.max_title_length)
