"""Title, author and cover extraction for library listings."""

import logging
from pathlib import Path

# Suppress warnings about malformed PDF object references
logging.getLogger("pypdf").setLevel(logging.ERROR)

import pypdf

from book_extract.core.archive import ArchiveReader, to_data_uri
from book_extract.core.package import PackageDocument, get_attr, resolve_package
from book_extract.core.parser_factory import ParserFactory
from book_extract.exceptions import PackageResolutionError
from book_extract.models.book import UNKNOWN_AUTHOR, BookMetadata
from book_extract.models.extraction import BookFormat, CoverSource
from book_extract.models.settings import ExtractionSettings

log = logging.getLogger(__name__)


def filename_metadata(path: Path) -> BookMetadata:
    """Fallback metadata: title from the file name, no cover."""
    return BookMetadata(title=path.stem or path.name, author=UNKNOWN_AUTHOR)


# =============================================================================
# EPUB
# =============================================================================


def _embed_item(
    archive: ArchiveReader, package: PackageDocument, item_id: str
) -> str | None:
    item = package.manifest.get(item_id)
    if item is None:
        log.debug(f"Cover id {item_id!r} not in manifest")
        return None
    data = archive.read(package.href_path(item.href))
    if data is None:
        log.debug(f"Cover {item.href} missing from archive")
        return None
    return to_data_uri(data, item.href)


def cover_from_meta(archive: ArchiveReader, package: PackageDocument) -> str | None:
    """EPUB 2 style: <meta name="cover" content="manifest-id"/>."""
    for meta in package.elements("meta"):
        if (get_attr(meta, "name") or "").strip().lower() != "cover":
            continue
        cover_id = (get_attr(meta, "content") or "").strip()
        if cover_id:
            cover = _embed_item(archive, package, cover_id)
            if cover:
                return cover
    return None


def cover_from_properties(
    archive: ArchiveReader, package: PackageDocument
) -> str | None:
    """EPUB 3 style: manifest item with properties="cover-image"."""
    for item in package.manifest.values():
        if any("cover-image" in prop for prop in item.properties):
            cover = _embed_item(archive, package, item.id)
            if cover:
                return cover
    return None


def cover_from_filename(archive: ArchiveReader) -> str | None:
    """Any image entry with "cover" in its name, in archive order."""
    for info in archive.image_entries():
        if "cover" in info.filename.lower():
            return archive.read_image(info)
    return None


def find_cover(
    archive: ArchiveReader, package: PackageDocument
) -> tuple[str, CoverSource]:
    """Run the cover heuristics in order; the first success wins."""
    layers = (
        (CoverSource.META, lambda: cover_from_meta(archive, package)),
        (CoverSource.PROPERTIES, lambda: cover_from_properties(archive, package)),
        (CoverSource.FILENAME, lambda: cover_from_filename(archive)),
    )
    for source, fn in layers:
        cover = fn()
        if cover:
            log.debug(f"Cover found via {source.value}")
            return cover, source
    return "", CoverSource.NONE


def extract_epub_metadata(
    path: Path, settings: ExtractionSettings | None = None
) -> BookMetadata:
    """Dublin Core title/creator plus cover from the package document."""
    fallback = filename_metadata(path)

    with ArchiveReader(path) as archive:
        try:
            package = resolve_package(archive, settings, require_spine=False)
        except PackageResolutionError as e:
            log.info(f"{path.name}: {e.message}; using file name")
            return fallback

        cover, cover_source = find_cover(archive, package)

    return BookMetadata(
        title=package.first_text("title") or fallback.title,
        author=package.first_text("creator") or UNKNOWN_AUTHOR,
        cover=cover,
        cover_source=cover_source,
    )


# =============================================================================
# Comic archives and PDF
# =============================================================================


def extract_cbz_metadata(path: Path) -> BookMetadata:
    """Comic archives carry no metadata; the first page is the cover."""
    metadata = filename_metadata(path)
    with ArchiveReader(path) as archive:
        entries = sorted(archive.image_entries(), key=lambda info: info.filename)
        if entries:
            metadata.cover = archive.read_image(entries[0])
            metadata.cover_source = CoverSource.FIRST_IMAGE
    return metadata


def extract_pdf_metadata(path: Path) -> BookMetadata:
    """Title and author from the PDF document information dictionary."""
    fallback = filename_metadata(path)
    info = pypdf.PdfReader(str(path)).metadata or {}

    title = str(info.get("/Title") or "").strip()
    author = str(info.get("/Author") or "").strip()

    return BookMetadata(
        title=title or fallback.title,
        author=author or UNKNOWN_AUTHOR,
    )


def extract_metadata(
    path: Path | str, settings: ExtractionSettings | None = None
) -> BookMetadata:
    """Metadata for a library listing; the format comes from the extension.

    Never raises for bad files: anything that goes wrong while reading
    yields the file-name fallback.
    """
    path = Path(path)
    book_format = ParserFactory.detect_format(path)

    try:
        if book_format is BookFormat.EPUB:
            return extract_epub_metadata(path, settings)
        elif book_format is BookFormat.CBZ:
            return extract_cbz_metadata(path)
        elif book_format is BookFormat.PDF:
            return extract_pdf_metadata(path)
    except Exception as e:
        log.warning(f"Could not read metadata from {path.name}: {e}")
        return filename_metadata(path)

    # CBR, MOBI and anything else
    return filename_metadata(path)
