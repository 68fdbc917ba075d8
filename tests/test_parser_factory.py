from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from book_extract import extract_content
from book_extract.core.epub_parser import EpubParser
from book_extract.core.image_archive import ImageArchiveParser
from book_extract.core.parser_factory import ParserFactory, StubParser
from book_extract.models import BookContent, BookFormat, Chapter, ExtractionStatus, FailureReason

from conftest import xhtml


@pytest.mark.parametrize(
    "tag, expected",
    [
        ("EPUB", BookFormat.EPUB),
        ("epub", BookFormat.EPUB),
        (".Cbz", BookFormat.CBZ),
        ("cbr", BookFormat.CBR),
        ("Pdf", BookFormat.PDF),
        ("mobi", BookFormat.UNKNOWN),
        ("unknown", BookFormat.UNKNOWN),
        ("", BookFormat.UNKNOWN),
    ],
)
def test_format_from_tag(tag: str, expected: BookFormat) -> None:
    assert BookFormat.from_tag(tag) is expected


def test_factory_routes_by_tag(tmp_path: Path) -> None:
    path = tmp_path / "x"
    assert isinstance(ParserFactory.create(path, "EPUB"), EpubParser)
    assert isinstance(ParserFactory.create(path, "cbz"), ImageArchiveParser)
    assert isinstance(ParserFactory.create(path, "CBR"), ImageArchiveParser)
    assert isinstance(ParserFactory.create(path, BookFormat.PDF), StubParser)
    assert isinstance(ParserFactory.create(path, "azw3"), StubParser)


def test_detect_format_from_extension() -> None:
    assert ParserFactory.detect_format(Path("a/Book.EPUB")) is BookFormat.EPUB
    assert ParserFactory.detect_format(Path("comic.cbr")) is BookFormat.CBR
    assert ParserFactory.detect_format(Path("notes.txt")) is BookFormat.UNKNOWN
    assert ParserFactory.is_supported(Path("x.pdf"))
    assert not ParserFactory.is_supported(Path("x.mobi"))


def test_pdf_is_a_stub_without_reading_the_file(tmp_path: Path) -> None:
    book = extract_content(tmp_path / "does-not-exist.pdf", "PDF")

    assert [chapter.title for chapter in book.chapters] == ["PDF Viewer"]
    assert book.chapters[0].paragraphs == [
        "PDF reading is not yet supported. Please use an external PDF reader."
    ]
    assert book.status is ExtractionStatus.UNSUPPORTED
    assert book.failure is FailureReason.UNSUPPORTED_FORMAT


def test_unknown_format_stub_names_the_tag(tmp_path: Path) -> None:
    book = extract_content(tmp_path / "book.mobi", "MOBI")

    assert [chapter.title for chapter in book.chapters] == ["Unsupported Format"]
    assert book.chapters[0].paragraphs == ['The format "MOBI" is not yet supported for reading.']
    assert book.chapters[0].html_paragraphs == [
        '<p>The format "MOBI" is not yet supported for reading.</p>'
    ]
    assert book.status is ExtractionStatus.UNSUPPORTED


def test_content_payload_uses_camel_case(make_epub) -> None:
    path = make_epub(
        {"ch": ("ch.xhtml", xhtml("<p>Hi</p>", title="Hello"))},
        extra_manifest=[("css", "style.css")],
        extra_files={"OEBPS/style.css": "body { font-size: 18px }"},
    )
    payload = json.loads(extract_content(path, "EPUB").to_json())

    assert payload["isImageBook"] is False
    assert payload["fontSizePx"] == 18
    assert payload["css"] == "body { font-size: 18px }"
    assert "fontFamily" not in payload
    assert "failure" not in payload
    assert payload["status"] == "ok"
    assert payload["chapters"] == [
        {
            "title": "Hello",
            "paragraphs": ["Hi"],
            "htmlParagraphs": ["<p>Hi</p>"],
            "titleSource": "title_tag",
            "segmentation": "paragraph",
        }
    ]


def test_chapter_rejects_unpaired_paragraphs() -> None:
    with pytest.raises(ValidationError):
        Chapter(title="Bad", paragraphs=["a", "b"], html_paragraphs=["<p>a</p>"])
    with pytest.raises(ValidationError):
        Chapter(title="", paragraphs=[], html_paragraphs=[])


def test_image_book_rejects_prose() -> None:
    with pytest.raises(ValidationError):
        BookContent(
            chapters=[Chapter(title="Pages", paragraphs=["text"], html_paragraphs=["text"])],
            is_image_book=True,
        )
