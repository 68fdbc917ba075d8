from __future__ import annotations

import random
from pathlib import Path

from book_extract import extract_content
from book_extract.core.archive import to_data_uri
from book_extract.core.image_archive import ImageArchiveParser
from book_extract.models import ExtractionSettings, ExtractionStatus, FailureReason

from conftest import PNG_BYTES, write_zip


def _comic(tmp_path: Path, count: int, name: str = "comic.cbz") -> Path:
    names = [f"pages/page{i:03d}.png" for i in range(1, count + 1)]
    random.Random(7).shuffle(names)
    return write_zip(tmp_path / name, {n: PNG_BYTES + n.encode() for n in names})


def test_forty_five_pages_make_three_chapters(tmp_path: Path) -> None:
    book = extract_content(_comic(tmp_path, 45), "CBZ")

    assert book.is_image_book
    assert book.status is ExtractionStatus.OK
    assert [chapter.title for chapter in book.chapters] == [
        "Pages 1–20",
        "Pages 21–40",
        "Pages 41–45",
    ]
    assert [len(chapter.paragraphs) for chapter in book.chapters] == [20, 20, 5]
    first = book.chapters[0]
    assert first.paragraphs == first.html_paragraphs
    assert first.paragraphs[0] == to_data_uri(PNG_BYTES + b"pages/page001.png", "page001.png")
    assert book.chapters[-1].paragraphs[-1] == to_data_uri(
        PNG_BYTES + b"pages/page045.png", "page045.png"
    )


def test_fifteen_pages_make_one_chapter(tmp_path: Path) -> None:
    book = extract_content(_comic(tmp_path, 15), "cbz")
    assert [chapter.title for chapter in book.chapters] == ["All Pages"]
    assert len(book.chapters[0].paragraphs) == 15


def test_pages_sorted_lexicographically(tmp_path: Path) -> None:
    path = write_zip(
        tmp_path / "comic.cbz",
        {"p2.jpg": b"two", "p10.jpg": b"ten", "p1.jpg": b"one"},
    )
    pages = extract_content(path, "CBZ").chapters[0].paragraphs
    assert pages == [
        to_data_uri(b"one", "p1.jpg"),
        to_data_uri(b"ten", "p10.jpg"),
        to_data_uri(b"two", "p2.jpg"),
    ]


def test_non_images_and_directories_ignored(tmp_path: Path) -> None:
    path = write_zip(
        tmp_path / "comic.cbz",
        {"ComicInfo.xml": "<ComicInfo/>", "scans/": "", "scans/01.webp": b"a", "scans/02.gif": b"b"},
    )
    pages = extract_content(path, "CBZ").chapters[0].paragraphs
    assert [page.split(";")[0] for page in pages] == ["data:image/webp", "data:image/gif"]


def test_no_images_gives_empty_chapter(tmp_path: Path) -> None:
    path = write_zip(tmp_path / "comic.cbz", {"readme.txt": "nothing here"})
    book = extract_content(path, "CBZ")

    assert not book.is_image_book
    assert [chapter.title for chapter in book.chapters] == ["Empty"]
    assert book.chapters[0].paragraphs == ["No images found in CBZ archive."]
    assert book.failure is FailureReason.NO_CONTENT


def test_cbr_that_is_a_zip_is_read(tmp_path: Path) -> None:
    book = extract_content(_comic(tmp_path, 3, name="comic.cbr"), "CBR")
    assert book.is_image_book
    assert len(book.chapters[0].paragraphs) == 3


def test_rar_cbr_fails_gracefully(tmp_path: Path) -> None:
    path = tmp_path / "comic.cbr"
    path.write_bytes(b"Rar!\x1a\x07\x00" + b"\x00" * 64)
    book = extract_content(path, "CBR")

    assert [chapter.title for chapter in book.chapters] == ["Error"]
    assert book.status is ExtractionStatus.ERROR
    assert book.failure is FailureReason.UNREADABLE_ARCHIVE


def test_pages_per_chapter_setting(tmp_path: Path) -> None:
    book = ImageArchiveParser(_comic(tmp_path, 7), ExtractionSettings(pages_per_chapter=3)).parse()
    assert [chapter.title for chapter in book.chapters] == ["Pages 1–3", "Pages 4–6", "Pages 7–7"]
