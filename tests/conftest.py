"""Fixtures that build small EPUB and comic archives on disk."""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Callable

import pytest

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{opf_path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

# Minimal image payloads; only the bytes matter, not validity
PNG_BYTES = b"\x89PNG\r\n\x1a\n fake png"
JPEG_BYTES = b"\xff\xd8\xff\xe0 fake jpeg"


def container_xml(opf_path: str = "OEBPS/content.opf") -> str:
    return CONTAINER_XML.format(opf_path=opf_path)


def opf_xml(
    manifest: list[tuple[str, str] | tuple[str, str, str]],
    spine: list[str],
    metadata: str = "",
) -> str:
    """Package document from (id, href[, properties]) items and spine ids."""
    items = []
    for entry in manifest:
        item_id, href = entry[0], entry[1]
        props = f' properties="{entry[2]}"' if len(entry) > 2 else ""
        items.append(f'    <item id="{item_id}" href="{href}" media-type="application/xhtml+xml"{props}/>')
    itemrefs = "\n".join(f'    <itemref idref="{idref}"/>' for idref in spine)
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="uid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
{metadata}
  </metadata>
  <manifest>
{chr(10).join(items)}
  </manifest>
  <spine>
{itemrefs}
  </spine>
</package>
"""


def xhtml(body: str, title: str | None = None) -> str:
    head = f"<title>{title}</title>" if title is not None else ""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
<head>{head}</head>
<body>{body}</body>
</html>
"""


def write_zip(path: Path, files: dict[str, str | bytes]) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    return path


@pytest.fixture()
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    """Write a zip with the given entries and return its path."""

    def _make(files: dict[str, str | bytes], name: str = "book.epub") -> Path:
        return write_zip(tmp_path / name, files)

    return _make


@pytest.fixture()
def make_epub(make_archive: Callable[..., Path]) -> Callable[..., Path]:
    """Build an EPUB from chapter documents in spine order.

    ``chapters`` maps manifest id -> (href, xhtml). Files land under OEBPS/.
    """

    def _make(
        chapters: dict[str, tuple[str, str]],
        spine: list[str] | None = None,
        metadata: str = "",
        extra_manifest: list[tuple[str, str] | tuple[str, str, str]] | None = None,
        extra_files: dict[str, str | bytes] | None = None,
        name: str = "book.epub",
    ) -> Path:
        manifest = [(item_id, href) for item_id, (href, _) in chapters.items()]
        manifest += extra_manifest or []
        files: dict[str, str | bytes] = {
            "mimetype": "application/epub+zip",
            "META-INF/container.xml": container_xml(),
            "OEBPS/content.opf": opf_xml(
                manifest, spine if spine is not None else list(chapters), metadata
            ),
        }
        for href, document in chapters.values():
            files[f"OEBPS/{href}"] = document
        files.update(extra_files or {})
        return make_archive(files, name)

    return _make
