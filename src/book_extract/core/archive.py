"""Read-only access to entries inside zip-based book archives."""

import base64
import logging
import posixpath
import zipfile
from pathlib import Path, PurePosixPath
from urllib.parse import quote, unquote

log = logging.getLogger(__name__)

IMAGE_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}
DEFAULT_IMAGE_MIME = "image/jpeg"


def is_image_file(name: str) -> bool:
    """Check if an entry name has a recognized image extension."""
    return PurePosixPath(name).suffix.lower() in IMAGE_MIME_TYPES


def to_data_uri(data: bytes, name: str) -> str:
    """Embed image bytes as a self-describing data URI."""
    mime = IMAGE_MIME_TYPES.get(PurePosixPath(name).suffix.lower(), DEFAULT_IMAGE_MIME)
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def resolve_href(base_dir: str, href: str) -> str:
    """Join a manifest href onto the package document's directory.

    Fragments are dropped and ``..`` segments collapsed; ``"."`` or ``""``
    as base_dir means the archive root, as does a leading ``/`` on the href.
    """
    href = href.split("#", 1)[0]
    if href.startswith("/"):
        base_dir = ""
    joined = href if base_dir in ("", ".") else f"{base_dir}/{href}"
    normalized = posixpath.normpath(joined)
    return normalized.lstrip("/")


class ArchiveReader:
    """Whole-entry lookups over a zip archive opened read-only.

    Each reader owns its own handle; use as a context manager so the handle
    is closed once the extraction call finishes.

    Raises:
        zipfile.BadZipFile: If the file is not a zip archive
        OSError: If the file cannot be opened
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._zip = zipfile.ZipFile(self.path)

    def __enter__(self) -> "ArchiveReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._zip.close()

    def entries(self) -> list[zipfile.ZipInfo]:
        """All file entries (no directories) in archive enumeration order."""
        return [info for info in self._zip.infolist() if not info.is_dir()]

    def image_entries(self) -> list[zipfile.ZipInfo]:
        """File entries with a recognized image extension, in archive order."""
        return [info for info in self.entries() if is_image_file(info.filename)]

    def read(self, name: str) -> bytes | None:
        """Return the bytes of an entry, or None if it does not exist.

        Authors are inconsistent about percent-encoding manifest hrefs, so the
        decoded and encoded spellings are tried after the literal name.
        """
        for candidate in dict.fromkeys((name, unquote(name), quote(name, safe="/"))):
            try:
                info = self._zip.getinfo(candidate)
            except KeyError:
                continue
            if info.is_dir():
                continue
            return self._zip.read(info)
        log.debug(f"Entry not found in {self.path.name}: {name}")
        return None

    def read_text(self, name: str) -> str | None:
        """Read an entry decoded as UTF-8, BOM dropped (undecodable bytes replaced)."""
        data = self.read(name)
        if data is None:
            return None
        return data.decode("utf-8-sig", errors="replace")

    def read_image(self, info: zipfile.ZipInfo) -> str:
        """Read an image entry and embed it as a data URI."""
        return to_data_uri(self._zip.read(info), info.filename)
