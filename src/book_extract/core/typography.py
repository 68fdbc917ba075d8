"""Mine a book's stylesheets for its native font family and size."""

import logging
import re
from dataclasses import dataclass

from book_extract.core.archive import ArchiveReader
from book_extract.core.package import PackageDocument
from book_extract.models.settings import ExtractionSettings

log = logging.getLogger(__name__)

GENERIC_FAMILIES = {
    "serif",
    "sans-serif",
    "monospace",
    "cursive",
    "fantasy",
    "inherit",
    "initial",
}

# A body or p rule whose block contains the declaration. The lookbehind keeps
# selectors such as "step {" or ".p {" from matching.
_FAMILY_RE = re.compile(
    r"(?<![\w.#-])(?:body|p)\s*\{[^}]*?font-family\s*:\s*([^;}]+)", re.IGNORECASE
)
_SIZE_RE = re.compile(
    r"(?<![\w.#-])(?:body|p)\s*\{[^}]*?font-size\s*:\s*([^;}]+)", re.IGNORECASE
)
_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_LENGTH_RE = re.compile(r"^([\d.]+)\s*(px|pt|r?em)$", re.IGNORECASE)


@dataclass
class Typography:
    """Font hints and the aggregate stylesheet text."""

    font_family: str | None = None
    font_size_px: float | None = None
    css: str | None = None


def parse_font_family(css: str) -> str | None:
    """First non-generic family declared on body or p, quotes stripped."""
    match = _FAMILY_RE.search(_COMMENT_RE.sub("", css))
    if not match:
        return None
    first = match.group(1).split(",")[0].strip().strip("\"'").strip()
    first = first.replace("!important", "").strip()
    if not first or first.lower() in GENERIC_FAMILIES:
        return None
    return first


def to_pixels(value: str, settings: ExtractionSettings | None = None) -> float | None:
    """Convert a CSS length in px, pt, em or rem to pixels.

    Returns None for other units (percentages, keywords).
    """
    settings = settings or ExtractionSettings()
    match = _LENGTH_RE.match(value.replace("!important", "").strip())
    if not match:
        return None
    try:
        number = float(match.group(1))
    except ValueError:
        return None
    unit = match.group(2).lower()
    if unit == "px":
        return number
    if unit == "pt":
        return round(number * settings.pt_to_px)
    return round(number * settings.base_font_px)


def parse_font_size(css: str, settings: ExtractionSettings | None = None) -> float | None:
    """Font size declared on body or p, normalized to pixels."""
    match = _SIZE_RE.search(_COMMENT_RE.sub("", css))
    if not match:
        return None
    return to_pixels(match.group(1), settings)


def extract_typography(
    archive: ArchiveReader,
    package: PackageDocument,
    settings: ExtractionSettings | None = None,
) -> Typography:
    """Scan manifest stylesheets; the first sheet to yield each value wins."""
    settings = settings or ExtractionSettings()
    result = Typography()
    chunks: list[str] = []

    for item in package.stylesheets():
        css = archive.read_text(package.href_path(item.href))
        if css is None:
            log.debug(f"Skipping unresolvable stylesheet: {item.href}")
            continue
        chunks.append(css)

        if result.font_family is None:
            result.font_family = parse_font_family(css)
        if result.font_size_px is None:
            result.font_size_px = parse_font_size(css, settings)

    if chunks:
        result.css = "\n".join(chunks)
    return result
