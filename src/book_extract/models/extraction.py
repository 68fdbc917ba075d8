"""Enumerations describing how content was extracted."""

from enum import Enum


class BookFormat(str, Enum):
    """Formats understood by the dispatcher."""

    EPUB = "epub"
    CBZ = "cbz"
    CBR = "cbr"
    PDF = "pdf"
    UNKNOWN = "unknown"

    @classmethod
    def from_tag(cls, tag: str) -> "BookFormat":
        """Parse a format tag such as "EPUB" or ".cbz" (case-insensitive)."""
        normalized = tag.strip().lower().lstrip(".")
        for member in cls:
            if member.value == normalized and member is not cls.UNKNOWN:
                return member
        return cls.UNKNOWN


class ExtractionStatus(str, Enum):
    """Outcome of a content extraction call."""

    OK = "ok"
    ERROR = "error"
    EMPTY = "empty"
    UNSUPPORTED = "unsupported"


class FailureReason(str, Enum):
    """Why a sentinel document was produced instead of real content."""

    MISSING_CONTAINER = "missing_container"
    PACKAGE_PATH_NOT_FOUND = "package_path_not_found"
    PACKAGE_UNREADABLE = "package_unreadable"
    EMPTY_SPINE = "empty_spine"
    UNREADABLE_ARCHIVE = "unreadable_archive"
    NO_CONTENT = "no_content"
    UNSUPPORTED_FORMAT = "unsupported_format"


class TitleSource(str, Enum):
    """Which title heuristic produced a chapter title."""

    TITLE_TAG = "title_tag"
    HEADING = "heading"
    POSITIONAL = "positional"
    FIXED = "fixed"  # sentinel and image-archive chapters


class SegmentationTier(str, Enum):
    """Which paragraph segmentation tier fired for a chapter."""

    PARAGRAPH = "paragraph"
    DIV = "div"
    TEXT_BLOCK = "text_block"


class CoverSource(str, Enum):
    """Which cover heuristic located the cover image."""

    META = "meta"
    PROPERTIES = "properties"
    FILENAME = "filename"
    FIRST_IMAGE = "first_image"  # comic archives
    NONE = "none"
