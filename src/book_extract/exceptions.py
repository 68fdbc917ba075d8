"""Exceptions raised inside the extraction engine.

None of these escape the public ``extract_content`` / ``extract_metadata``
functions; they are turned into sentinel documents or fallback metadata.
"""

from book_extract.models.extraction import FailureReason


class BookExtractError(Exception):
    """Base class for extraction errors."""


class PackageResolutionError(BookExtractError):
    """The EPUB package document could not be located or read."""

    def __init__(self, reason: FailureReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message
