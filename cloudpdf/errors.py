"""Exceptions raised by the page tools service."""

from typing import Optional


class CloudPdfError(Exception):
    """Base error for the service."""


class PageRangeError(CloudPdfError, ValueError):
    """Raised when a page range expression cannot be resolved."""

    code = "INVALID_PAGE_RANGE"

    def __init__(self, message: str, token: Optional[str] = None):
        super().__init__(message)
        self.token = token


class EmptyPageRange(PageRangeError):
    """Raised when the expression contains no tokens at all."""

    code = "EMPTY"

    def __init__(self):
        super().__init__("Please specify the page range to extract.")


class InvalidRange(PageRangeError):
    """Raised for a malformed, reversed or out-of-bounds ``start-end`` token."""

    code = "INVALID_RANGE"

    def __init__(self, token: str, total_pages: int):
        super().__init__(
            f"Invalid range: {token}. Page numbers must be between 1 and {total_pages}.",
            token=token,
        )


class InvalidPage(PageRangeError):
    """Raised for a malformed or out-of-bounds single page token."""

    code = "INVALID_PAGE"

    def __init__(self, token: str, total_pages: int):
        super().__init__(
            f"Invalid page number: {token}. Must be between 1 and {total_pages}.",
            token=token,
        )


class NoPagesSelected(PageRangeError):
    """Raised when every token resolved but the selection is empty."""

    code = "NO_PAGES_SELECTED"

    def __init__(self):
        super().__init__("No valid pages selected.")


class InvalidGeometry(CloudPdfError, ValueError):
    """Raised when a rendered page container has non-positive dimensions."""

    code = "INVALID_GEOMETRY"


class InvalidColor(CloudPdfError, ValueError):
    """Raised when a text colour is not a ``#RRGGBB`` hex string."""

    code = "INVALID_COLOR"


class DocumentError(CloudPdfError, ValueError):
    """Raised when PDF bytes cannot be opened or a page does not exist."""

    code = "INVALID_DOCUMENT"


class StorageError(CloudPdfError, RuntimeError):
    """Raised when a blob cannot be stored or retrieved."""


class RecordNotFound(CloudPdfError, LookupError):
    """Raised when a file record does not exist for the user."""


class AuthenticationError(CloudPdfError):
    """Raised for bad credentials or an unknown session token."""
