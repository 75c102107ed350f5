"""
Exception hierarchy for the splitview pipeline.

Network and render failures end up in the viewer's error banner; format and
parse problems degrade to a download link or an explicit "no data" message.
"""

from typing import Optional


class ViewerError(Exception):
    """
    Base exception for fetch and render failures.

    Attributes:
        message: Error message shown to the user
        url: URL or blob reference being processed (optional)
        original_error: Original exception that caused this error (optional)
    """

    def __init__(self, message: str, url: Optional[str] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.url = url
        self.original_error = original_error


class NetworkError(ViewerError):
    """Raised when the proxy or origin is unreachable or answers non-2xx."""

    def __init__(self, message: str, url: Optional[str] = None,
                 original_error: Optional[Exception] = None, status: Optional[int] = None):
        super().__init__(message, url, original_error)
        self.status = status


class UnsupportedFormatError(ViewerError):
    """
    Raised when no renderer can display the content inline.

    The viewer turns this into a download link rather than an error banner.
    """

    def __init__(self, message: str, url: Optional[str] = None,
                 original_error: Optional[Exception] = None, content_type: Optional[str] = None):
        super().__init__(message, url, original_error)
        self.content_type = content_type


class ParseError(ViewerError):
    """Raised for empty or malformed spreadsheets, CSV files and documents."""


class RenderTimeoutError(ViewerError):
    """Raised when the headless browser stage exceeds its timeout budget."""


class InvalidURLError(ViewerError):
    """Raised when the proxy receives a missing, malformed or non-HTTP(S) URL."""
