"""
Exceptions raised by webby.

Every error derives from `WebbyError` so callers can catch the whole family
with one clause. Errors coming from httpx, json or csv are chained with
``raise ... from`` so the original cause stays available.
"""

from typing import Optional


class WebbyError(Exception):
    """Base class for all webby errors."""


class RequestConstructionError(WebbyError):
    """The request could not be built (malformed or relative URI)."""

    def __init__(self, uri: str, reason: str):
        self.uri = uri
        self.reason = reason
        super().__init__(f"cannot build request for {uri!r}: {reason}")


class TransportError(WebbyError):
    """The request was sent but no response came back."""

    def __init__(self, uri: str, reason: str):
        self.uri = uri
        self.reason = reason
        super().__init__(f"request to {uri} failed: {reason}")


class UnexpectedStatusError(WebbyError):
    """The server answered with something other than 200 OK."""

    def __init__(self, uri: str, status_code: int, reason: str = ""):
        self.uri = uri
        self.status_code = status_code
        self.reason = reason
        status = f"{status_code} {reason}".strip()
        super().__init__(f"status {status}")


class DecodeError(WebbyError):
    """The response body is not valid JSON, or does not fit the target."""


class ParseError(WebbyError):
    """Input text could not be parsed."""


class CSVParseError(ParseError):
    """A CSV record is malformed."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"record on line {line}: {message}"
        super().__init__(message)


class UriParseError(ParseError):
    """A URI could not be parsed."""

    def __init__(self, uri: str, reason: str):
        self.uri = uri
        self.reason = reason
        super().__init__(f"cannot parse {uri!r}: {reason}")


class BodyCopyError(WebbyError, OSError):
    """Writing the response body to the sink failed."""
