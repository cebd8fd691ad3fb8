"""
Webby - a thin HTTP client for fetching JSON, CSV and raw bodies.
"""

from webby.errors import (
    BodyCopyError,
    CSVParseError,
    DecodeError,
    ParseError,
    RequestConstructionError,
    TransportError,
    UnexpectedStatusError,
    UriParseError,
    WebbyError,
)
from webby.http import DEFAULT_HEADERS, Api, CSVRows, read_csv
from webby.urls import UrlBuilder, last_segment

__all__ = [
    "Api",
    "CSVRows",
    "DEFAULT_HEADERS",
    "UrlBuilder",
    "last_segment",
    "read_csv",
    "BodyCopyError",
    "CSVParseError",
    "DecodeError",
    "ParseError",
    "RequestConstructionError",
    "TransportError",
    "UnexpectedStatusError",
    "UriParseError",
    "WebbyError",
]
