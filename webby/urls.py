"""
URL helpers: a chained query-string builder and a last-path-segment extractor.
"""

import httpx

from webby.errors import UriParseError


class UrlBuilder:
    """
    Accumulates a base, a path and query parameters into a URL string.

    Setters return the builder so calls can be chained:

        UrlBuilder().with_base("https://api.example.com").with_path("/v1/items")
            .with_param("page", "2").build()

    Keys and values are written verbatim; callers must percent-encode them
    beforehand if needed.
    """

    def __init__(self, base: str = "", path: str = ""):
        self.base = base
        self.path = path
        self.params: dict[str, str] = {}

    def with_base(self, base: str) -> "UrlBuilder":
        self.base = base
        return self

    def with_path(self, path: str) -> "UrlBuilder":
        self.path = path
        return self

    def with_param(self, key: str, value: str) -> "UrlBuilder":
        """Set a query parameter. Empty values are ignored; later writes win."""
        if value == "":
            return self
        self.params[key] = value
        return self

    def build(self) -> str:
        url = self.base + self.path
        if self.params:
            url += "?" + "&".join(f"{k}={v}" for k, v in self.params.items())
        return url

    def __str__(self) -> str:
        return self.build()


def last_segment(uri: str) -> str:
    """
    Get the last path segment of a URL.

    For ex. with "https://some.domain/path1/path2/path3?a=b", "path3" is
    returned. A URL without a path, or with a trailing slash, gives "".

    Raises:
        UriParseError: If the URL cannot be parsed.
    """
    try:
        path = httpx.URL(uri).path
    except httpx.InvalidURL as e:
        raise UriParseError(uri, str(e)) from e

    if not path:
        return ""

    return path.split("/")[-1]
