"""
Unit tests for webby.urls module.

Tests cover:
- Good path: building URLs, extracting the last path segment
- Critical path: empty parameter values, last write wins, trailing slashes
- Bad path: unparseable URLs
"""

import pytest

from webby.errors import ParseError, UriParseError
from webby.urls import UrlBuilder, last_segment


class TestLastSegment:
    """Tests for last_segment function."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://test.com/path1/path2/filename.zip?a=b&z=3", "filename.zip"),
            ("https://test.com/path1/path2/filename.zip", "filename.zip"),
            ("https://test.com/filename.zip?a=b&z=3", "filename.zip"),
            ("https://test.com/filename.zip", "filename.zip"),
            ("https://test.com", ""),
        ],
    )
    def test_returns_last_segment(self, url, expected):
        """Good path: segment after the final slash, query excluded."""
        assert last_segment(url) == expected

    @pytest.mark.unit
    def test_trailing_slash_gives_empty_segment(self):
        """Critical path: a trailing slash leaves nothing after it."""
        assert last_segment("https://test.com/path1/") == ""

    @pytest.mark.unit
    def test_fragment_excluded(self):
        """Good path: fragments are not part of the path."""
        assert last_segment("https://test.com/docs/page.html#intro") == "page.html"

    @pytest.mark.unit
    def test_relative_reference(self):
        """Good path: relative references have a path too."""
        assert last_segment("path1/report.csv") == "report.csv"

    @pytest.mark.unit
    def test_percent_encoding_decoded(self):
        """Good path: the path is returned decoded."""
        assert last_segment("https://test.com/files/my%20report.pdf") == "my report.pdf"

    @pytest.mark.unit
    def test_invalid_url(self):
        """Bad path: unparseable URLs raise UriParseError."""
        with pytest.raises(UriParseError) as exc_info:
            last_segment("https://test.com:port/file.zip")

        assert isinstance(exc_info.value, ParseError)
        assert exc_info.value.uri == "https://test.com:port/file.zip"


class TestUrlBuilder:
    """Tests for UrlBuilder class."""

    @pytest.mark.unit
    def test_base_and_path(self):
        """Good path: base and path are concatenated."""
        url = (
            UrlBuilder()
            .with_base("https://api.test.com")
            .with_path("/v1/items")
            .build()
        )
        assert url == "https://api.test.com/v1/items"

    @pytest.mark.unit
    def test_setters_return_builder(self):
        """Good path: every setter supports chaining."""
        builder = UrlBuilder()
        assert builder.with_base("https://test.com") is builder
        assert builder.with_path("/x") is builder
        assert builder.with_param("a", "1") is builder
        assert builder.with_param("b", "") is builder

    @pytest.mark.unit
    def test_params_appended(self):
        """Good path: parameters follow a question mark, joined by ampersands."""
        url = (
            UrlBuilder()
            .with_base("https://test.com")
            .with_path("/search")
            .with_param("q", "books")
            .with_param("page", "2")
            .build()
        )
        assert url == "https://test.com/search?q=books&page=2"

    @pytest.mark.unit
    def test_empty_value_omitted(self):
        """Critical path: empty values never reach the query string."""
        url = UrlBuilder().with_base("https://test.com").with_param("a", "").build()
        assert url == "https://test.com"
        assert "a=" not in url

    @pytest.mark.unit
    def test_empty_value_does_not_clear_existing(self):
        """Critical path: an empty write leaves the earlier value in place."""
        url = (
            UrlBuilder()
            .with_base("https://test.com")
            .with_param("a", "1")
            .with_param("a", "")
            .build()
        )
        assert url == "https://test.com?a=1"

    @pytest.mark.unit
    def test_last_write_wins(self):
        """Critical path: repeated keys keep only the latest value."""
        url = (
            UrlBuilder()
            .with_base("https://test.com")
            .with_param("a", "1")
            .with_param("a", "2")
            .build()
        )
        assert "a=2" in url
        assert "a=1" not in url
        assert url.count("a=") == 1

    @pytest.mark.unit
    def test_no_encoding_applied(self):
        """Good path: keys and values are written verbatim."""
        url = UrlBuilder("https://test.com").with_param("q", "a%20b").build()
        assert url == "https://test.com?q=a%20b"

    @pytest.mark.unit
    def test_str_builds(self):
        """Good path: str() returns the built URL."""
        builder = UrlBuilder("https://test.com", "/x").with_param("k", "v")
        assert str(builder) == "https://test.com/x?k=v"
