"""
Shared HTTP client for fetching and decoding web resources.

This module provides the `Api` client handle, the fixed default headers sent
with every request, and the JSON, CSV and raw-body decoders built on top of a
single GET executor.
"""

import csv
import json
from collections.abc import (
    Callable,
    Iterable,
    Iterator,
    MutableMapping,
    MutableSequence,
)
from contextlib import contextmanager
from http.cookiejar import CookieJar, DefaultCookiePolicy
from types import MappingProxyType
from typing import Any, BinaryIO, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from webby.debug import (
    log_api_request,
    log_api_response,
    log_decode,
    log_response_body,
    log_warning,
)
from webby.errors import (
    BodyCopyError,
    CSVParseError,
    DecodeError,
    RequestConstructionError,
    TransportError,
    UnexpectedStatusError,
)

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Ubuntu Chromium/58.0.3029.110 Chrome/58.0.3029.110 Safari/537.36"
)
ACCEPT_LANGUAGE = "en-US,en;q=0.8"
CACHE_CONTROL = "max-age=0"

JSON_CONTENT_TYPE = "application/json"
CSV_CONTENT_TYPE = "text/csv"

# Headers sent with every request
DEFAULT_HEADERS = MappingProxyType(
    {
        "User-Agent": USER_AGENT,
        "Accept-Language": ACCEPT_LANGUAGE,
        "Cache-Control": CACHE_CONTROL,
    }
)

RowCallback = Callable[[list[str]], Any]
ProgressCallback = Callable[[int, Optional[int]], Any]


class CSVRows(BaseModel):
    """Collects CSV records in the order they are decoded."""

    rows: list[list[str]] = Field(default_factory=list)

    def add(self, row: list[str]) -> None:
        """Row callback for `Api.get_csv`."""
        self.rows.append(row)


def new_client(**kwargs) -> httpx.Client:
    """
    Create an httpx.Client that does not keep cookies.

    Args:
        **kwargs: Additional arguments passed to httpx.Client()
            (timeout, follow_redirects, proxy, ...).
    """
    # An empty allow-list refuses every domain
    jar = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
    return httpx.Client(cookies=jar, **kwargs)


class Api:
    """
    Client handle for GET requests with JSON, CSV and raw-body decoding.

    The underlying `httpx.Client` is created on first use from
    `client_options` unless a client is passed in. Cookies are not kept
    unless `enable_cookies` is called.

    Example:
        with Api(timeout=10.0) as api:
            rows = CSVRows()
            api.get_csv("https://example.com/data.csv", rows.add)
    """

    def __init__(self, client: Optional[httpx.Client] = None, **client_options):
        self._client = client
        self._client_options = client_options
        self._owns_client = client is None

    @property
    def client(self) -> httpx.Client:
        """The underlying client, created on first access if needed."""
        if self._client is None:
            self._client = new_client(**self._client_options)
        return self._client

    def enable_cookies(self) -> None:
        """Keep cookies set by responses and replay them on later requests."""
        self.client.cookies = httpx.Cookies()

    def close(self) -> None:
        """Close the underlying client if this handle created it."""
        if self._client is not None and self._owns_client:
            self._client.close()

    def __enter__(self) -> "Api":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ----------------------------------------------------------------
    # Request executor
    # ----------------------------------------------------------------

    def fetch(self, uri: str, accept: Optional[str] = None) -> httpx.Response:
        """
        Send a GET request with the default headers.

        The response is returned whatever its status code, with the body
        still unread. The caller is responsible for closing it.

        Args:
            uri: Absolute URL to request.
            accept: Value for the Accept header, or None to send none.

        Returns:
            The streaming httpx.Response.

        Raises:
            RequestConstructionError: If the URI is malformed or not absolute.
            TransportError: If the request could not be completed.
        """
        headers = dict(DEFAULT_HEADERS)
        if accept:
            headers["Accept"] = accept

        try:
            request = self.client.build_request("GET", uri, headers=headers)
        except httpx.InvalidURL as e:
            raise RequestConstructionError(uri, str(e)) from e

        if not request.url.is_absolute_url:
            raise RequestConstructionError(uri, "URL must be absolute")

        if not accept:
            # httpx adds "Accept: */*" on its own
            request.headers.pop("Accept", None)

        log_api_request("GET", str(request.url), accept)
        try:
            response = self.client.send(request, stream=True)
        except httpx.UnsupportedProtocol as e:
            raise RequestConstructionError(uri, str(e)) from e
        except httpx.RequestError as e:
            log_warning(f"Request failed: {uri}", error=type(e).__name__)
            raise TransportError(uri, str(e) or type(e).__name__) from e

        log_api_response(response.status_code)
        return response

    @contextmanager
    def _open(self, uri: str, accept: Optional[str]) -> Iterator[httpx.Response]:
        """Fetch `uri`, require 200 OK and close the response afterwards."""
        response = self.fetch(uri, accept)
        try:
            if response.status_code != httpx.codes.OK:
                log_warning(
                    f"Unexpected status: {uri}", status=response.status_code
                )
                raise UnexpectedStatusError(
                    uri, response.status_code, response.reason_phrase
                )
            try:
                yield response
            except httpx.RequestError as e:
                # The body is streamed, so reads can fail after the headers arrived
                log_warning(f"Reading body failed: {uri}", error=type(e).__name__)
                raise TransportError(uri, str(e) or type(e).__name__) from e
        finally:
            response.close()

    # ----------------------------------------------------------------
    # Decoders
    # ----------------------------------------------------------------

    def get_json(self, uri: str, target: Any = None) -> Any:
        """
        Fetch `uri` and decode its body as a single JSON value.

        An empty body counts as success: nothing is decoded, `target` is left
        untouched and None is returned. Only the first JSON value in the body
        is decoded. A JSON null leaves `target` untouched as well.

        Args:
            uri: Absolute URL to request.
            target: Optional object to decode into. A pydantic model instance
                gets the fields present in the payload assigned; a mutable
                mapping is updated; a mutable sequence is replaced in place.

        Returns:
            The decoded JSON value, or None for an empty body.

        Raises:
            UnexpectedStatusError: If the status is not 200.
            DecodeError: If the body is not valid JSON or does not fit `target`.
        """
        with self._open(uri, JSON_CONTENT_TYPE) as response:
            response.read()
            text = response.text
            log_response_body(text)

        text = text.lstrip()
        if not text:
            log_decode("json", uri, 0)
            return None

        try:
            # Only the first value is decoded, anything after it is ignored
            value, _ = json.JSONDecoder().raw_decode(text)
        except ValueError as e:
            raise DecodeError(f"invalid JSON from {uri}: {e}") from e

        # null decodes to nothing
        if target is not None and value is not None:
            decode_into(target, value)

        log_decode("json", uri, 1)
        return value

    def get_csv(self, uri: str, accept_row: RowCallback) -> int:
        """
        Fetch `uri` and pass each CSV record to `accept_row`.

        Records are decoded while the body streams in. Decoding stops at the
        first error, whether raised by the parser or by `accept_row`.

        Args:
            uri: Absolute URL to request.
            accept_row: Called once per record with its list of fields.

        Returns:
            Number of records passed to `accept_row`.

        Raises:
            UnexpectedStatusError: If the status is not 200.
            CSVParseError: If a record is malformed.
        """
        with self._open(uri, CSV_CONTENT_TYPE) as response:
            count = read_csv(_iter_lines(response), accept_row)

        log_decode("csv", uri, count)
        return count

    def get_body(
        self,
        uri: str,
        sink: BinaryIO,
        progress: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Fetch `uri` and copy its body into `sink` unchanged.

        Args:
            uri: Absolute URL to request.
            sink: Binary writable object (file, BytesIO, ...).
            progress: Optional callback, called after each chunk with the
                bytes copied so far and the Content-Length (None if unknown).

        Returns:
            Number of bytes copied.

        Raises:
            UnexpectedStatusError: If the status is not 200.
            BodyCopyError: If writing to `sink` fails.
        """
        copied = 0
        with self._open(uri, None) as response:
            total = _content_length(response)
            for chunk in response.iter_bytes():
                try:
                    sink.write(chunk)
                except OSError as e:
                    raise BodyCopyError(f"writing body of {uri} failed: {e}") from e
                copied += len(chunk)
                if progress:
                    progress(copied, total)

        log_decode("body", uri, copied)
        return copied


def read_csv(lines: Iterable[str], accept_row: RowCallback) -> int:
    """
    Decode CSV records from `lines` and pass each one to `accept_row`.

    Blank lines are skipped. Every record must have as many fields as the
    first one, and a quote may only appear in a quoted field.

    Returns:
        Number of records passed to `accept_row`.

    Raises:
        CSVParseError: On a malformed record.
    """
    reader = csv.reader(_check_quotes(lines), strict=True)
    width: Optional[int] = None
    count = 0

    for record in _records(reader):
        if not record:
            continue
        if width is None:
            width = len(record)
        elif len(record) != width:
            raise CSVParseError(
                f"wrong number of fields: expected {width}, got {len(record)}",
                reader.line_num,
            )
        accept_row(record)
        count += 1

    return count


def decode_into(target: Any, value: Any) -> None:
    """
    Merge a decoded JSON value into `target`.

    Only the fields of a model that appear in `value` are assigned.

    Raises:
        DecodeError: If `value` does not fit `target`.
        TypeError: If `target` is not a model, mapping or sequence.
    """
    if isinstance(target, BaseModel):
        model = type(target)
        if not isinstance(value, dict):
            raise DecodeError(f"expected a JSON object, got {type(value).__name__}")
        # Validate the payload over the current state so required fields
        # missing from the payload keep their values
        try:
            decoded = model.model_validate({**target.model_dump(), **value})
        except ValidationError as e:
            raise DecodeError(f"JSON does not match {model.__name__}: {e}") from e
        for name in value.keys() & model.model_fields.keys():
            setattr(target, name, getattr(decoded, name))
    elif isinstance(target, MutableMapping):
        if not isinstance(value, dict):
            raise DecodeError(f"expected a JSON object, got {type(value).__name__}")
        target.update(value)
    elif isinstance(target, MutableSequence):
        if not isinstance(value, list):
            raise DecodeError(f"expected a JSON array, got {type(value).__name__}")
        target[:] = value
    else:
        raise TypeError(f"cannot decode JSON into {type(target).__name__}")


def _records(reader) -> Iterator[list[str]]:
    """Iterate a csv reader, turning csv.Error into CSVParseError."""
    try:
        yield from reader
    except csv.Error as e:
        raise CSVParseError(str(e), reader.line_num) from e


# Quoting state while scanning CSV text
_FIELD_START, _UNQUOTED, _QUOTED, _QUOTE_IN_QUOTED = range(4)


def _check_quotes(lines: Iterable[str]) -> Iterator[str]:
    """
    Pass `lines` through unchanged, failing on quotes the csv module accepts.

    The csv module keeps a quote inside an unquoted field (`a"b`) as text and
    does not flag it even in strict mode. Quoting state carries over lines so
    quoted newlines are handled.
    """
    state = _FIELD_START
    for line_num, line in enumerate(lines, start=1):
        if state == _QUOTED or '"' in line:
            state = _scan_quotes(line, state, line_num)
        else:
            state = _FIELD_START
        yield line


def _scan_quotes(line: str, state: int, line_num: int) -> int:
    """Advance the quoting state over `line`."""
    for char in line:
        if state == _QUOTED:
            if char == '"':
                state = _QUOTE_IN_QUOTED
        elif state == _QUOTE_IN_QUOTED:
            if char == '"':
                state = _QUOTED
            elif char in ",\r\n":
                state = _FIELD_START
            else:
                raise CSVParseError('extraneous or missing " in quoted field', line_num)
        elif char == '"':
            if state == _UNQUOTED:
                raise CSVParseError('bare " in non-quoted field', line_num)
            state = _QUOTED
        elif char in ",\r\n":
            state = _FIELD_START
        else:
            state = _UNQUOTED
    return state


def _iter_lines(response: httpx.Response) -> Iterator[str]:
    """Yield body lines with their newline kept, as the csv module expects."""
    pending = ""
    for chunk in response.iter_text():
        pending += chunk
        *lines, pending = pending.split("\n")
        for line in lines:
            yield line + "\n"
    if pending:
        yield pending


def _content_length(response: httpx.Response) -> Optional[int]:
    value = response.headers.get("Content-Length")
    if value is None or not value.isdigit():
        return None
    return int(value)
