"""
Shared pytest fixtures for webby tests.
"""

from unittest.mock import MagicMock

import httpx
import pytest
from rich.console import Console

from webby.http import Api


# ============================================================================
# Path and directory fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def temp_log_dir(tmp_path, monkeypatch):
    """Create a temporary log directory and patch LOG_DIR."""
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    monkeypatch.setattr("webby.debug.LOG_DIR", log_dir)
    return log_dir


# ============================================================================
# HTTP fixtures
# ============================================================================


@pytest.fixture
def sent_requests():
    """Requests received by the mock server, in order."""
    return []


@pytest.fixture
def make_api(sent_requests):
    """Factory for an Api whose client answers every request with a canned response."""

    def _make_api(
        body="",
        status_code: int = 200,
        headers=None,
        stream=None,
        handler=None,
    ) -> Api:
        content = body.encode() if isinstance(body, str) else body

        def respond(request: httpx.Request) -> httpx.Response:
            sent_requests.append(request)
            if stream is not None:
                return httpx.Response(status_code, headers=headers, stream=stream)
            return httpx.Response(status_code, headers=headers, content=content)

        return Api(transport=httpx.MockTransport(handler or respond))

    return _make_api


class ChunkedStream(httpx.SyncByteStream):
    """Response body delivered in fixed chunks, optionally failing midway."""

    def __init__(self, chunks, error=None):
        self.chunks = chunks
        self.error = error

    def __iter__(self):
        yield from self.chunks
        if self.error is not None:
            raise self.error


@pytest.fixture
def chunked_stream():
    """Factory for ChunkedStream bodies."""
    return ChunkedStream


# ============================================================================
# Console fixtures
# ============================================================================


@pytest.fixture
def mock_console():
    """Create a mock Rich console."""
    console = MagicMock(spec=Console)
    return console


# ============================================================================
# Logger fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_logger():
    """Reset the global logger state before each test."""
    import webby.debug as debug_module

    debug_module._logger = None
    debug_module._log_file = None
    debug_module._debug_enabled = False
    yield
    debug_module._logger = None
    debug_module._log_file = None
    debug_module._debug_enabled = False


# ============================================================================
# CLI testing fixtures
# ============================================================================


@pytest.fixture
def cli_runner():
    """Create a fixture for running CLI commands."""
    import subprocess
    import sys

    def run_webby(*args, check=True, capture_output=True, text=True):
        """Run webby CLI command with given arguments."""
        cmd = [sys.executable, "-m", "webby"] + list(args)
        result = subprocess.run(
            cmd, capture_output=capture_output, text=text, check=False
        )
        return result

    return run_webby
