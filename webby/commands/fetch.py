"""
Fetch commands - download a URL and decode it as JSON, CSV or raw bytes.
"""

import sys
from pathlib import Path
from typing import Annotated, Optional

import cyclopts
import httpx
from rich import box
from rich.markup import escape
from rich.table import Table

from webby.commands import app, console
from webby.debug import get_log_file, log, log_error, setup_logger
from webby.errors import WebbyError
from webby.http import Api, CSVRows
from webby.progress import DownloadTracker

TimeoutOption = Annotated[
    Optional[float],
    cyclopts.Parameter(
        ("--timeout", "-t"),
        help="Request timeout in seconds (default: 5).",
    ),
]
CookiesOption = Annotated[
    bool,
    cyclopts.Parameter(
        negative=(),
        help="Keep cookies set by the server for the duration of the request.",
    ),
]
FollowRedirectsOption = Annotated[
    bool,
    cyclopts.Parameter(
        ("--follow-redirects", "-L"),
        negative=(),
        help="Follow HTTP redirects.",
    ),
]
DebugOption = Annotated[
    bool,
    cyclopts.Parameter(
        negative=(),
        help="Enable verbose debug logging (includes request and response details).",
    ),
]


def make_api(
    timeout: Optional[float] = None,
    cookies: bool = False,
    follow_redirects: bool = False,
) -> Api:
    """Build an Api handle from the command line client options."""
    options = {"follow_redirects": follow_redirects}
    if timeout is not None:
        options["timeout"] = httpx.Timeout(timeout)

    api = Api(**options)
    if cookies:
        api.enable_cookies()
    return api


def _fail(url: str, error: Exception) -> None:
    log_error(f"Failed: {url}", error=type(error).__name__)
    console.print(f"[red]{escape(str(error))}[/red]")
    log_file = get_log_file()
    if log_file:
        console.print(f"[dim]Log saved to: {log_file}[/dim]")
    raise SystemExit(1)


@app.command(name="json")
def json_cmd(
    url: Annotated[str, cyclopts.Parameter(help="URL to fetch.")],
    *,
    key: Annotated[
        Optional[str],
        cyclopts.Parameter(
            ("--key", "-k"),
            help="Only print this top-level key of the decoded object.",
        ),
    ] = None,
    timeout: TimeoutOption = None,
    cookies: CookiesOption = False,
    follow_redirects: FollowRedirectsOption = False,
    debug: DebugOption = False,
):
    """Fetch a URL and pretty-print its JSON body.

    Parameters
    ----------
    url
        Absolute URL to fetch.
    key
        Top-level key to extract from the decoded object.
    timeout
        Request timeout in seconds.
    cookies
        Keep cookies set by the server.
    follow_redirects
        Follow HTTP redirects.
    debug
        Enable verbose debug logging.
    """
    setup_logger(debug=debug)
    log("JSON fetch started", url=url, key=key)

    with make_api(timeout, cookies, follow_redirects) as api:
        try:
            value = api.get_json(url)
        except WebbyError as e:
            _fail(url, e)

    if value is None:
        console.print("[dim]Empty response body[/dim]")
        return

    if key is not None:
        if not isinstance(value, dict) or key not in value:
            console.print(f"[red]Key not found in response: {escape(key)}[/red]")
            raise SystemExit(1)
        value = value[key]

    console.print_json(data=value)


@app.command(name="csv")
def csv_cmd(
    url: Annotated[str, cyclopts.Parameter(help="URL to fetch.")],
    *,
    header: Annotated[
        bool,
        cyclopts.Parameter(
            ("--header", "-H"),
            negative=(),
            help="Treat the first record as column names.",
        ),
    ] = False,
    limit: Annotated[
        Optional[int],
        cyclopts.Parameter(
            ("--limit", "-n"),
            help="Maximum number of rows to display.",
        ),
    ] = None,
    timeout: TimeoutOption = None,
    cookies: CookiesOption = False,
    follow_redirects: FollowRedirectsOption = False,
    debug: DebugOption = False,
):
    """Fetch a URL and display its CSV body as a table.

    Parameters
    ----------
    url
        Absolute URL to fetch.
    header
        Use the first record as the table header.
    limit
        Maximum number of rows to display.
    timeout
        Request timeout in seconds.
    cookies
        Keep cookies set by the server.
    follow_redirects
        Follow HTTP redirects.
    debug
        Enable verbose debug logging.
    """
    setup_logger(debug=debug)
    log("CSV fetch started", url=url, header=header, limit=limit)

    rows = CSVRows()
    with make_api(timeout, cookies, follow_redirects) as api:
        try:
            api.get_csv(url, rows.add)
        except WebbyError as e:
            _fail(url, e)

    table = build_csv_table(rows, header=header, limit=limit, title=escape(url))
    console.print(table)


def build_csv_table(
    rows: CSVRows,
    header: bool = False,
    limit: Optional[int] = None,
    title: Optional[str] = None,
) -> Table:
    """Render decoded CSV records as a rich Table."""
    records = rows.rows
    table = Table(title=title, box=box.ROUNDED)

    if not records:
        table.add_column("(no records)", style="dim")
        return table

    if header:
        names, records = records[0], records[1:]
    else:
        names = [str(i + 1) for i in range(len(records[0]))]
    for name in names:
        table.add_column(escape(name), style="bold" if header else None)

    shown = records if limit is None else records[:limit]
    for record in shown:
        table.add_row(*(escape(field) for field in record))

    if len(shown) < len(records):
        table.caption = f"{len(shown)} of {len(records)} rows shown"

    return table


@app.command(name="body")
def body_cmd(
    url: Annotated[str, cyclopts.Parameter(help="URL to fetch.")],
    *,
    output: Annotated[
        Optional[Path],
        cyclopts.Parameter(
            ("--output", "-o"),
            help="File to write the body to (default: stdout).",
        ),
    ] = None,
    no_progress: Annotated[
        bool,
        cyclopts.Parameter(
            negative=(),
            help="Disable progress bar.",
        ),
    ] = False,
    timeout: TimeoutOption = None,
    cookies: CookiesOption = False,
    follow_redirects: FollowRedirectsOption = False,
    debug: DebugOption = False,
):
    """Fetch a URL and write its body unchanged to a file or stdout.

    Parameters
    ----------
    url
        Absolute URL to fetch.
    output
        Destination file. The body goes to stdout when omitted.
    no_progress
        Disable progress bar while writing to a file.
    timeout
        Request timeout in seconds.
    cookies
        Keep cookies set by the server.
    follow_redirects
        Follow HTTP redirects.
    debug
        Enable verbose debug logging.
    """
    setup_logger(debug=debug)
    log("Body fetch started", url=url, output=output)

    with make_api(timeout, cookies, follow_redirects) as api:
        if output is None:
            try:
                api.get_body(url, sys.stdout.buffer)
            except WebbyError as e:
                _fail(url, e)
            sys.stdout.flush()
            return

        tracker = None if no_progress else DownloadTracker(console)
        if tracker:
            tracker.start(f"Downloading {output.name}")

        try:
            with output.open("wb") as sink:
                copied = api.get_body(
                    url, sink, progress=tracker.update if tracker else None
                )
            if tracker:
                tracker.finish()
        except (WebbyError, OSError) as e:
            # Do not leave a truncated download behind
            output.unlink(missing_ok=True)
            _fail(url, e)
        finally:
            if tracker:
                tracker.stop()

    console.print(f"[green]Saved {copied} bytes to: {output}[/green]")
