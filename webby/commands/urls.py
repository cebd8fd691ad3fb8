"""
URL commands - build URLs and extract their last path segment.
"""

from typing import Annotated

import cyclopts
from rich.markup import escape

from webby.commands import app, console
from webby.errors import UriParseError
from webby.urls import UrlBuilder, last_segment


@app.command(name="last-segment")
def last_segment_cmd(
    url: Annotated[str, cyclopts.Parameter(help="URL to inspect.")],
):
    """Print the last path segment of a URL (query string excluded).

    Parameters
    ----------
    url
        The URL to inspect.
    """
    try:
        segment = last_segment(url)
    except UriParseError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)

    console.print(segment, markup=False, highlight=False, soft_wrap=True)


@app.command(name="build-url")
def build_url_cmd(
    base: Annotated[str, cyclopts.Parameter(help="Base URL, e.g. https://host.")],
    *,
    path: Annotated[
        str,
        cyclopts.Parameter(
            ("--path", "-p"),
            help="Path appended to the base.",
        ),
    ] = "",
    param: Annotated[
        tuple[str, ...],
        cyclopts.Parameter(
            ("--param", "-q"),
            help="Query parameter as key=value. Can be specified multiple times.",
        ),
    ] = (),
):
    """Build a URL from a base, a path and query parameters.

    Parameters
    ----------
    base
        Base URL.
    path
        Path appended verbatim to the base.
    param
        Query parameters as key=value. Empty values are dropped and later
        values replace earlier ones for the same key.
    """
    builder = UrlBuilder().with_base(base).with_path(path)
    for item in param:
        key, sep, value = item.partition("=")
        if not sep:
            console.print(f"[red]Invalid parameter (expected key=value): {item}[/red]")
            raise SystemExit(1)
        builder.with_param(key, value)

    console.print(builder.build(), markup=False, highlight=False, soft_wrap=True)
