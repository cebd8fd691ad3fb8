"""
CLI commands for webby.

This module defines the cyclopts app and registers all commands.
"""

import cyclopts
from rich.console import Console

# Shared console instance for all commands
console = Console()

# Main application
app = cyclopts.App(
    name="webby",
    help="Fetch web resources and decode them as JSON, CSV or raw bytes.",
    version_flags=(),
)

# Import and register commands
# These imports must come after app is defined to avoid circular imports
from webby.commands.fetch import body_cmd, csv_cmd, json_cmd  # noqa: E402, F401
from webby.commands.urls import build_url_cmd, last_segment_cmd  # noqa: E402, F401

__all__ = ["app", "console"]
