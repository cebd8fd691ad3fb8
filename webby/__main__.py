"""
Webby - Fetch web resources and decode them as JSON, CSV or raw bytes.

Supports:
- JSON bodies (pretty-printed)
- CSV bodies (rendered as a table)
- Raw bodies (written to a file or stdout)
"""

import sys

from webby.commands import app


def main() -> int:
    """Main entry point."""
    app()
    return 0


if __name__ == "__main__":
    sys.exit(main())
