"""
Progress display for body downloads.
"""

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TransferSpeedColumn,
)


class DownloadTracker:
    """Tracks bytes copied while a response body is written out."""

    def __init__(self, console: Console):
        self.console = console
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=30),
            DownloadColumn(),
            TextColumn("•"),
            TransferSpeedColumn(),
            TimeElapsedColumn(),
            console=console,
        )
        self.task: TaskID = TaskID(0)
        self.copied = 0

    def start(self, description: str = "Downloading") -> None:
        """Start the progress display."""
        self.task = self.progress.add_task(description, total=None)
        self.progress.start()

    def stop(self) -> None:
        """Stop the progress display."""
        self.progress.stop()

    def update(self, copied: int, total: Optional[int] = None) -> None:
        """Progress callback for `Api.get_body`."""
        self.copied = copied
        self.progress.update(self.task, completed=copied, total=total)

    def finish(self) -> None:
        """Mark the download as complete."""
        self.progress.update(self.task, completed=self.copied, total=self.copied)
