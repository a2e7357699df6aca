"""
Formatter module for WebWatcher.

Turns one MutationEvent into a single audit line:

    14:03:22 -> ADD       /home/me/.chrome/Default/History (0.15 mb)

The timestamp is cyan, the kind is red and the size is green. The arrow and
the path are left in the terminal's default color.
"""

import os
import sys
from datetime import datetime
from typing import Callable, Optional, TextIO

import click

from webwatcher.events import LABEL_WIDTH, MutationEvent

BYTES_PER_MB = 1024 * 1024

TIMESTAMP_COLOR = "cyan"
KIND_COLOR = "red"
SIZE_COLOR = "green"
ARROW = "->"


def size_in_mb(path: str) -> Optional[str]:
    """
    Return the size annotation for a path, or None if it no longer exists.

    Args:
        path: Filesystem path reported by the event.

    Returns:
        str: Size formatted as ``(X.XX mb)``, or None when the path is gone.
    """
    try:
        size = os.stat(path).st_size
    except (FileNotFoundError, NotADirectoryError):
        return None
    return f"({size / BYTES_PER_MB:.2f} mb)"


class EventFormatter:
    """
    Render mutation events as aligned, colorized lines on an output stream.

    Attributes:
        label_width: Width every kind label is padded to.
        stream: Where lines are written; stdout when None.
        color: Keep (True) or strip (False) ANSI colors; None lets click
            decide from the stream. Colors are kept by default, also when
            stdout is redirected.
        clock: Returns the current wall-clock time.
    """

    def __init__(
        self,
        label_width: int = LABEL_WIDTH,
        stream: Optional[TextIO] = None,
        color: Optional[bool] = True,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.label_width = label_width
        self.stream = stream
        self.color = color
        self.clock = clock

    def format_kind(self, event: MutationEvent) -> str:
        return event.kind.label.ljust(self.label_width)

    def format_size(self, event: MutationEvent) -> str:
        if event.kind.is_directory:
            return ""
        return size_in_mb(event.path) or ""

    def format(self, event: MutationEvent) -> str:
        """Build the audit line for an event, size looked up now."""
        timestamp = self.clock().strftime("%X")
        fields = [
            click.style(timestamp, fg=TIMESTAMP_COLOR),
            ARROW,
            click.style(self.format_kind(event), fg=KIND_COLOR),
            event.path,
        ]
        size = self.format_size(event)
        if size:
            fields.append(click.style(size, fg=SIZE_COLOR))
        return " ".join(fields)

    def emit(self, event: MutationEvent) -> None:
        """Write one line for the event and flush it."""
        stream = self.stream if self.stream is not None else sys.stdout
        click.echo(self.format(event), file=stream, color=self.color)
        stream.flush()

    __call__ = emit
