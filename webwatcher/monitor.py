"""
Monitor module for WebWatcher.

Connects the observer's event stream to the formatter. Each event is fully
written before the next one is taken from the stream.
"""

import asyncio
import logging
from typing import AsyncIterator, Callable

from webwatcher.events import MutationEvent
from webwatcher.formatter import EventFormatter
from webwatcher.observer import DirectoryObserver

logger = logging.getLogger(__name__)


async def run_monitor(stream: AsyncIterator[MutationEvent], formatter: Callable[[MutationEvent], None]) -> int:
    """
    Drain a mutation stream into a formatter.

    Args:
        stream: Async iterator of events, normally a MutationStream.
        formatter: Called once per event, in stream order.

    Returns:
        int: Number of events handled, if the stream ever ends.
    """
    handled = 0
    async for event in stream:
        formatter(event)
        handled += 1
    logger.info(f"Event stream ended after {handled} events")
    return handled


async def _watch(root_path: str, observer: DirectoryObserver, formatter: EventFormatter) -> int:
    stream = observer.start(root_path)
    try:
        return await run_monitor(stream, formatter)
    finally:
        observer.stop()


def watch_directory(root_path: str, observer: DirectoryObserver, formatter: EventFormatter) -> int:
    """
    Watch root_path until the process exits or the watch fails.

    Raises:
        WatchError: If the directory cannot be watched.
    """
    return asyncio.run(_watch(root_path, observer, formatter))
