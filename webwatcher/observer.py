"""
Observer module for WebWatcher.

Watches one directory tree recursively and exposes its mutations as an async
stream of MutationEvent objects:
- Native OS notifications through watchdog, or watchdog's polling observer
- No events for entries that existed before the watch started
- File additions and changes are held back until the write has settled
- Events come out in the order the notification backend reported them
"""

import asyncio
import logging
import os
from typing import Dict, List, Optional, Set, Tuple

from watchdog.events import (EVENT_TYPE_CREATED, EVENT_TYPE_DELETED,
                             EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED,
                             FileSystemEvent, FileSystemEventHandler)
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from webwatcher.events import MutationEvent, MutationKind

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_WINDOW = 2.0
DEFAULT_POLL_INTERVAL = 0.1
DEFAULT_MAX_SETTLE = 10.0
DEFAULT_HEALTH_INTERVAL = 1.0


class WatchError(Exception):
    """Raised when the root directory cannot be watched (any more)."""

    pass


def classify(event: FileSystemEvent) -> List[Tuple[MutationKind, str]]:
    """
    Map a raw watchdog notification onto mutation kinds.

    Moves are split into a removal of the source and a creation of the
    destination. Anything else outside the five kinds maps to nothing.

    Args:
        event: The watchdog event.

    Returns:
        List of (kind, absolute path) pairs, possibly empty.
    """
    src_path = os.fsdecode(event.src_path)
    if event.event_type == EVENT_TYPE_CREATED:
        kind = MutationKind.DIRECTORY_CREATED if event.is_directory else MutationKind.CREATED
        return [(kind, src_path)]
    if event.event_type == EVENT_TYPE_MODIFIED:
        if event.is_directory:
            return []
        return [(MutationKind.MODIFIED, src_path)]
    if event.event_type == EVENT_TYPE_DELETED:
        kind = MutationKind.DIRECTORY_REMOVED if event.is_directory else MutationKind.REMOVED
        return [(kind, src_path)]
    if event.event_type == EVENT_TYPE_MOVED:
        dest_path = os.fsdecode(event.dest_path)
        if event.is_directory:
            return [
                (MutationKind.DIRECTORY_REMOVED, src_path),
                (MutationKind.DIRECTORY_CREATED, dest_path),
            ]
        return [(MutationKind.REMOVED, src_path), (MutationKind.CREATED, dest_path)]
    return []


def _stat_signature(path: str) -> Optional[Tuple[int, int]]:
    try:
        stat = os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        return None
    return stat.st_size, stat.st_mtime_ns


class _LoopHandler(FileSystemEventHandler):
    """Hands every watchdog notification over to the event loop thread."""

    def __init__(self, loop: asyncio.AbstractEventLoop, stream: "MutationStream"):
        super().__init__()
        self._loop = loop
        self._stream = stream

    def dispatch(self, event):
        if self._loop.is_closed():
            return
        try:
            self._loop.call_soon_threadsafe(self._stream.dispatch, event)
        except RuntimeError:
            # Loop closed after the check above.
            return


class MutationStream:
    """
    Async iterator over the mutations of one watched tree.

    Every reported mutation takes a slot (a future) in an ordered queue.
    Removals and directory events get an already resolved slot. File
    additions and changes get a slot that a settling task resolves once the
    file's size and mtime stop changing, or with None if the file is gone
    or reported removed by then. Reading the stream waits on the oldest slot
    first, so a settling event holds back the events reported after it.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, root_path: str, observer,
                 settle_window: float, poll_interval: float, max_settle: float,
                 health_interval: float):
        self.root_path = root_path
        self._loop = loop
        self._observer = observer
        self._settle_window = settle_window
        self._poll_interval = poll_interval
        self._max_settle = max_settle
        self._health_interval = health_interval
        self._slots: "asyncio.Queue[asyncio.Future]" = asyncio.Queue()
        self._head: Optional[asyncio.Future] = None
        self._settling: Dict[str, asyncio.Future] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._failure: Optional[WatchError] = None

    def __aiter__(self):
        return self

    async def __anext__(self) -> MutationEvent:
        while True:
            if self._head is None:
                self._head = await self._next_slot()
            event = await asyncio.shield(self._head)
            self._head = None
            if event is not None:
                return event

    async def _next_slot(self) -> asyncio.Future:
        while True:
            if self._slots.empty():
                self.check_health()
            try:
                return await asyncio.wait_for(self._slots.get(), self._health_interval)
            except asyncio.TimeoutError:
                continue

    def check_health(self):
        """Raise WatchError if the watch can no longer deliver events."""
        if self._failure is not None:
            raise self._failure
        if not os.path.isdir(self.root_path):
            raise WatchError(f"Watched directory disappeared: {self.root_path}")
        if not os.access(self.root_path, os.R_OK | os.X_OK):
            raise WatchError(f"Watched directory is no longer readable: {self.root_path}")
        for emitter in list(self._observer.emitters):
            if not emitter.is_alive():
                raise WatchError(f"Filesystem notifications stopped for {self.root_path}")

    def dispatch(self, raw_event: FileSystemEvent):
        """Classify one raw notification. Runs on the event loop thread."""
        if (raw_event.event_type == EVENT_TYPE_DELETED
                and os.fsdecode(raw_event.src_path) == self.root_path):
            self._failure = WatchError(f"Watched directory was removed: {self.root_path}")
        mutations = classify(raw_event)
        if not mutations:
            logger.debug(f"Ignoring {raw_event.event_type} event for {raw_event.src_path}")
        for kind, path in mutations:
            self._enqueue(kind, path)

    def _enqueue(self, kind: MutationKind, path: str):
        slot = self._loop.create_future()
        if not kind.needs_settling:
            if kind in (MutationKind.REMOVED, MutationKind.DIRECTORY_REMOVED):
                self._drop_settling(path)
            slot.set_result(MutationEvent(kind, path))
            self._slots.put_nowait(slot)
            return
        if path in self._settling:
            logger.debug(f"Write still settling for {path}; absorbing {kind.value}")
            return
        self._settling[path] = slot
        self._slots.put_nowait(slot)
        task = self._loop.create_task(self._settle(MutationEvent(kind, path), slot))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _drop_settling(self, removed_path: str):
        """Abandon pending additions and changes at or below a removed path."""
        prefix = removed_path.rstrip(os.sep) + os.sep
        for path in [p for p in self._settling if p == removed_path or p.startswith(prefix)]:
            slot = self._settling.pop(path)
            if not slot.done():
                logger.debug(f"{path} removed while settling; dropping pending event")
                slot.set_result(None)

    async def _settle(self, event: MutationEvent, slot: asyncio.Future):
        loop = asyncio.get_running_loop()
        try:
            started = loop.time()
            stable_since = started
            last = _stat_signature(event.path)
            while not slot.done():
                await asyncio.sleep(self._poll_interval)
                if slot.done():
                    break
                now = loop.time()
                current = _stat_signature(event.path)
                if current is None:
                    logger.debug(f"{event.path} vanished while settling; dropping {event.kind.value}")
                    slot.set_result(None)
                    break
                if current != last:
                    last = current
                    stable_since = now
                if now - stable_since >= self._settle_window:
                    slot.set_result(event)
                elif now - started >= self._max_settle:
                    logger.debug(f"{event.path} still changing after {self._max_settle}s; emitting anyway")
                    slot.set_result(event)
        except Exception as e:
            logger.error(f"Error while waiting for {event.path} to settle: {e}")
            if not slot.done():
                slot.set_exception(e)
        finally:
            if self._settling.get(event.path) is slot:
                del self._settling[event.path]

    def close(self):
        for task in list(self._tasks):
            task.cancel()


class DirectoryObserver:
    """
    Recursive watch of one directory tree.

    Attributes:
        settle_window: Seconds a file must stay unchanged before its
            addition or change is reported.
        poll_interval: Seconds between size checks while settling.
        max_settle: Upper bound on how long one event is held back.
        use_polling: Use watchdog's polling observer instead of native
            notifications.
        health_interval: Seconds between liveness checks of the watch while
            no events arrive.
    """

    def __init__(
        self,
        settle_window: float = DEFAULT_SETTLE_WINDOW,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_settle: float = DEFAULT_MAX_SETTLE,
        use_polling: bool = False,
        health_interval: float = DEFAULT_HEALTH_INTERVAL,
    ):
        self.settle_window = settle_window
        self.poll_interval = poll_interval
        self.max_settle = max_settle
        self.use_polling = use_polling
        self.health_interval = health_interval
        self._observer = None
        self._stream: Optional[MutationStream] = None

    def start(self, root_path: str) -> MutationStream:
        """
        Start watching root_path and return the stream of its mutations.

        Must be called from a running event loop. The watch is established
        when this returns.

        Args:
            root_path: Directory to watch recursively.

        Returns:
            MutationStream: Lazy, infinite async iterator of MutationEvent.

        Raises:
            WatchError: If root_path is missing, not a directory, unreadable
                or cannot be subscribed to.
            RuntimeError: If the observer was already started.
        """
        if self._observer is not None:
            raise RuntimeError("Observer is already running")

        root_path = os.path.abspath(root_path)
        if not os.path.exists(root_path):
            raise WatchError(f"Directory to watch does not exist: {root_path}")
        if not os.path.isdir(root_path):
            raise WatchError(f"Path to watch is not a directory: {root_path}")
        if not os.access(root_path, os.R_OK | os.X_OK):
            raise WatchError(f"Permission denied watching {root_path}")

        loop = asyncio.get_running_loop()
        observer = PollingObserver() if self.use_polling else Observer()
        stream = MutationStream(
            loop,
            root_path,
            observer,
            settle_window=self.settle_window,
            poll_interval=self.poll_interval,
            max_settle=self.max_settle,
            health_interval=self.health_interval,
        )
        try:
            observer.schedule(_LoopHandler(loop, stream), root_path, recursive=True)
            observer.start()
        except OSError as e:
            raise WatchError(f"Cannot watch {root_path}: {e}") from e

        self._observer = observer
        self._stream = stream
        logger.info(
            f"Watching {root_path} with {type(observer).__name__} "
            f"(settle {self.settle_window}s, poll {self.poll_interval}s)"
        )
        return stream

    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def stop(self):
        """Stop the notification backend threads."""
        if self._stream is not None:
            self._stream.close()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            logger.info("Observer stopped")
