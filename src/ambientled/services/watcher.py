"""Directory change watching.

The store only depends on the ``DirectoryWatcher`` protocol (directory in,
list of change events out), so the polling implementation below can be
swapped for a platform-specific one without touching the store.
"""

import logging
import os
import threading
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from ambientled.exceptions import WatchSetupError

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.25


class ChangeType(Enum):
    """Kind of filesystem change."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A single change to an entry of the watched directory."""

    change: ChangeType
    path: Path


@runtime_checkable
class DirectoryWatcher(Protocol):
    """Source of change events for one directory."""

    directory: Path

    def wait(self, timeout: Optional[float] = None) -> list[ChangeEvent]:
        """
        Block until at least one change happens.

        Args:
            timeout: Seconds to wait, or None to wait until closed

        Returns:
            The changes observed, or an empty list on timeout or close
        """
        ...

    def close(self) -> None:
        """Stop watching and wake up any blocked ``wait`` call."""
        ...


class PollingDirectoryWatcher:
    """
    Watches a directory by comparing ``(mtime_ns, size)`` snapshots.

    Polling works on every platform and filesystem (including network
    mounts where native notifications are unreliable), at the cost of up
    to ``poll_interval`` seconds of latency.
    """

    def __init__(self, directory: Path, poll_interval: float = DEFAULT_POLL_INTERVAL):
        """
        Register the watch and take the initial snapshot.

        Args:
            directory: Directory to watch
            poll_interval: Seconds between snapshots

        Raises:
            WatchSetupError: If the directory does not exist or cannot be listed
        """
        try:
            self.directory = Path(directory).resolve(strict=True)
        except OSError as e:
            raise WatchSetupError(str(directory), str(e)) from e

        if not self.directory.is_dir():
            raise WatchSetupError(str(directory), "not a directory")

        self._poll_interval = poll_interval
        self._closed = threading.Event()

        try:
            self._snapshot = self._scan()
        except OSError as e:
            raise WatchSetupError(str(directory), str(e)) from e

        logger.debug(f"Watching {self.directory} (poll every {poll_interval}s)")

    @property
    def closed(self) -> bool:
        """True once close() has been called."""
        return self._closed.is_set()

    def _scan(self) -> dict[Path, tuple[int, int]]:
        entries: dict[Path, tuple[int, int]] = {}
        with os.scandir(self.directory) as iterator:
            for entry in iterator:
                try:
                    stat = entry.stat()
                except FileNotFoundError:
                    # Removed between listing and stat
                    continue
                entries[Path(entry.path)] = (stat.st_mtime_ns, stat.st_size)
        return entries

    def poll(self) -> list[ChangeEvent]:
        """Take a snapshot and return the changes since the previous one."""
        try:
            current = self._scan()
        except OSError as e:
            logger.warning(f"Cannot scan {self.directory}: {e}")
            return []

        previous = self._snapshot
        self._snapshot = current

        events = [ChangeEvent(ChangeType.DELETED, path) for path in previous.keys() - current.keys()]
        for path, signature in current.items():
            before = previous.get(path)
            if before is None:
                events.append(ChangeEvent(ChangeType.CREATED, path))
            elif before != signature:
                events.append(ChangeEvent(ChangeType.MODIFIED, path))
        return events

    def wait(self, timeout: Optional[float] = None) -> list[ChangeEvent]:
        """Block until something changes, the timeout expires or the watcher is closed."""
        deadline = None if timeout is None else time.monotonic() + timeout

        while not self._closed.is_set():
            events = self.poll()
            if events:
                return events

            delay = self._poll_interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return []
                delay = min(delay, remaining)
            self._closed.wait(delay)

        return []

    def close(self) -> None:
        """Stop watching (idempotent)."""
        if not self._closed.is_set():
            self._closed.set()
            logger.debug(f"Stopped watching {self.directory}")
