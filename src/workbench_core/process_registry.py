"""Registry of OS processes spawned by the supervisor."""

import logging
import threading

logger = logging.getLogger(__name__)


class RunningProcessRegistry:
    """
    Thread-safe set of tracked process ids.

    Spawning and termination happen on unrelated threads; every operation
    holds the lock only for the membership change itself.
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._lock = threading.Lock()
        self._pids: set[int] = set()

    def insert(self, pid: int) -> None:
        """Start tracking a process id."""
        with self._lock:
            self._pids.add(pid)
        logger.debug(f"Tracking process {pid}")

    def remove(self, pid: int) -> bool:
        """
        Stop tracking a process id.

        Args:
            pid: Process id to remove

        Returns:
            True if the pid was tracked, False otherwise
        """
        with self._lock:
            if pid not in self._pids:
                return False
            self._pids.remove(pid)
        logger.debug(f"Stopped tracking process {pid}")
        return True

    def contains(self, pid: int) -> bool:
        """Check whether a process id is tracked."""
        with self._lock:
            return pid in self._pids

    def snapshot(self) -> list[int]:
        """Return the tracked process ids in ascending order."""
        with self._lock:
            return sorted(self._pids)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pids)
