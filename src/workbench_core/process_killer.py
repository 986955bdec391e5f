"""Platform-specific forceful process termination."""

import logging
import os
import signal
import subprocess
from abc import ABC, abstractmethod

from .config import settings
from .exceptions import ProcessSignalError

logger = logging.getLogger(__name__)


class ProcessKiller(ABC):
    """Forcefully terminates a process by id. Failures are raised, never retried."""

    @abstractmethod
    def kill(self, pid: int) -> None:
        """
        Forcefully terminate a process.

        Args:
            pid: Process id to kill

        Raises:
            ProcessSignalError: If the process could not be killed
        """


class PosixProcessKiller(ProcessKiller):
    """Sends SIGKILL to the process group led by ``pid``, the equivalent of ``kill -9 -pid``.

    Commands are spawned in their own session, so the group holds the shell
    and every child it started.
    """

    def kill(self, pid: int) -> None:
        logger.info(f"Sending SIGKILL to process group {pid}")
        try:
            os.killpg(pid, signal.SIGKILL)
        except OSError as e:
            raise ProcessSignalError(pid, e.strerror or str(e)) from e


class WindowsProcessKiller(ProcessKiller):
    """Terminates the process tree through ``taskkill /F /T``."""

    def __init__(self, timeout_seconds: float | None = None):
        """Initialize the killer.

        Args:
            timeout_seconds: Timeout for the taskkill command (defaults to settings)
        """
        self.timeout_seconds = timeout_seconds or settings.kill_timeout_seconds

    def kill(self, pid: int) -> None:
        cmd = ["taskkill", "/F", "/T", "/PID", str(pid)]
        logger.info(f"Killing process {pid}: {' '.join(cmd)}")

        try:
            result = subprocess.run(  # noqa: S603
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as e:
            raise ProcessSignalError(pid, f"taskkill timed out after {e.timeout}s") from e
        except OSError as e:
            raise ProcessSignalError(pid, str(e)) from e

        if result.returncode != 0:
            reason = result.stderr.strip() or f"taskkill exited with code {result.returncode}"
            raise ProcessSignalError(pid, reason)


def get_process_killer() -> ProcessKiller:
    """Get the process killer for the current platform."""
    if os.name == "nt":
        return WindowsProcessKiller()
    return PosixProcessKiller()
