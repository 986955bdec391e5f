"""Spawning and supervision of external build/run commands."""

import logging
import os
import subprocess
import threading
import uuid
from collections.abc import Callable
from contextlib import nullcontext
from pathlib import Path
from typing import IO

from .exceptions import ProcessNotFoundError, ProcessSpawnError
from .models.process import CommandConfig, CommandOutput, ExecutionHandle
from .path_utils import resolve_working_directory
from .process_killer import ProcessKiller, get_process_killer
from .process_registry import RunningProcessRegistry

logger = logging.getLogger(__name__)

OutputListener = Callable[[CommandOutput], None]


def build_shell_command(command: str) -> list[str]:
    """Wrap a raw command line in the platform shell."""
    if os.name == "nt":
        return ["cmd", "/C", command]
    return ["sh", "-c", command]


def describe_exit(returncode: int) -> str:
    """Describe a process exit status for the final output event."""
    if returncode < 0:
        return f"Process terminated by signal {-returncode}"
    return f"Process exited with code {returncode}"


def _wait_unreaped(process: subprocess.Popen) -> None:
    """Block until the process exits, leaving it a zombie where the platform allows.

    An unreaped zombie keeps its pid reserved. Windows keeps the pid reserved
    while the Popen handle is open, so a plain wait is enough there.
    """
    if hasattr(os, "waitid"):
        os.waitid(os.P_PID, process.pid, os.WEXITED | os.WNOWAIT)
    else:
        process.wait()


def _decode_line(raw: bytes) -> str:
    line = raw.decode("utf-8", errors="replace")
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


class ProcessSupervisor:
    """
    Launches shell commands and streams their output to a listener.

    Every execution gets a supervisor thread that owns the child process and
    two reader threads, one per output stream. Lines are delivered in the
    order each stream produced them; stdout and stderr lines may interleave
    arbitrarily. The last event of every execution has ``is_final`` set.

    Each command runs in its own session, so terminating it kills every
    process the command started and the output pipes close.
    """

    def __init__(
        self,
        registry: RunningProcessRegistry | None = None,
        killer: ProcessKiller | None = None,
    ):
        """
        Initialize the process supervisor.

        Args:
            registry: Registry of running process ids
            killer: Platform process killer
        """
        self.registry = registry if registry is not None else RunningProcessRegistry()
        self.killer = killer or get_process_killer()
        # Held while a pid is killed or reaped, so a kill never hits a reused pid
        self._reap_guards: dict[int, threading.Lock] = {}

    def execute(
        self,
        config: CommandConfig,
        project_path: str,
        listener: OutputListener,
        execution_id: str | None = None,
    ) -> ExecutionHandle:
        """
        Spawn a command and start streaming its output.

        Returns as soon as the process is spawned; output arrives later through
        ``listener``, which is called from background threads.

        Args:
            config: Command to run
            project_path: Value for the workspace folder placeholder
            listener: Receives every CommandOutput event of this execution
            execution_id: Identifier to report in the handle (generated if None)

        Returns:
            ExecutionHandle describing the spawned process
        """
        execution_id = execution_id or uuid.uuid4().hex
        cwd = resolve_working_directory(config.cwd, project_path)

        working_dir: str | None = cwd
        if not Path(cwd).exists():
            logger.warning(f"Working directory does not exist for '{config.name}': {cwd}")
            self._emit(
                listener,
                CommandOutput(
                    output=f"Warning: working directory does not exist: {cwd}",
                    is_error=True,
                    is_final=False,
                ),
            )
            working_dir = None

        env = None
        if config.env:
            env = {**os.environ, **config.env}

        logger.info(f"Executing '{config.name}' [{execution_id}]: {config.command}")

        try:
            process = subprocess.Popen(  # noqa: S603
                build_shell_command(config.command),
                cwd=working_dir,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=True,
            )
        except (OSError, ValueError) as e:
            error = ProcessSpawnError(config.command, str(e))
            logger.error(f"Spawn failed for '{config.name}' [{execution_id}]: {e}")
            self._emit(listener, CommandOutput(output=error.message, is_error=True, is_final=True))
            return ExecutionHandle(
                execution_id=execution_id, name=config.name, pid=None, started=False
            )

        self._reap_guards[process.pid] = threading.Lock()
        self.registry.insert(process.pid)

        supervisor = threading.Thread(
            target=self._supervise,
            args=(process, listener),
            name=f"supervisor-{process.pid}",
            daemon=True,
        )
        supervisor.start()

        return ExecutionHandle(
            execution_id=execution_id, name=config.name, pid=process.pid, started=True
        )

    def terminate(self, pid: int) -> None:
        """
        Forcefully terminate a tracked process.

        The pid is removed from the registry before the kill is attempted and
        is not restored if the kill fails.

        Args:
            pid: Process id returned by ``execute``

        Raises:
            ProcessNotFoundError: If the pid is not tracked
            ProcessSignalError: If the kill call fails
        """
        with self._reap_guards.get(pid) or nullcontext():
            if not self.registry.remove(pid):
                logger.warning(f"Terminate requested for untracked process {pid}")
                raise ProcessNotFoundError(pid)

            self.killer.kill(pid)
        logger.info(f"Process {pid} killed")

    def running_pids(self) -> list[int]:
        """Get the ids of all tracked processes."""
        return self.registry.snapshot()

    def _supervise(self, process: subprocess.Popen, listener: OutputListener) -> None:
        readers = [
            threading.Thread(
                target=self._pump,
                args=(process.stdout, False, listener),
                name=f"stdout-{process.pid}",
                daemon=True,
            ),
            threading.Thread(
                target=self._pump,
                args=(process.stderr, True, listener),
                name=f"stderr-{process.pid}",
                daemon=True,
            ),
        ]
        for reader in readers:
            reader.start()
        for reader in readers:
            reader.join()

        _wait_unreaped(process)
        with self._reap_guards[process.pid]:
            self.registry.remove(process.pid)
            self._reap_guards.pop(process.pid)
            returncode = process.wait()
        logger.info(f"Process {process.pid} finished: {describe_exit(returncode)}")

        self._emit(
            listener,
            CommandOutput(
                output=describe_exit(returncode), is_error=returncode != 0, is_final=True
            ),
        )

    def _pump(self, stream: IO[bytes], is_error: bool, listener: OutputListener) -> None:
        with stream:
            for raw in iter(stream.readline, b""):
                self._emit(
                    listener,
                    CommandOutput(output=_decode_line(raw), is_error=is_error, is_final=False),
                )

    def _emit(self, listener: OutputListener, event: CommandOutput) -> None:
        try:
            listener(event)
        except Exception:
            logger.exception("Output listener failed")
