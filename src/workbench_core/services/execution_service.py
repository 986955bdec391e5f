"""Execution service bridging supervisor output to async consumers."""

import logging
import queue
import threading
import uuid
from collections.abc import AsyncGenerator

from starlette.concurrency import run_in_threadpool

from ..config import settings
from ..exceptions import ExecutionNotFoundError
from ..models.process import CommandConfig, CommandOutput, ExecutionHandle
from ..process_supervisor import ProcessSupervisor

logger = logging.getLogger(__name__)


class ExecutionService:
    """
    Service layer for command execution.

    Each execution gets its own thread-safe event channel. The supervisor's
    reader threads push into the channel without waiting on the consumer, and
    an async consumer drains it until the final event arrives.

    A finished execution whose events nobody is streaming keeps its channel
    for ``retention_seconds`` and is then released, so executions that are
    never streamed do not accumulate.
    """

    def __init__(
        self,
        supervisor: ProcessSupervisor,
        poll_interval: float | None = None,
        retention_seconds: float | None = None,
    ):
        """
        Initialize the execution service.

        Args:
            supervisor: ProcessSupervisor used to spawn and kill processes
            poll_interval: Seconds a consumer waits on an idle channel (defaults to settings)
            retention_seconds: Seconds a finished, unstreamed channel is kept (defaults to settings)
        """
        self.supervisor = supervisor
        self.poll_interval = poll_interval or settings.event_poll_interval_seconds
        self.retention_seconds = retention_seconds or settings.event_retention_seconds
        self._channels: dict[str, queue.Queue[CommandOutput]] = {}
        self._attached: set[str] = set()
        self._finished: set[str] = set()
        self._lock = threading.Lock()

    def start(self, config: CommandConfig, project_path: str) -> ExecutionHandle:
        """
        Start a command and open an event channel for it.

        Args:
            config: Command to run
            project_path: Project root for the workspace folder placeholder

        Returns:
            ExecutionHandle for the new execution
        """
        execution_id = uuid.uuid4().hex
        channel: queue.Queue[CommandOutput] = queue.Queue()

        with self._lock:
            self._channels[execution_id] = channel

        def publish(event: CommandOutput) -> None:
            channel.put(event)
            if event.is_final:
                self._mark_finished(execution_id)

        return self.supervisor.execute(config, project_path, publish, execution_id=execution_id)

    def stream_events(self, execution_id: str) -> AsyncGenerator[CommandOutput, None]:
        """
        Open the event stream of an execution.

        The channel is released once the final event has been yielded, so a
        consumer that disconnects early can reconnect and resume.

        Args:
            execution_id: Identifier returned by ``start``

        Returns:
            Async generator of CommandOutput events in arrival order, ending
            with the final event

        Raises:
            ExecutionNotFoundError: If the execution id is unknown, already
                drained or expired
        """
        with self._lock:
            channel = self._channels.get(execution_id)
        if channel is None:
            raise ExecutionNotFoundError(execution_id)
        return self._drain(execution_id, channel)

    async def _drain(
        self, execution_id: str, channel: queue.Queue[CommandOutput]
    ) -> AsyncGenerator[CommandOutput, None]:
        with self._lock:
            self._attached.add(execution_id)
        try:
            while True:
                try:
                    event = await run_in_threadpool(channel.get, timeout=self.poll_interval)
                except queue.Empty:
                    continue

                if event.is_final:
                    self._release_channel(execution_id)
                    yield event
                    return
                yield event
        finally:
            self._detach(execution_id)

    def terminate(self, pid: int) -> None:
        """Forcefully terminate a running process."""
        self.supervisor.terminate(pid)

    def running_pids(self) -> list[int]:
        """Get the ids of all tracked processes."""
        return self.supervisor.running_pids()

    def _mark_finished(self, execution_id: str) -> None:
        with self._lock:
            self._finished.add(execution_id)
            attached = execution_id in self._attached
        if not attached:
            self._schedule_expiry(execution_id)

    def _detach(self, execution_id: str) -> None:
        with self._lock:
            self._attached.discard(execution_id)
            pending = execution_id in self._finished and execution_id in self._channels
        if pending:
            self._schedule_expiry(execution_id)

    def _schedule_expiry(self, execution_id: str) -> None:
        timer = threading.Timer(self.retention_seconds, self._expire, args=(execution_id,))
        timer.daemon = True
        timer.start()

    def _expire(self, execution_id: str) -> None:
        with self._lock:
            if execution_id in self._attached or execution_id not in self._finished:
                return
            self._channels.pop(execution_id, None)
            self._finished.discard(execution_id)
        logger.debug(f"Expired unclaimed event channel for execution {execution_id}")

    def _release_channel(self, execution_id: str) -> None:
        with self._lock:
            self._channels.pop(execution_id, None)
            self._finished.discard(execution_id)
            self._attached.discard(execution_id)
        logger.debug(f"Released event channel for execution {execution_id}")
