"""Tests for the execution service event channels."""

import asyncio
import os
from unittest.mock import patch

import pytest

from workbench_core.exceptions import ExecutionNotFoundError
from workbench_core.models.process import CommandConfig
from workbench_core.process_registry import RunningProcessRegistry
from workbench_core.process_supervisor import ProcessSupervisor
from workbench_core.services.execution_service import ExecutionService

pytestmark = pytest.mark.skipif(os.name == "nt", reason="uses POSIX shell commands")


@pytest.fixture
def execution_service() -> ExecutionService:
    """Create an execution service with a fresh supervisor."""
    return ExecutionService(ProcessSupervisor(registry=RunningProcessRegistry()))


async def _collect(execution_service: ExecutionService, execution_id: str) -> list:
    return [event async for event in execution_service.stream_events(execution_id)]


class TestExecutionService:
    """Test starting executions and draining their events."""

    async def test_stream_ends_with_final_event(self, execution_service, project_dir):
        config = CommandConfig(name="echo", command="echo one; echo two")

        handle = execution_service.start(config, str(project_dir))
        events = await _collect(execution_service, handle.execution_id)

        assert handle.started is True
        assert [e.output for e in events[:-1]] == ["one", "two"]
        assert events[-1].is_final
        assert events[-1].output == "Process exited with code 0"

    async def test_drained_execution_is_released(self, execution_service, project_dir):
        config = CommandConfig(name="true", command="true")

        handle = execution_service.start(config, str(project_dir))
        await _collect(execution_service, handle.execution_id)

        with pytest.raises(ExecutionNotFoundError):
            execution_service.stream_events(handle.execution_id)

    async def test_unknown_execution(self, execution_service):
        with pytest.raises(ExecutionNotFoundError) as exc_info:
            execution_service.stream_events("does-not-exist")

        assert exc_info.value.status_code == 404
        assert exc_info.value.details["execution_id"] == "does-not-exist"

    async def test_terminate_through_service(self, execution_service, project_dir):
        config = CommandConfig(name="sleep", command="exec sleep 30")

        handle = execution_service.start(config, str(project_dir))
        assert handle.pid in execution_service.running_pids()

        execution_service.terminate(handle.pid)
        events = await _collect(execution_service, handle.execution_id)

        assert handle.pid not in execution_service.running_pids()
        assert events[-1].output == "Process terminated by signal 9"
        assert events[-1].is_error is True


class TestChannelRetention:
    """Test that finished executions nobody streams are released."""

    @pytest.fixture
    def short_retention_service(self) -> ExecutionService:
        return ExecutionService(
            ProcessSupervisor(registry=RunningProcessRegistry()), retention_seconds=0.2
        )

    async def _wait_for_no_channels(self, service: ExecutionService) -> bool:
        for _ in range(100):
            if not service._channels:
                return True
            await asyncio.sleep(0.05)
        return False

    async def test_unstreamed_executions_expire(self, short_retention_service, project_dir):
        handles = [
            short_retention_service.start(
                CommandConfig(name="true", command="true"), str(project_dir)
            )
            for _ in range(5)
        ]

        assert await self._wait_for_no_channels(short_retention_service)
        assert short_retention_service.running_pids() == []
        with pytest.raises(ExecutionNotFoundError):
            short_retention_service.stream_events(handles[0].execution_id)

    async def test_spawn_failure_channel_expires(self, short_retention_service, project_dir):
        config = CommandConfig(name="broken", command="echo never")

        with patch(
            "workbench_core.process_supervisor.subprocess.Popen",
            side_effect=OSError("No such file or directory"),
        ):
            handle = short_retention_service.start(config, str(project_dir))

        assert handle.started is False
        assert await self._wait_for_no_channels(short_retention_service)

    async def test_attached_stream_is_not_expired(self, short_retention_service, project_dir):
        """A consumer that is still reading keeps every event of the execution."""
        config = CommandConfig(name="echo", command="echo one; echo two")
        handle = short_retention_service.start(config, str(project_dir))

        events = short_retention_service.stream_events(handle.execution_id)
        first = await anext(events)
        await asyncio.sleep(0.5)
        rest = [event async for event in events]

        assert first.output == "one"
        assert [e.output for e in rest] == ["two", "Process exited with code 0"]

    async def test_detached_consumer_can_resume_until_expiry(
        self, short_retention_service, project_dir
    ):
        config = CommandConfig(name="echo", command="echo one; echo two")
        handle = short_retention_service.start(config, str(project_dir))

        events = short_retention_service.stream_events(handle.execution_id)
        assert (await anext(events)).output == "one"
        await events.aclose()

        resumed = [e async for e in short_retention_service.stream_events(handle.execution_id)]
        assert resumed[-1].is_final

        assert await self._wait_for_no_channels(short_retention_service)
