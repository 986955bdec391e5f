"""Command execution and process management router."""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ..dependencies import get_execution_service
from ..models.process import CommandOutput, ExecuteRequest, ExecutionHandle
from ..services.execution_service import ExecutionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["commands"])

NDJSON_MEDIA_TYPE = "application/x-ndjson"


@router.post("/commands/execute", status_code=202, response_model=ExecutionHandle)
def execute_command(
    request: ExecuteRequest,
    execution_service: ExecutionService = Depends(get_execution_service),
) -> ExecutionHandle:
    """Start a command and return immediately.

    Output is read from ``/commands/{execution_id}/events``. A command that
    fails to spawn is still acknowledged; its stream holds a single final
    error event and ``started`` is false.

    Args:
        request: Command configuration and project path
        execution_service: Injected execution service

    Returns:
        ExecutionHandle: Execution id and process id
    """
    logger.info(
        f"POST /commands/execute - name={request.config.name}, project={request.project_path}"
    )
    return execution_service.start(request.config, request.project_path)


@router.get("/commands/{execution_id}/events")
def stream_command_events(
    execution_id: str,
    execution_service: ExecutionService = Depends(get_execution_service),
) -> StreamingResponse:
    """Stream the output events of an execution as newline-delimited JSON.

    The stream ends after the event with ``is_final`` set.

    Args:
        execution_id: Identifier returned by the execute endpoint
        execution_service: Injected execution service

    Returns:
        StreamingResponse: One CommandOutput JSON object per line

    Raises:
        ExecutionNotFoundError: If the execution is unknown or already drained (404)
    """
    events = execution_service.stream_events(execution_id)
    return StreamingResponse(_encode_events(events), media_type=NDJSON_MEDIA_TYPE)


@router.get("/processes")
def list_processes(
    execution_service: ExecutionService = Depends(get_execution_service),
) -> dict[str, list[int]]:
    """List the process ids currently tracked as running."""
    return {"pids": execution_service.running_pids()}


@router.delete("/processes/{pid}")
def terminate_process(
    pid: int,
    execution_service: ExecutionService = Depends(get_execution_service),
) -> dict[str, Any]:
    """Forcefully terminate a running process.

    Args:
        pid: Process id from an ExecutionHandle
        execution_service: Injected execution service

    Returns:
        dict: Confirmation of the termination

    Raises:
        ProcessNotFoundError: If the pid is not tracked (404)
        ProcessSignalError: If the kill call fails (500)
    """
    logger.info(f"DELETE /processes/{pid}")
    execution_service.terminate(pid)
    return {"pid": pid, "terminated": True}


async def _encode_events(
    events: AsyncGenerator[CommandOutput, None],
) -> AsyncGenerator[str, None]:
    async for event in events:
        yield event.model_dump_json() + "\n"
