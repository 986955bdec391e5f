"""Health check router for service monitoring."""

from typing import Any

from fastapi import APIRouter

from .. import __version__
from ..state import get_startup_result, state

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Report service status and the availability of git and the shell.

    The status is ``degraded`` when startup produced warnings, for example a
    missing kill tool. Before the startup checks have run, tool availability
    is reported as ``unknown``.
    """
    health_info: dict[str, Any] = {
        "status": "healthy",
        "version": __version__,
        "service": "workbench-core",
        "uptime_seconds": state.uptime_seconds,
        "running_processes": state.running_process_count(),
    }

    startup_result = get_startup_result()
    if startup_result is None:
        health_info["git_available"] = "unknown"
        return health_info

    health_info["git_available"] = startup_result.git_available
    health_info["shell"] = startup_result.shell
    if startup_result.tools_status:
        health_info["tools"] = startup_result.tools_status
    if startup_result.warnings:
        health_info["status"] = "degraded"
        health_info["warnings"] = startup_result.warnings

    return health_info
