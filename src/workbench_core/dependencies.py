"""FastAPI dependencies for the workbench service."""

from fastapi import Depends

from .process_supervisor import ProcessSupervisor
from .search_engine import SearchEngine
from .services.execution_service import ExecutionService
from .state import state


def get_search_engine() -> SearchEngine:
    """Get the SearchEngine instance."""
    if state.search_engine is None:
        state.search_engine = SearchEngine()
    return state.search_engine


def get_process_supervisor() -> ProcessSupervisor:
    """Get the ProcessSupervisor instance that owns the running process registry."""
    if state.process_supervisor is None:
        state.process_supervisor = ProcessSupervisor()
    return state.process_supervisor


def get_execution_service(
    supervisor: ProcessSupervisor = Depends(get_process_supervisor),
) -> ExecutionService:
    """Get the ExecutionService instance."""
    if state.execution_service is None:
        state.execution_service = ExecutionService(supervisor)
    return state.execution_service
