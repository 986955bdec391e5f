"""Global application state shared by the routers."""

import logging
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .process_supervisor import ProcessSupervisor
    from .search_engine import SearchEngine
    from .services.execution_service import ExecutionService
    from .startup import StartupResult

logger = logging.getLogger(__name__)


class ApplicationState:
    """Holds the startup result and the long-lived engine objects.

    The process supervisor owns the registry of running processes, so one
    instance must serve every request for terminate calls to find the pids
    that execute calls registered.
    """

    def __init__(self):
        self.startup_time: float | None = None
        self.startup_result: StartupResult | None = None
        self.search_engine: SearchEngine | None = None
        self.process_supervisor: ProcessSupervisor | None = None
        self.execution_service: ExecutionService | None = None

    def set_startup_time(self, startup_time: float) -> None:
        """Set the application startup time."""
        self.startup_time = startup_time
        logger.info(f"Application startup time set: {startup_time}")

    def set_startup_result(self, startup_result: "StartupResult") -> None:
        """Set the result of the startup checks."""
        self.startup_result = startup_result
        logger.debug("Startup result updated")

    @property
    def is_initialized(self) -> bool:
        """Check if the startup checks have run."""
        return self.startup_time is not None and self.startup_result is not None

    @property
    def uptime_seconds(self) -> float | None:
        """Seconds since startup, or None before the lifespan has run."""
        if self.startup_time is None:
            return None
        return time.time() - self.startup_time

    def running_process_count(self) -> int:
        """Number of processes currently tracked as running."""
        if self.process_supervisor is None:
            return 0
        return len(self.process_supervisor.registry)


# Global state instance
state = ApplicationState()


def get_startup_result() -> "StartupResult | None":
    """Get the startup result."""
    return state.startup_result
