"""Exception hierarchy for search and process supervision failures.

Every exception carries a machine-readable error code, a details mapping and
the HTTP status code the error handling middleware responds with. Failures
confined to one file or one output line are never raised; they are skipped or
reported as events instead.
"""

import re
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class WorkbenchException(Exception):  # noqa: N818
    """Base exception for all workbench operations."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ):
        """Initialize workbench exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code (defaults to class name in snake_case)
            details: Additional context and error details
            status_code: HTTP status code to return (default: 500)
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or _CAMEL_BOUNDARY.sub("_", type(self).__name__).lower()
        self.details = details or {}
        self.status_code = status_code


class ValidationError(WorkbenchException):
    """Rejected caller input."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field
        if value is not None:
            error_details["invalid_value"] = str(value)

        super().__init__(message=message, details=error_details, status_code=400)


class InvalidSearchPatternError(ValidationError):
    """The search term is empty or not a valid regular expression."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(
            message=f"Invalid search pattern: {reason}",
            field="search_term",
            value=pattern,
            details={"reason": reason},
        )


class SearchError(WorkbenchException):
    """Base class for failures that abort a whole search."""

    def __init__(
        self,
        message: str,
        project_path: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ):
        error_details = details or {}
        if project_path:
            error_details["project_path"] = project_path

        super().__init__(message=message, details=error_details, status_code=status_code)


class ProjectRootError(SearchError):
    """The project root is missing, not a directory or cannot be listed."""

    def __init__(self, project_path: str, reason: str):
        super().__init__(
            message=f"Cannot read project root '{project_path}': {reason}",
            project_path=project_path,
            details={"reason": reason},
            status_code=404,
        )


class ProcessError(WorkbenchException):
    """Base class for process supervision errors."""

    def __init__(
        self,
        message: str,
        pid: int | None = None,
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ):
        error_details = details or {}
        if pid is not None:
            error_details["pid"] = pid

        super().__init__(message=message, details=error_details, status_code=status_code)


class ProcessSpawnError(ProcessError):
    """A command could not be launched.

    Never raised to callers of ``execute``: its message becomes the single
    final error event of the execution.
    """

    def __init__(self, command: str, reason: str):
        super().__init__(
            message=f"Failed to execute command: {reason}",
            details={"command": command, "reason": reason},
        )


class ProcessNotFoundError(ProcessError):
    """Terminate was called with a pid that is not tracked."""

    def __init__(self, pid: int):
        super().__init__(message="process not found", pid=pid, status_code=404)


class ProcessSignalError(ProcessError):
    """The platform kill call failed. The pid is already untracked when this is raised."""

    def __init__(self, pid: int, reason: str):
        super().__init__(
            message=f"Failed to kill process {pid}: {reason}",
            pid=pid,
            details={"reason": reason},
        )


class ExecutionNotFoundError(WorkbenchException):
    """An execution id has no event stream, either unknown or already drained."""

    def __init__(self, execution_id: str):
        super().__init__(
            message=f"Execution not found: {execution_id}",
            details={"execution_id": execution_id},
            status_code=404,
        )


class ConfigurationError(WorkbenchException):
    """Raised when there are configuration or setup errors."""

    def __init__(self, setting: str, reason: str):
        super().__init__(
            message=f"Configuration error for '{setting}': {reason}",
            details={"setting": setting, "reason": reason},
            status_code=500,
        )
