"""Startup checks run before the service accepts requests."""

import logging
from dataclasses import dataclass
from typing import Any

from .config import settings
from .exceptions import ConfigurationError
from .external_tools import ToolsStatus, tool_checker

logger = logging.getLogger(__name__)


@dataclass
class StartupResult:
    """Result of startup checks."""

    success: bool
    git_available: bool = False
    shell: str = "none"
    tools_status: dict[str, Any] | None = None
    warnings: list[str] | None = None


class StartupError(ConfigurationError):
    """Exception raised when startup checks fail."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(setting="startup", reason=message)
        self.details.update(details or {})


def run_startup_checks() -> StartupResult:
    """Verify the tools searches and commands need.

    Returns:
        StartupResult: Tool availability and any warnings

    Raises:
        StartupError: If git or the platform shell is missing
    """
    logger.info("Checking external tool availability...")
    tools = tool_checker.check_all_tools()
    logger.info(
        "Tool availability: git=%s, shell=%s, kill=%s",
        tools.git.available,
        tools.shell.available,
        tools.kill_tool.available,
    )

    if not tools.all_required_available:
        raise StartupError(
            "Git and the platform shell are required but not available",
            {"errors": _missing_tool_errors(tools), "warnings": []},
        )

    logger.info("Git version: %s", tools.git.version)

    warnings = []
    if not tools.kill_tool.available:
        warnings.append(
            f"{tools.kill_tool.error_message}: running processes cannot be terminated"
        )
    if settings.search_max_workers == 1:
        warnings.append("search_max_workers is 1: files will be scanned sequentially")

    if warnings:
        logger.warning("Startup warnings: %s", "; ".join(warnings))
    logger.info("Startup checks completed successfully")

    return StartupResult(
        success=True,
        git_available=True,
        shell=tools.shell.name,
        tools_status={
            "git": tools.git.available,
            "git_version": tools.git.version,
            "shell": tools.shell.version,
            "kill": tools.kill_tool.available,
        },
        warnings=warnings or None,
    )


def _missing_tool_errors(tools: ToolsStatus) -> list[str]:
    errors = []
    if not tools.git.available:
        errors.append(f"Git not available: {tools.git.error_message}")
        if tools.git.install_suggestion:
            errors.append(f"Solution: {tools.git.install_suggestion}")
    if not tools.shell.available:
        errors.append(f"Shell not available: {tools.shell.error_message}")
    return errors


def format_startup_error(error: StartupError) -> str:
    """Format a startup error for display.

    Args:
        error: The startup error

    Returns:
        str: Formatted error message
    """
    lines = [f"Startup failed: {error}"]

    if error.details.get("errors"):
        lines.append("Errors:")
        lines.extend(f"  - {err}" for err in error.details["errors"])

    if error.details.get("warnings"):
        lines.append("Warnings:")
        lines.extend(f"  - {warn}" for warn in error.details["warnings"])

    return "\n".join(lines)
