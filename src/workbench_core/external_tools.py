"""Availability checks for the programs searches and commands depend on."""

import os
import shutil
import subprocess
from dataclasses import dataclass

from .config import settings


@dataclass
class ToolCheck:
    """Result of checking an external tool."""

    name: str
    available: bool
    version: str | None = None
    error_message: str | None = None
    install_suggestion: str | None = None


@dataclass
class ToolsStatus:
    """Status of all external tools."""

    git: ToolCheck
    shell: ToolCheck
    kill_tool: ToolCheck
    all_required_available: bool


class ExternalToolChecker:
    """Checks for git, the platform shell and the platform kill tool."""

    def __init__(self, timeout_seconds: float | None = None):
        """Initialize the external tool checker.

        Args:
            timeout_seconds: Timeout for version commands (defaults to settings)
        """
        self.timeout_seconds = timeout_seconds or settings.tool_check_timeout_seconds

    def check_all_tools(self) -> ToolsStatus:
        """Check all external tools.

        Git backs ignore-aware traversal and the shell runs every command, so
        both are required. A missing kill tool only breaks termination.
        """
        git_check = self.check_git()
        shell_check = self.check_shell()

        return ToolsStatus(
            git=git_check,
            shell=shell_check,
            kill_tool=self.check_kill_tool(),
            all_required_available=git_check.available and shell_check.available,
        )

    def check_git(self) -> ToolCheck:
        """Check that git is installed and answers ``git --version``."""
        if not shutil.which("git"):
            return ToolCheck(
                name="git",
                available=False,
                error_message="Git command not found",
                install_suggestion="Install git: https://git-scm.com/downloads",
            )

        try:
            result = subprocess.run(  # noqa: S603
                ["git", "--version"],  # noqa: S607
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            return ToolCheck(name="git", available=False, error_message="Git command timed out")
        except OSError as exc:
            return ToolCheck(
                name="git", available=False, error_message=f"Error checking git: {exc}"
            )

        if result.returncode != 0:
            return ToolCheck(
                name="git",
                available=False,
                error_message=f"Git command failed: {result.stderr}",
            )
        return ToolCheck(name="git", available=True, version=result.stdout.strip())

    def check_shell(self) -> ToolCheck:
        """Check that the shell commands are run through exists on PATH."""
        return self._check_on_path("cmd" if os.name == "nt" else "sh")

    def check_kill_tool(self) -> ToolCheck:
        """Check the tool used for forced termination.

        POSIX platforms signal processes directly, so only Windows needs
        ``taskkill`` on PATH.
        """
        if os.name != "nt":
            return ToolCheck(name="kill", available=True, version="SIGKILL")
        return self._check_on_path("taskkill")

    def _check_on_path(self, name: str) -> ToolCheck:
        location = shutil.which(name)
        if not location:
            return ToolCheck(
                name=name,
                available=False,
                error_message=f"'{name}' not found on PATH",
            )
        return ToolCheck(name=name, available=True, version=location)


# Global instance
tool_checker = ExternalToolChecker()
