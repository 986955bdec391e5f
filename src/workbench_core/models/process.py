"""Command execution models."""

from pydantic import BaseModel, ConfigDict, Field

WORKSPACE_FOLDER_PLACEHOLDER = "${workspaceFolder}"


class CommandConfig(BaseModel):
    """A user-defined build or run command."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name of the command")
    command: str = Field(description="Shell command line, executed as-is")
    args: list[str] = Field(
        description="Informational only; the command string is not extended with these",
        default_factory=list,
    )
    cwd: str = Field(
        description=f"Working directory; may contain {WORKSPACE_FOLDER_PLACEHOLDER}",
        default=WORKSPACE_FOLDER_PLACEHOLDER,
    )
    env: dict[str, str] | None = Field(
        description="Environment variables layered over the inherited environment",
        default=None,
    )


class CommandOutput(BaseModel):
    """One event emitted over the lifetime of a spawned process."""

    model_config = ConfigDict(frozen=True)

    output: str = Field(description="One line of output, or the exit summary")
    is_error: bool = Field(description="Whether the line came from stderr or reports a failure")
    is_final: bool = Field(description="True only for the terminating summary event")


class ExecutionHandle(BaseModel):
    """Acknowledgement returned when an execution request is accepted."""

    execution_id: str = Field(description="Identifier of the event stream for this execution")
    name: str = Field(description="Name of the command being executed")
    pid: int | None = Field(description="OS process id, or None when spawning failed")
    started: bool = Field(description="Whether the process was spawned")


class ExecuteRequest(BaseModel):
    """Request body for the execute endpoint."""

    config: CommandConfig = Field(description="Command to run")
    project_path: str = Field(description="Value substituted for the workspace folder placeholder")
