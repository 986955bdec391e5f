"""Configuration management for the Workbench Core service."""

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# GitPython logs every git invocation at debug level
NOISY_LOGGERS = ("git.cmd", "git.util")


class Settings(BaseSettings):
    """Service settings, read from ``WORKBENCH_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="WORKBENCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # The editor talks to a local backend
    service_host: str = Field(default="127.0.0.1", description="Service host address")
    service_port: int = Field(default=8000, description="Service port")
    debug: bool = Field(default=False, description="Include tracebacks in error responses")

    # Search
    search_max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Worker threads used to scan files (defaults to the executor's own choice)",
    )

    # Commands and processes
    kill_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for the platform kill command"
    )
    event_poll_interval_seconds: float = Field(
        default=0.5,
        gt=0,
        description="How long an event stream waits on an idle execution before polling again",
    )
    event_retention_seconds: float = Field(
        default=60.0,
        gt=0,
        description="How long a finished execution keeps its events while no stream is attached",
    )
    tool_check_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for external tool version checks"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    # API
    api_title: str = Field(default="Workbench Core Service", description="API title")
    api_description: str = Field(
        default="Project search and command supervision engine for the workbench editor",
        description="API description",
    )
    api_version: str = Field(default="0.1.0", description="API version")
    cors_origins: list[str] = Field(default=["*"], description="List of origins allowed for CORS")
    cors_allow_credentials: bool = Field(
        default=True, description="Allow credentials in CORS requests"
    )

    def setup_logging(self) -> None:
        """Configure application logging, keeping git command tracing quiet unless debugging."""
        level = getattr(logging, self.log_level.upper())
        logging.basicConfig(level=level, format=self.log_format)

        if not self.debug:
            for name in NOISY_LOGGERS:
                logging.getLogger(name).setLevel(max(level, logging.INFO))


# Global settings instance
settings = Settings()
