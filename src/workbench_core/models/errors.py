"""Error response bodies returned by the HTTP layer."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from ..exceptions import WorkbenchException


class ValidationErrorDetail(BaseModel):
    """One rejected field of a request body."""

    field: str = Field(description="Dotted location of the field, e.g. 'options.use_regex'")
    message: str = Field(description="Why the value was rejected")
    invalid_value: Any = Field(description="The rejected value")
    constraint: str | None = Field(description="Pydantic error type")


class ErrorResponse(BaseModel):
    """JSON body of every error the service reports."""

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Context such as the pid, pattern or project path"
    )
    path: str | None = Field(default=None, description="Request path that failed")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the error occurred"
    )
    request_id: str | None = Field(default=None, description="Correlation id found in the logs")

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        path: str | None = None,
        request_id: str | None = None,
    ) -> "ErrorResponse":
        """Build a response from a workbench exception or any other exception.

        Workbench exceptions keep their own code and details. Other exceptions
        get a code derived from their type name, e.g. ``KeyError`` becomes
        ``key_error``.
        """
        if isinstance(exc, WorkbenchException):
            return cls(
                error=exc.error_code,
                message=exc.message,
                details=dict(exc.details),
                path=path,
                request_id=request_id,
            )

        error_code = type(exc).__name__.lower().replace("error", "_error")
        if not error_code.endswith("_error"):
            error_code += "_error"

        return cls(
            error=error_code,
            message=str(exc),
            details={"exception_type": type(exc).__name__},
            path=path,
            request_id=request_id,
        )

    @classmethod
    def validation_error(
        cls,
        message: str,
        field_errors: list[ValidationErrorDetail] | None = None,
        path: str | None = None,
        request_id: str | None = None,
    ) -> "ErrorResponse":
        """Build a 422 body listing every rejected field."""
        details = {}
        if field_errors:
            details["field_errors"] = [error.model_dump(mode="json") for error in field_errors]

        return cls(
            error="validation_error",
            message=message,
            details=details,
            path=path,
            request_id=request_id,
        )

    @classmethod
    def internal_server_error(
        cls,
        path: str | None = None,
        request_id: str | None = None,
    ) -> "ErrorResponse":
        """Build a sanitized 500 body that does not leak the underlying error."""
        return cls(
            error="internal_server_error",
            message="An internal server error occurred",
            path=path,
            request_id=request_id,
        )
