"""Error handling middleware turning exceptions into ErrorResponse bodies."""

import logging
import traceback
import uuid
from typing import Any

from fastapi import HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from ..exceptions import WorkbenchException
from ..models.errors import ErrorResponse, ValidationErrorDetail

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware mapping exceptions onto status codes and a uniform JSON body.

    Every request gets a correlation id. Errors are logged with it and the id
    is echoed in the response, so a failing search or kill can be traced back
    to its log lines. Client errors (4xx) log at warning level, server errors
    at error level with the traceback.
    """

    def __init__(self, app: Any, include_debug_info: bool = False):
        """Initialize error handler middleware.

        Args:
            app: The ASGI application
            include_debug_info: Whether to add exception type and traceback to 5xx bodies
        """
        super().__init__(app)
        self.include_debug_info = include_debug_info

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        """Run the request and format any exception it raises."""
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        try:
            return await call_next(request)

        except HTTPException:
            # FastAPI formats its own exceptions
            raise

        except PydanticValidationError as exc:
            return self._validation_failure(exc, request, request_id)

        except WorkbenchException as exc:
            return self._workbench_failure(exc, request, request_id)

        except Exception as exc:
            return self._unexpected_failure(exc, request, request_id)

    def _validation_failure(
        self, exc: PydanticValidationError, request: Request, request_id: str
    ) -> JSONResponse:
        self._log(422, request, request_id, exc)

        field_errors = [
            ValidationErrorDetail(
                field=".".join(str(loc) for loc in error["loc"]),
                message=error["msg"],
                invalid_value=error.get("input"),
                constraint=error["type"],
            )
            for error in exc.errors()
        ]
        body = ErrorResponse.validation_error(
            message="Request validation failed",
            field_errors=field_errors,
            path=request.url.path,
            request_id=request_id,
        )
        return self._respond(422, body)

    def _workbench_failure(
        self, exc: WorkbenchException, request: Request, request_id: str
    ) -> JSONResponse:
        status_code = exc.status_code or 500
        self._log(status_code, request, request_id, exc)

        body = ErrorResponse.from_exception(exc, path=request.url.path, request_id=request_id)
        if self.include_debug_info and status_code >= 500:
            body.details["debug"] = self._debug_info(exc)
        return self._respond(status_code, body)

    def _unexpected_failure(
        self, exc: Exception, request: Request, request_id: str
    ) -> JSONResponse:
        self._log(500, request, request_id, exc)

        body = ErrorResponse.internal_server_error(path=request.url.path, request_id=request_id)
        if self.include_debug_info:
            body.details.update(self._debug_info(exc))
            body.details["exception_message"] = str(exc)
        return self._respond(500, body)

    def _log(self, status_code: int, request: Request, request_id: str, exc: Exception) -> None:
        if status_code >= 500:
            logger.error(
                "Server error in request %s %s [%s]: %s",
                request.method,
                request.url.path,
                request_id,
                exc,
                exc_info=exc,
            )
        else:
            logger.warning(
                "Client error in request %s %s [%s]: %s",
                request.method,
                request.url.path,
                request_id,
                exc,
            )

    @staticmethod
    def _debug_info(exc: Exception) -> dict[str, Any]:
        return {
            "exception_type": type(exc).__name__,
            "traceback": traceback.format_exception(exc),
        }

    @staticmethod
    def _respond(status_code: int, body: ErrorResponse) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
