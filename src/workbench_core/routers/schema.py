"""Schema router for API and stream payload documents."""

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..models.process import CommandOutput

router = APIRouter(tags=["schema"])


@router.get("/schema")
async def get_openapi_schema(request: Request) -> JSONResponse:
    """Get the OpenAPI document of the service."""
    return JSONResponse(request.app.openapi())


@router.get("/schema/events")
async def get_event_schema() -> dict[str, Any]:
    """Get the JSON schema of one line of the command event stream.

    The events endpoint streams newline-delimited JSON, which OpenAPI cannot
    describe, so clients read the line format from here.
    """
    return CommandOutput.model_json_schema()
