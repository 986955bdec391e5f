"""Main FastAPI application for the Workbench Core service."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import settings
from .dependencies import get_execution_service, get_process_supervisor, get_search_engine
from .middleware.error_handler import ErrorHandlerMiddleware
from .routers import commands, health, schema, search
from .startup import StartupError, format_startup_error, run_startup_checks
from .state import state

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Check tools and build the engine objects on startup, report leftovers on shutdown."""
    settings.setup_logging()
    logger.info("Starting Workbench Core service version %s", __version__)

    try:
        startup_result = run_startup_checks()
    except StartupError as exc:
        logger.error("Startup failed:\n%s", format_startup_error(exc))
        raise RuntimeError(f"Service startup failed: {exc}") from exc

    state.set_startup_result(startup_result)
    state.set_startup_time(time.time())
    for warning in startup_result.warnings or []:
        logger.warning("Startup warning: %s", warning)

    search_engine = get_search_engine()
    get_execution_service(get_process_supervisor())
    logger.info(
        "Service initialized: search_max_workers=%s, shell=%s",
        search_engine.max_workers or "auto",
        startup_result.shell,
    )

    yield

    # Spawned processes are not killed here; they outlive the service
    running = state.process_supervisor.running_pids() if state.process_supervisor else []
    if running:
        logger.warning("Shutting down with %d tracked processes: %s", len(running), running)
    logger.info("Shutting down Workbench Core service")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(ErrorHandlerMiddleware, include_debug_info=settings.debug)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(search.router)
    app.include_router(commands.router)
    app.include_router(schema.router)

    return app


def main() -> None:
    """Run the service with uvicorn."""
    uvicorn.run(
        create_app(),
        host=settings.service_host,
        port=settings.service_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
