"""Storage manager FastAPI application."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from storagemanager import __version__
from storagemanager.api.dependencies import close_orchestrator, init_orchestrator
from storagemanager.api.v1 import health_router, organizations_router, spaces_router
from storagemanager.config import ManagerConfig, get_config
from storagemanager.errors import StorageManagerError, UnknownStorageError
from storagemanager.logging import setup_logging
from storagemanager.logging_schema import LogEvent

# Import metrics to ensure they are registered
import storagemanager.metrics  # noqa: F401

logger = logging.getLogger(__name__)


def _error_response(exc: StorageManagerError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


async def handle_manager_error(request: Request, exc: StorageManagerError) -> JSONResponse:
    """Render a classified error with its category's status."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        exc.message,
        extra={
            "event": LogEvent.MANAGER_ERROR,
            "error_code": exc.code.value,
            "category": exc.category.value,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return _error_response(exc)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Render anything unclassified as UNKNOWN_ERROR; the traceback only goes to the log."""
    logger.exception(
        "Unhandled exception",
        extra={
            "event": LogEvent.UNHANDLED_EXCEPTION,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return _error_response(UnknownStorageError())


async def metrics() -> Response:
    """Expose Prometheus metrics."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def create_app(config: ManagerConfig) -> FastAPI:
    """Build the application for a configuration.

    The provider is created on startup. Shutdown sets the cancel event seen
    by pending container retries before the provider clients are closed.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Starting storage manager",
            extra={
                "event": LogEvent.APP_STARTED,
                "version": __version__,
                "provider": config.provider.value,
            },
        )
        shutdown = asyncio.Event()
        await init_orchestrator(config, cancel=shutdown)
        try:
            yield
        finally:
            logger.info("Shutting down storage manager", extra={"event": LogEvent.APP_STOPPED})
            shutdown.set()
            await close_orchestrator()

    application = FastAPI(
        title="Storage Manager",
        description="Provisions organization and space storage on Azure, S3 or local disk",
        version=__version__,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_exception_handler(StorageManagerError, handle_manager_error)
    application.add_exception_handler(Exception, handle_unexpected_error)

    # /health without prefix for probes
    application.include_router(health_router)
    application.include_router(organizations_router)
    application.include_router(spaces_router)
    application.add_api_route("/metrics", metrics, methods=["GET"], include_in_schema=False)
    return application


_config = get_config()
setup_logging(_config.logging)
app = create_app(_config)


def main() -> None:
    """Run the storage manager server."""
    uvicorn.run(
        "storagemanager.main:app",
        host=_config.server.host,
        port=_config.server.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
