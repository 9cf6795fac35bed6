"""
SnapCal storage API
Main entry point: builds the storage layer for the configured backend and
exposes it over HTTP. The caller is identified by the X-User-Id header.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import uvicorn
from contextlib import asynccontextmanager
import anyio
from typing import Optional

from api.routes import entries, summaries, sync, health
from api.routes import settings as settings_routes

from adapters.identity_adapter import RequestIdentityProvider
from core.dependencies import StorageContainer, build_container

from app.config import Settings, settings

from api.middleware import (
    RequestLoggingMiddleware,
    validation_exception_handler,
    http_exception_handler,
    service_validation_exception_handler,
    not_found_exception_handler,
    unauthorized_exception_handler,
    configuration_exception_handler,
    storage_exception_handler,
    migration_exception_handler,
    general_exception_handler,
)
from app.exceptions import (
    ConfigurationError,
    MigrationError,
    NotFoundError,
    ServiceValidationError,
    StorageError,
    UnauthorizedError,
)

# Setup logging with configured level and format
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
_logger = logging.getLogger("snapcal.main")


async def _build_with_retries(app_settings: Settings) -> StorageContainer:
    """Build the container off the event loop, retrying while the remote database is unreachable"""
    for attempt in range(1, app_settings.db_init_attempts + 1):
        try:
            container = await anyio.to_thread.run_sync(
                lambda: build_container(app_settings, identity=RequestIdentityProvider())
            )
            _logger.info("Storage initialization succeeded")
            return container
        except Exception as exc:
            _logger.warning(
                "Storage init attempt %d/%d failed: %s",
                attempt,
                app_settings.db_init_attempts,
                exc,
            )
            if attempt < app_settings.db_init_attempts:
                await anyio.sleep(app_settings.db_init_delay_sec)
            else:
                _logger.error("Storage initialization failed after %d attempts", attempt)
                raise


def create_app(
    app_settings: Settings = settings, container: Optional[StorageContainer] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    ``container`` lets tests inject a prebuilt storage layer; otherwise one is
    built from ``app_settings`` at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _logger.info(f"Starting SnapCal in {app_settings.environment.value} mode")
        app.state.container = container or await _build_with_retries(app_settings)
        try:
            yield
        finally:
            _logger.info("Shutting down SnapCal")
            app.state.container.close()

    app = FastAPI(
        title=app_settings.api_title,
        version=app_settings.app_version,
        description=app_settings.api_description,
        lifespan=lifespan,
        debug=app_settings.debug,
        openapi_url=(
            f"{app_settings.api_prefix}/openapi.json" if not app_settings.is_production() else None
        ),
        docs_url=f"{app_settings.api_prefix}/docs" if not app_settings.is_production() else None,
        redoc_url=f"{app_settings.api_prefix}/redoc" if not app_settings.is_production() else None,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=app_settings.cors_allow_credentials,
        allow_methods=app_settings.cors_allow_methods,
        allow_headers=app_settings.cors_allow_headers,
    )

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Register exception handlers
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(ServiceValidationError, service_validation_exception_handler)
    app.add_exception_handler(NotFoundError, not_found_exception_handler)
    app.add_exception_handler(UnauthorizedError, unauthorized_exception_handler)
    app.add_exception_handler(ConfigurationError, configuration_exception_handler)
    app.add_exception_handler(StorageError, storage_exception_handler)
    app.add_exception_handler(MigrationError, migration_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(entries.router, prefix=app_settings.api_prefix)
    app.include_router(summaries.router, prefix=app_settings.api_prefix)
    app.include_router(settings_routes.router, prefix=app_settings.api_prefix)
    app.include_router(sync.router, prefix=app_settings.api_prefix)
    app.include_router(health.router, prefix=app_settings.api_prefix)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
