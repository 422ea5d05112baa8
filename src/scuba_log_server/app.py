"""Litestar application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from advanced_alchemy.config.asyncio import AsyncSessionConfig
from advanced_alchemy.extensions.litestar import SQLAlchemyAsyncConfig, SQLAlchemyPlugin
from litestar import Litestar
from litestar.openapi import OpenAPIConfig

from scuba_log_server import __version__
from scuba_log_server.api import api_routers
from scuba_log_server.core.config import settings
from scuba_log_server.core.database import close_database, engine, init_database
from scuba_log_server.core.logging import configure_logging

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: Litestar) -> AsyncIterator[None]:
    """Application lifespan manager.

    Creates missing tables on startup and closes the connection pool on
    shutdown.
    """
    logger.info("Starting scuba-log-server", version=__version__)

    await init_database()
    logger.info("Database initialized")

    yield

    await close_database()
    logger.info("Shutdown complete")


def create_app() -> Litestar:
    """Create Litestar application.

    Returns:
        Configured Litestar app instance
    """
    return Litestar(
        route_handlers=api_routers,
        lifespan=[lifespan],
        openapi_config=OpenAPIConfig(
            title="scuba-log-server API",
            version=__version__,
            description="Dive log import and export (CSV and UDDF)",
        ),
        plugins=[
            SQLAlchemyPlugin(
                config=SQLAlchemyAsyncConfig(
                    engine_instance=engine,
                    session_dependency_key="session",
                    session_config=AsyncSessionConfig(expire_on_commit=False),
                ),
            ),
        ],
        request_max_body_size=settings.max_import_bytes + 64 * 1024,
        debug=settings.log_level == "DEBUG",
    )


# Application instance
app = create_app()
