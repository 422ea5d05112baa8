"""Liveness endpoint."""

from litestar import Router, get
from litestar.status_codes import HTTP_200_OK

from scuba_log_server import __version__
from scuba_log_server.core.config import settings


@get("/health", status_code=HTTP_200_OK, sync_to_thread=False)
def health_check() -> dict[str, str]:
    """Report that the server is up, with its version and storage backend."""
    return {
        "status": "ok",
        "version": __version__,
        "database": "sqlite" if settings.is_sqlite() else "server",
    }


health_router = Router(path="/", route_handlers=[health_check])
