"""API routes."""

from litestar import Router

from scuba_log_server.api.dives import dives_router
from scuba_log_server.api.health import health_router
from scuba_log_server.api.interchange import interchange_router
from scuba_log_server.core.config import settings

# Versioned API routers get the configured prefix (default /api/v1)
_v1_routers = [
    dives_router,
    interchange_router,  # CSV/UDDF import and export
]

api_v1_router = Router(path=settings.api_prefix, route_handlers=_v1_routers)

# - health_router: /health - no version prefix
# - api_v1_router: /api/v1/* - dive data endpoints
api_routers = [health_router, api_v1_router]

__all__ = ["api_routers"]
