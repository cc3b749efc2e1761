"""API routes package."""

from .health_routes import router as health_router
from .wine_routes import (
    get_catalog_service,
    get_search_service,
    router as wine_router,
    shutdown_search_service,
)

__all__ = [
    "health_router",
    "wine_router",
    "get_catalog_service",
    "get_search_service",
    "shutdown_search_service",
]
