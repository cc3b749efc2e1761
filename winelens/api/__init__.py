"""API 엔드포인트 패키지 - export only."""

from .routes import (
    get_catalog_service,
    get_search_service,
    health_router,
    shutdown_search_service,
    wine_router,
)

__all__ = [
    "health_router",
    "wine_router",
    "get_catalog_service",
    "get_search_service",
    "shutdown_search_service",
]
