"""Repositories implementation package."""

from .wine_cache_repository import (
    FileWineCacheRepository,
    RedisWineCacheRepository,
    WineCacheRepository,
    build_wine_cache_repository,
)

__all__ = [
    "WineCacheRepository",
    "FileWineCacheRepository",
    "RedisWineCacheRepository",
    "build_wine_cache_repository",
]
