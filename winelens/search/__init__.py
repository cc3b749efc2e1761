"""Catalog search layer - 원격 카탈로그 인덱스 (질의/필터/인덱싱/삭제)"""

from .algolia import INDEX_SETTINGS, AlgoliaSearchService
from .base import SearchService
from .records import (
    build_filter_string,
    calculate_confidence,
    record_to_wine,
    wine_to_record,
)

__all__ = [
    "SearchService",
    "AlgoliaSearchService",
    "INDEX_SETTINGS",
    "build_filter_string",
    "calculate_confidence",
    "record_to_wine",
    "wine_to_record",
]
