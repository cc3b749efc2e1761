"""Services implementation package."""

from .catalog_search_service import CatalogSearchService
from .local_wine_cache import FUZZY_FLOOR, FuzzyMatch, LocalWineCache

__all__ = ["CatalogSearchService", "LocalWineCache", "FuzzyMatch", "FUZZY_FLOOR"]
