"""Text utilities (modularized).

Public API is kept stable while implementation is organized under:
- core/
- matching/
- utils/
"""

from .core.normalize import normalize_text, strip_diacritics, tokenize
from .matching import (
    calculate_similarity,
    edit_distance,
    edit_similarity,
    jaccard_similarity,
)
from .parsing import ParsedWineText, parse_wine_text
from .utils import extract_price, extract_vintage, remove_price_span

__all__ = [
    # core
    "normalize_text",
    "strip_diacritics",
    "tokenize",
    # matching/sim
    "calculate_similarity",
    "edit_distance",
    "edit_similarity",
    "jaccard_similarity",
    # parsing
    "ParsedWineText",
    "parse_wine_text",
    # fields
    "extract_price",
    "extract_vintage",
    "remove_price_span",
]
