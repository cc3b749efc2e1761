"""Utilities package

# Text utilities (정규화 / 필드 추출 / 유사도)
# Resource loader (YAML)
"""

from .resource_loader import get_resource_path, load_search_synonyms, load_yaml_resource
from .text import (
    ParsedWineText,
    calculate_similarity,
    extract_price,
    extract_vintage,
    normalize_text,
    parse_wine_text,
    tokenize,
)

__all__ = [
    # resources
    "get_resource_path",
    "load_yaml_resource",
    "load_search_synonyms",
    # text
    "ParsedWineText",
    "calculate_similarity",
    "extract_price",
    "extract_vintage",
    "normalize_text",
    "parse_wine_text",
    "tokenize",
]
