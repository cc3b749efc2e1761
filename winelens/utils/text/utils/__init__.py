"""Field extraction utilities (price, vintage)."""

from .prices import PRICE_PATTERN, extract_price, remove_price_span
from .vintage import extract_vintage

__all__ = [
    "PRICE_PATTERN",
    "extract_price",
    "remove_price_span",
    "extract_vintage",
]
