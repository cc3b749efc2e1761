"""Price extraction helpers."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Optional


# "$350", "$ 1,200", "$89.50"
PRICE_PATTERN = re.compile(r"\$\s*([\d,]+(?:\.\d{2})?)")


def extract_price(text: str) -> Optional[Decimal]:
    """텍스트에서 첫 번째 달러 가격을 추출.

    Args:
        text: 와인 리스트 원문 라인

    Returns:
        Decimal 가격 또는 None (가격이 없거나 해석 불가)
    """
    if not text:
        return None

    match = PRICE_PATTERN.search(text)
    if not match:
        return None

    price_str = match.group(1).replace(",", "")
    if not price_str:
        return None

    try:
        return Decimal(price_str)
    except (InvalidOperation, ValueError):
        return None


def remove_price_span(text: str) -> str:
    """첫 번째 가격 표기를 제거하고 앞뒤 공백을 정리."""
    if not text:
        return ""
    return PRICE_PATTERN.sub("", text, count=1).strip()
