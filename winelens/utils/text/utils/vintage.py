"""Vintage (year) extraction helpers."""

from __future__ import annotations

import re
from typing import Optional


# 1950 ~ 2039
FULL_YEAR_PATTERN = re.compile(r"\b(19[5-9]\d|20[0-3]\d)\b")
# '98, '05
SHORT_YEAR_PATTERN = re.compile(r"['’](\d{2})\b")

# 2자리 연도 경계: 50 이상은 19xx, 미만은 20xx
SHORT_YEAR_PIVOT = 50


def extract_vintage(text: str) -> Optional[int]:
    """빈티지 연도 추출.

    1. 4자리 연도(1950~2039)를 먼저 찾고
    2. 없으면 아포스트로피 2자리 연도('98 -> 1998, '05 -> 2005)를 찾습니다.

    여러 개가 있어도 스캔 순서상 첫 번째만 사용합니다.
    """
    if not text:
        return None

    match = FULL_YEAR_PATTERN.search(text)
    if match:
        return int(match.group(1))

    match = SHORT_YEAR_PATTERN.search(text)
    if match:
        year = int(match.group(1))
        return 1900 + year if year >= SHORT_YEAR_PIVOT else 2000 + year

    return None
