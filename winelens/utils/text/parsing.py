"""Wine list line parsing (normalize + field extraction)."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .core.normalize import normalize_text
from .utils.prices import extract_price, remove_price_span
from .utils.vintage import extract_vintage


@dataclass(frozen=True)
class ParsedWineText:
    """OCR 라인 한 줄을 파싱한 결과.

    producer/wine_name/region은 NLP 추출 전까지 항상 None 입니다.
    """

    normalized_text: str
    vintage: Optional[int] = None
    price: Optional[Decimal] = None
    producer: Optional[str] = None
    wine_name: Optional[str] = None
    region: Optional[str] = None


def parse_wine_text(text: str) -> ParsedWineText:
    """와인 리스트 라인을 매칭용 쿼리로 변환.

    - 빈티지/가격은 원문에서 추출 ('98 같은 아포스트로피 표기는 정규화 후 사라지므로)
    - 매칭 텍스트는 가격 표기를 먼저 지운 뒤 정규화 (빈티지 숫자는 남김)

    예: "Opus One 2015 $350" -> normalized="opus one 2015", vintage=2015, price=350
    """
    raw = text or ""

    return ParsedWineText(
        normalized_text=normalize_text(remove_price_span(raw)),
        vintage=extract_vintage(raw),
        price=extract_price(raw),
    )
