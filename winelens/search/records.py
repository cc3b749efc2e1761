"""Index record mapping and confidence scoring for the catalog search index."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationError

from winelens.core.logging import logger
from winelens.schemas.wine_schema import GrapeVariety, SearchFilters, Wine
from winelens.utils.text import normalize_text


# 토큰 겹침 가중치 / 빈티지 부스트 / 기본값 / 상한
OVERLAP_WEIGHT = 0.8
VINTAGE_BOOST = 0.15
BASELINE = 0.05
MAX_CONFIDENCE = 0.99


def wine_to_record(wine: Wine) -> dict[str, Any]:
    """Wine -> 검색 인덱스 레코드.

    원본 필드 외에 정규화 필드(producer_normalized, name_normalized,
    searchable_text)와 비정규화된 full_name을 함께 저장해
    오타 허용 전문 검색과 구조화 필터를 모두 지원합니다.
    """
    full_name = wine.full_name

    return {
        "objectID": wine.id,
        "producer": wine.producer,
        "name": wine.name,
        "full_name": full_name,
        "vintage": wine.vintage,
        "region": wine.region,
        "sub_region": wine.sub_region,
        "country": wine.country,
        "color": wine.color.value,
        "grape_varieties": [g.name for g in wine.grape_varieties],
        "score": wine.score,
        "tasting_note": wine.tasting_note,
        "reviewer_initials": wine.reviewer_initials,
        "reviewer_name": wine.reviewer_name,
        "review_date": wine.review_date,
        "drink_window_start": wine.drink_window_start,
        "drink_window_end": wine.drink_window_end,
        "release_price": float(wine.release_price) if wine.release_price is not None else None,
        "release_price_currency": wine.release_price_currency,
        "label_url": wine.label_url,
        # 매칭용 정규화 필드
        "producer_normalized": normalize_text(wine.producer),
        "name_normalized": normalize_text(wine.name),
        "searchable_text": normalize_text(full_name),
    }


def record_to_wine(hit: dict[str, Any]) -> Optional[Wine]:
    """검색 히트 -> Wine. 인덱스에 없는 필드(appellation, alcohol, 품종 비율)는 None.

    objectID 또는 color가 없는 히트는 버립니다.

    레코드가 스키마에 맞지 않으면 None (히트 하나 때문에 검색 전체를 실패시키지 않음)
    """
    try:
        return Wine(
            id=str(hit["objectID"]),
            producer=hit.get("producer") or "",
            name=hit.get("name") or "",
            vintage=hit.get("vintage"),
            region=hit.get("region"),
            sub_region=hit.get("sub_region"),
            appellation=None,
            country=hit.get("country"),
            color=hit["color"],
            grape_varieties=[
                GrapeVariety(name=name, percentage=None)
                for name in (hit.get("grape_varieties") or [])
                if name
            ],
            alcohol=None,
            score=hit.get("score"),
            tasting_note=hit.get("tasting_note"),
            reviewer_initials=hit.get("reviewer_initials"),
            reviewer_name=hit.get("reviewer_name"),
            review_date=hit.get("review_date"),
            drink_window_start=hit.get("drink_window_start"),
            drink_window_end=hit.get("drink_window_end"),
            release_price=hit.get("release_price"),
            release_price_currency=hit.get("release_price_currency"),
            label_url=hit.get("label_url"),
        )
    except (KeyError, ValidationError, TypeError, ValueError) as e:
        logger.warning(f"Skipping malformed search hit: {type(e).__name__}: {e}")
        return None


def calculate_confidence(query: str, hit: dict[str, Any]) -> float:
    """히트 신뢰도 계산 (엔진 관련도 순위와 독립).

    토큰 겹침 비율 * 0.8 + (쿼리 문자열에 빈티지 포함 시 0.15) + 0.05, 최대 0.99
    """
    query_tokens = set(normalize_text(query).split())
    hit_text = hit.get("searchable_text") or normalize_text(
        str(hit.get("full_name") or "")
    )
    hit_tokens = set(hit_text.split())

    base = 0.0
    if query_tokens:
        matches = sum(1 for token in query_tokens if token in hit_tokens)
        base = matches / len(query_tokens)

    vintage = hit.get("vintage")
    vintage_match = bool(vintage) and str(vintage) in (query or "")

    confidence = base * OVERLAP_WEIGHT + (VINTAGE_BOOST if vintage_match else 0.0) + BASELINE
    return min(MAX_CONFIDENCE, confidence)


def build_filter_string(filters: Optional[SearchFilters]) -> str:
    """구조화 필터 -> 검색 엔진 필터 문자열

    예: color:red AND country:"France" AND score >= 90 AND vintage = 2015
    """
    if filters is None:
        return ""

    parts: list[str] = []
    if filters.color is not None:
        parts.append(f"color:{filters.color.value}")
    if filters.country:
        country = filters.country.replace('"', "")
        parts.append(f'country:"{country}"')
    if filters.min_score is not None:
        parts.append(f"score >= {filters.min_score}")
    if filters.vintage is not None:
        parts.append(f"vintage = {filters.vintage}")

    return " AND ".join(parts)
