"""Similarity helpers."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein


TOKEN_WEIGHT = 0.6
EDIT_WEIGHT = 0.4


def jaccard_similarity(text1: str, text2: str) -> float:
    """공백 토큰 집합의 Jaccard 유사도 (교집합 / 합집합).

    두 토큰 집합이 모두 비어 있으면 0.0
    """
    tokens1 = set(text1.split()) if text1 else set()
    tokens2 = set(text2.split()) if text2 else set()

    union = tokens1 | tokens2
    if not union:
        return 0.0

    return len(tokens1 & tokens2) / len(union)


def edit_distance(text1: str, text2: str) -> int:
    """Levenshtein 편집 거리 (코드 포인트 단위, rapidfuzz)."""
    return Levenshtein.distance(text1 or "", text2 or "")


def edit_similarity(text1: str, text2: str) -> float:
    """1 - (편집거리 / 긴 문자열 길이).

    - 둘 다 빈 문자열: 1.0
    - 한쪽만 빈 문자열: 0.0
    """
    if not text1 and not text2:
        return 1.0
    if not text1 or not text2:
        return 0.0

    return Levenshtein.normalized_similarity(text1, text2)


def calculate_similarity(text1: str, text2: str) -> float:
    """정규화된 두 문자열의 유사도 (0~1).

    토큰 Jaccard 0.6 + 편집거리 유사도 0.4 가중 평균.
    입력은 이미 normalize_text()를 거친 문자열이라고 가정합니다.
    """
    text1 = text1 or ""
    text2 = text2 or ""

    score = (
        TOKEN_WEIGHT * jaccard_similarity(text1, text2)
        + EDIT_WEIGHT * edit_similarity(text1, text2)
    )
    return max(0.0, min(1.0, score))
