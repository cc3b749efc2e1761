"""Text normalization helpers."""

from __future__ import annotations

import re
import unicodedata


_NON_ALNUM = re.compile(r"[^a-z0-9 ]")
_WHITESPACE = re.compile(r"\s+")


def strip_diacritics(text: str) -> str:
    """결합 문자(악센트)를 제거합니다.

    예: "Château" -> "Chateau", "Grüner" -> "Gruner"
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_text(text: str) -> str:
    """
    매칭용 정규화 텍스트로 변환

    - 소문자화
    - 악센트/발음 구별 기호 제거
    - [a-z0-9 ] 이외의 문자는 공백으로 치환
    - 연속 공백 축약 + trim

    예시:
    - "Château Margaux, 2015" -> "chateau margaux 2015"
    - "Opus One  $350" -> "opus one 350"

    로컬 캐시, 파서, 원격 인덱스 레코드가 모두 이 함수를 공유하므로
    로컬/원격 confidence가 같은 기준에서 계산됩니다.

    Args:
        text: 원본 텍스트

    Returns:
        정규화된 텍스트 (멱등)
    """
    if not text:
        return ""

    folded = strip_diacritics(text).lower()
    cleaned = _NON_ALNUM.sub(" ", folded)
    cleaned = _WHITESPACE.sub(" ", cleaned)

    return cleaned.strip()


def tokenize(text: str) -> list[str]:
    """정규화된 텍스트를 공백 기준으로 토큰화 (순서 유지, 중복 허용)."""
    normalized = normalize_text(text)
    if not normalized:
        return []
    return normalized.split(" ")
