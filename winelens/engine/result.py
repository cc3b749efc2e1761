"""Match Result - Standardized Result Format

Provides a standardized format for match results across all resolution tiers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from winelens.schemas.wine_schema import Wine


# 로컬 정확 매칭 신뢰도 (고정값)
EXACT_MATCH_CONFIDENCE = 0.98


class MatchType(str, Enum):
    """매칭 경로

    결과가 어느 단계에서 결정되었는지 나타냅니다.
    """

    EXACT = "exact"  # 로컬 정확 매칭
    FUZZY_LOCAL = "fuzzy_local"  # 로컬 퍼지 매칭
    FUZZY_REMOTE = "fuzzy_remote"  # 원격 카탈로그 검색


@dataclass(frozen=True)
class MatchResult:
    """매칭 결과 표준 포맷

    매칭 실패는 confidence 0인 결과가 아니라 None으로 표현합니다.

    Attributes:
        wine: 매칭된 카탈로그 와인
        confidence: 신뢰도 [0, 1]
        matched_vintage: 매칭에 사용된 빈티지
        match_type: 매칭 경로
    """

    wine: Wine
    confidence: float
    matched_vintage: Optional[int]
    match_type: MatchType

    @property
    def is_local(self) -> bool:
        return self.match_type in (MatchType.EXACT, MatchType.FUZZY_LOCAL)

    @classmethod
    def exact(cls, wine: Wine, vintage: Optional[int]) -> "MatchResult":
        return cls(
            wine=wine,
            confidence=EXACT_MATCH_CONFIDENCE,
            matched_vintage=vintage,
            match_type=MatchType.EXACT,
        )

    @classmethod
    def fuzzy_local(cls, wine: Wine, score: float, vintage: Optional[int]) -> "MatchResult":
        """로컬 퍼지 매칭 결과 생성

        Args:
            wine: 후보 와인
            score: 유사도 점수
            vintage: 파싱된 빈티지

        Returns:
            MatchResult: FUZZY_LOCAL 결과
        """
        return cls(
            wine=wine,
            confidence=score,
            matched_vintage=vintage,
            match_type=MatchType.FUZZY_LOCAL,
        )

    @classmethod
    def fuzzy_remote(cls, wine: Wine, confidence: float, vintage: Optional[int]) -> "MatchResult":
        """원격 검색 결과 생성 (파싱된 빈티지가 없으면 와인의 빈티지 사용)"""
        return cls(
            wine=wine,
            confidence=confidence,
            matched_vintage=vintage if vintage is not None else wine.vintage,
            match_type=MatchType.FUZZY_REMOTE,
        )
