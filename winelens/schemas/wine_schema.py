"""Pydantic 스키마 정의 (Validation Enhanced)"""
from decimal import Decimal
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime


MIN_PLAUSIBLE_YEAR = 1800
MAX_PLAUSIBLE_YEAR = 2100


class WineColor(str, Enum):
    """와인 색상 분류"""

    RED = "red"
    WHITE = "white"
    ROSE = "rose"
    SPARKLING = "sparkling"
    DESSERT = "dessert"
    FORTIFIED = "fortified"


class GrapeVariety(BaseModel):
    """품종 (블렌드 비율은 선택)"""
    name: str = Field(..., min_length=1, max_length=100, description="품종명")
    percentage: Optional[float] = Field(None, ge=0, le=100, description="블렌드 비율 (%)")


class Wine(BaseModel):
    """카탈로그 와인 + 리뷰 레코드 (매칭 대상)

    선택 필드는 기본값을 채우지 않고 None으로 남겨 둡니다.
    디스크 캐시 왕복 시에도 '없음'이 그대로 유지되어야 합니다.
    """
    id: str = Field(..., min_length=1, description="카탈로그 식별자")
    producer: str = Field(..., description="생산자")
    name: str = Field("", description="와인명 (생산자명과 같으면 빈 문자열일 수 있음)")
    vintage: Optional[int] = Field(None, description="빈티지 연도")
    region: Optional[str] = Field(None, description="지역")
    sub_region: Optional[str] = Field(None, description="세부 지역")
    appellation: Optional[str] = Field(None, description="아펠라시옹")
    country: Optional[str] = Field(None, description="국가")
    color: WineColor = Field(..., description="색상")
    grape_varieties: List[GrapeVariety] = Field(default_factory=list, description="품종 (순서 유지)")
    alcohol: Optional[float] = Field(None, ge=0, le=100, description="알코올 도수 (%)")
    label_url: Optional[str] = Field(None, description="라벨 이미지 URL")
    top100_rank: Optional[int] = Field(None, ge=1, description="Top 100 순위")
    top100_year: Optional[int] = Field(None, description="Top 100 선정 연도")

    # 리뷰 파생 필드
    score: Optional[int] = Field(None, ge=0, le=100, description="점수 (0~100)")
    tasting_note: Optional[str] = Field(None, description="테이스팅 노트")
    reviewer_initials: Optional[str] = Field(None, max_length=10, description="리뷰어 이니셜")
    reviewer_name: Optional[str] = Field(None, description="리뷰어 이름")
    review_date: Optional[str] = Field(None, description="리뷰 일자 (ISO)")
    issue_date: Optional[str] = Field(None, description="게재 호 일자 (ISO)")
    drink_window_start: Optional[int] = Field(None, description="음용 적기 시작 연도")
    drink_window_end: Optional[int] = Field(None, description="음용 적기 종료 연도")
    release_price: Optional[Decimal] = Field(None, ge=0, description="출시 가격")
    release_price_currency: Optional[str] = Field(None, max_length=3, description="통화 코드")

    @field_validator("vintage", "top100_year", "drink_window_start", "drink_window_end")
    @classmethod
    def validate_year(cls, v: Optional[int]) -> Optional[int]:
        """연도 검증: 현실적인 달력 연도만 허용"""
        if v is None:
            return None
        if not MIN_PLAUSIBLE_YEAR <= v <= MAX_PLAUSIBLE_YEAR:
            raise ValueError(f"implausible year: {v}")
        return v

    @model_validator(mode="after")
    def validate_drink_window(self) -> "Wine":
        start, end = self.drink_window_start, self.drink_window_end
        if start is not None and end is not None and start > end:
            raise ValueError("drink_window_start must not be after drink_window_end")
        return self

    @property
    def full_name(self) -> str:
        """생산자 + 와인명 (+ 빈티지)"""
        base = f"{self.producer} {self.name}".strip()
        if self.vintage is not None:
            return f"{base} {self.vintage}"
        return base

    @property
    def display_name(self) -> str:
        if not self.name or self.name.lower() == self.producer.lower():
            return self.producer
        return f"{self.producer} {self.name}"


class SearchFilters(BaseModel):
    """구조화 필터 (색상/국가/빈티지는 동등 비교, 점수는 하한)"""
    color: Optional[WineColor] = None
    country: Optional[str] = Field(None, max_length=100)
    min_score: Optional[int] = Field(None, ge=0, le=100)
    vintage: Optional[int] = None

    def is_empty(self) -> bool:
        return all(v is None for v in (self.color, self.country, self.min_score, self.vintage))


class SearchOptions(BaseModel):
    """검색 옵션"""
    limit: int = Field(10, ge=1, le=1000, description="최대 결과 수")
    filters: Optional[SearchFilters] = None


MatchTypeLiteral = Literal["exact", "fuzzy", "semantic"]


class SearchHit(BaseModel):
    """원격 검색 결과 한 건"""
    wine: Wine
    match_confidence: float = Field(..., ge=0.0, le=1.0, description="매칭 신뢰도")
    match_type: MatchTypeLiteral = Field("fuzzy", description="exact | fuzzy | semantic")


class WineSearchData(BaseModel):
    """검색 응답 데이터"""
    results: List[SearchHit]
    total_count: int = Field(..., ge=0)
    query_normalized: str


class BatchMatchOptions(BaseModel):
    fuzzy: bool = True
    confidence_threshold: Optional[float] = Field(None, ge=0.0, le=1.0)


class BatchMatchRequest(BaseModel):
    """배치 매칭 요청"""
    queries: List[str] = Field(default_factory=list, description="OCR 라인(정규화된 쿼리) 목록")
    options: Optional[BatchMatchOptions] = None


class BatchMatchItem(BaseModel):
    """배치 매칭 결과 한 건"""
    query: str
    matched: bool
    wine: Optional[Wine] = None
    confidence: float = Field(0.0, ge=0.0, le=1.0)


class BatchMatchData(BaseModel):
    """배치 매칭 응답 데이터"""
    matches: List[BatchMatchItem]
    match_rate: float = Field(..., ge=0.0, le=1.0)
    processing_time_ms: float = Field(0.0, ge=0)


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None


class ApiResponse(BaseModel):
    """공통 응답 envelope"""
    success: bool
    data: Optional[Any] = None
    error: Optional[ErrorDetail] = None


class WineSearchResponse(ApiResponse):
    data: Optional[WineSearchData] = None


class BatchMatchResponse(ApiResponse):
    data: Optional[BatchMatchData] = None


class HealthResponse(BaseModel):
    """헬스 체크 응답"""
    status: str
    timestamp: datetime
    version: str
    search_configured: bool = False
