"""설정 관리 - 환경 변수 로드 및 검증"""
from pydantic_settings import BaseSettings
from pydantic import field_validator, model_validator


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 매칭 임계값
    # - match_confidence_threshold: 단건 매칭(로컬 퍼지/원격 검색) 채택 기준
    # - partial_match_threshold: 배치 원격 매칭 채택 기준 (단건보다 느슨함)
    match_confidence_threshold: float = 0.7
    partial_match_threshold: float = 0.5

    # 로컬 후보 캐시 (file | redis)
    local_cache_backend: str = "file"
    local_cache_path: str = ".cache/wine_cache.json"
    # 스키마가 바뀌면 올립니다. 버전이 다르면 기존 캐시는 버려집니다.
    local_cache_version: int = 2

    # Redis (local_cache_backend=redis 일 때만 사용)
    redis_url: str = ""
    redis_cache_key: str = "winelens:wine_cache"

    # Algolia 카탈로그 인덱스
    algolia_app_id: str = ""
    algolia_api_key: str = ""
    algolia_index_name: str = "wines"
    search_timeout_s: float = 5.0

    # 카탈로그 API (클라이언트 측 원격 단계)
    wine_api_base_url: str = "http://localhost:8000/api/v1"
    wine_api_token: str = ""
    wine_api_timeout_s: float = 10.0

    # 원격 단계 전체 하드 캡 (0 이하면 비활성화)
    remote_match_timeout_s: float = 12.0

    # 검색/배치 제한
    batch_max_queries: int = 100
    batch_default_confidence: float = 0.7
    search_default_limit: int = 10
    search_max_limit: int = 50

    # API
    api_title: str = "WineLens Catalog Search"
    api_version: str = "1.0.0"
    api_description: str = "와인 리스트 OCR 텍스트를 카탈로그 와인과 매칭합니다."

    # 로깅
    log_level: str = "INFO"

    @field_validator(
        "match_confidence_threshold",
        "partial_match_threshold",
        "batch_default_confidence",
    )
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("thresholds must be within [0, 1]")
        return v

    @field_validator("local_cache_backend")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in {"file", "redis"}:
            raise ValueError("local_cache_backend must be 'file' or 'redis'")
        return v

    @field_validator("batch_max_queries", "search_default_limit", "search_max_limit")
    @classmethod
    def validate_limits(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("limits must be positive")
        return v

    @field_validator("search_timeout_s", "wine_api_timeout_s")
    @classmethod
    def validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v

    @model_validator(mode="after")
    def validate_threshold_order(self) -> "Settings":
        if self.partial_match_threshold > self.match_confidence_threshold:
            raise ValueError(
                "partial_match_threshold must not exceed match_confidence_threshold"
            )
        return self

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
