"""커스텀 예외 정의 (Structured Exception Hierarchy)"""
from typing import Any, Optional


# 기본 예외 클래스
class WineLensException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# 원격 검색 서비스 관련 예외
class SearchServiceException(WineLensException):
    """원격 카탈로그 검색 관련 예외의 기본 클래스"""
    def __init__(self, message: str, error_code: str = "SEARCH_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "SEARCH_ERROR", details)


class SearchServiceConnectionException(SearchServiceException):
    """검색 서비스 연결 실패"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Failed to reach search service: {reason}"
        super().__init__(message, "SEARCH_CONNECTION_ERROR", details or {"reason": reason})


class SearchServiceTimeoutException(SearchServiceException):
    """검색 서비스 타임아웃"""
    def __init__(self, operation: str, timeout_s: float, details: Optional[dict[str, Any]] = None):
        message = f"Search operation '{operation}' timed out after {timeout_s}s"
        super().__init__(message, "SEARCH_TIMEOUT",
                        details or {"operation": operation, "timeout_s": timeout_s})


class SearchServiceResponseException(SearchServiceException):
    """검색 서비스가 오류 응답 또는 해석 불가능한 응답을 반환"""
    def __init__(self, status_code: int, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Search service responded with {status_code}: {reason}"
        super().__init__(message, "SEARCH_BAD_RESPONSE",
                        {"status_code": status_code, "reason": reason, **(details or {})})


# 캐시 관련 예외
class CacheException(WineLensException):
    """로컬 후보 캐시 관련 예외"""
    def __init__(self, message: str, error_code: str = "CACHE_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "CACHE_ERROR", details)


class CacheConnectionException(CacheException):
    """캐시 저장소 연결 실패"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Failed to connect to cache storage: {reason}"
        super().__init__(message, "CACHE_CONN_FAILED", details or {"reason": reason})


class CacheSerializationException(CacheException):
    """캐시 직렬화/역직렬화 오류"""
    def __init__(self, operation: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Cache {operation} failed: {reason}"
        super().__init__(message, "CACHE_SERIALIZATION_ERROR",
                        details or {"operation": operation, "reason": reason})


# 유효성 검증 관련 예외
class ValidationException(WineLensException):
    """유효성 검증 예외"""
    def __init__(self, field: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Validation failed for '{field}': {reason}"
        super().__init__(message, "VALIDATION_ERROR",
                        details or {"field": field, "reason": reason})


class InvalidQueryException(ValidationException):
    """유효하지 않은 검색어"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        super().__init__("query", reason, details)


class InvalidBatchException(ValidationException):
    """유효하지 않은 배치 요청 (비어 있거나 최대 개수 초과)"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        super().__init__("queries", reason, details)


# 설정 관련 예외
class ConfigurationException(WineLensException):
    """필수 설정 누락 (시작 시점에 치명적)"""
    def __init__(self, setting: str, details: Optional[dict[str, Any]] = None):
        message = f"Missing or invalid configuration: {setting}"
        super().__init__(message, "CONFIGURATION_ERROR", details or {"setting": setting})
