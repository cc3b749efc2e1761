"""로깅 설정 (Security Enhanced)

- 패키지 로거 "winelens" 하나에 콘솔 핸들러를 붙이고, 모듈은 이 로거를 공유합니다.
- OCR 라인/원격 응답 본문은 sanitize_for_log()를 거쳐 기록합니다.
"""
import logging
import os
import re
import sys

from winelens.core.config import settings


LOGGER_NAME = "winelens"

# Production 환경에서는 DEBUG 로그 비활성화
IS_PRODUCTION = os.getenv("ENVIRONMENT", "development") == "production"

PRODUCTION_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEVELOPMENT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

# key=value / key: value 형태의 비밀값
_SECRET_PATTERN = re.compile(
    r"(?i)\b(password|token|api[_-]?key|secret|authorization)(\s*[=:]\s*)(bearer\s+)?[^\s&,;\"']+"
)
_CONTROL_WHITESPACE = re.compile(r"[\r\n\t]+")


def resolve_log_level(level_name: str) -> int:
    """설정 문자열 -> logging 레벨 (Production에서는 최소 INFO)"""
    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    if IS_PRODUCTION and level < logging.INFO:
        level = logging.INFO
    return level


def setup_logging() -> logging.Logger:
    """로거 초기화 및 설정"""

    logger = logging.getLogger(LOGGER_NAME)
    level = resolve_log_level(settings.log_level)
    logger.setLevel(level)

    # 포맷터 (민감 정보 제외)
    formatter = logging.Formatter(
        fmt=PRODUCTION_FORMAT if IS_PRODUCTION else DEVELOPMENT_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


logger = setup_logging()


def sanitize_for_log(value: str, max_length: int = 100) -> str:
    """민감 정보 마스킹 후 로깅용 문자열 반환

    - password/token/api_key/secret/authorization 값은 ***로 치환
    - OCR 라인의 줄바꿈/탭은 공백 하나로
    - max_length를 넘으면 잘라서 '...'

    Args:
        value: 로깅할 문자열
        max_length: 최대 길이

    Returns:
        로깅 가능한 문자열
    """
    if not value:
        return "[empty]"

    result = _SECRET_PATTERN.sub(lambda m: f"{m.group(1)}{m.group(2)}***", value)
    result = _CONTROL_WHITESPACE.sub(" ", result)

    if len(result) > max_length:
        result = result[:max_length] + "..."

    return result
