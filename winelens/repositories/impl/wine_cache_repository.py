"""와인 후보 캐시 리포지토리 - 로컬 캐시의 영속 저장소.

엔트리 목록만 저장합니다. 검색 인덱스는 로드 시점에 다시 만듭니다.
저장 포맷은 Wine.model_dump(mode="json") 리스트이며, 선택 필드는 null로
명시적으로 기록되어 왕복 후에도 '없음'이 유지됩니다.
"""

from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from redis import Redis

from winelens.core.config import settings
from winelens.core.exceptions import (
    CacheConnectionException,
    CacheException,
    CacheSerializationException,
)
from winelens.core.logging import logger
from winelens.schemas.wine_schema import Wine


def serialize_wines(wines: list[Wine]) -> str:
    try:
        payload = [wine.model_dump(mode="json") for wine in wines]
        return json.dumps(payload, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise CacheSerializationException(operation="serialize", reason=str(e))


def deserialize_wines(raw: str) -> list[Wine]:
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError("cache payload must be a list")
        return [Wine.model_validate(item) for item in data]
    except (json.JSONDecodeError, ValidationError, ValueError, TypeError) as e:
        raise CacheSerializationException(operation="deserialize", reason=str(e))


class WineCacheRepository(ABC):
    """로컬 와인 캐시 영속 저장소 인터페이스"""

    def __init__(self, version: Optional[int] = None):
        self.version = version if version is not None else settings.local_cache_version

    @abstractmethod
    def load(self) -> list[Wine]:
        """저장된 와인 목록 로드.

        Returns:
            와인 목록. 저장된 데이터가 없거나 버전이 다르면 빈 목록

        Raises:
            CacheSerializationException: 데이터가 손상된 경우
            CacheConnectionException: 저장소에 접근할 수 없는 경우
        """

    @abstractmethod
    def save(self, wines: list[Wine]) -> None:
        """와인 목록 전체를 저장 (덮어쓰기)"""

    @abstractmethod
    def clear(self) -> None:
        """저장된 데이터 삭제"""


class FileWineCacheRepository(WineCacheRepository):
    """JSON 파일 기반 저장소 (기본값)

    - <path>: 와인 목록 JSON
    - <path>.version: 스키마 버전
    """

    def __init__(self, path: Optional[str] = None, version: Optional[int] = None):
        super().__init__(version)
        self.path = Path(path or settings.local_cache_path)
        self.version_path = self.path.with_name(self.path.name + ".version")

    def _saved_version(self) -> int:
        try:
            return int(self.version_path.read_text(encoding="utf-8").strip())
        except (OSError, ValueError):
            return 0

    def load(self) -> list[Wine]:
        if not self.path.exists():
            return []

        saved_version = self._saved_version()
        if saved_version != self.version:
            logger.info(
                f"Wine cache version mismatch (saved={saved_version}, current={self.version}); discarding"
            )
            self.clear()
            return []

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise CacheConnectionException(reason=str(e), details={"path": str(self.path)})

        return deserialize_wines(raw)

    def save(self, wines: list[Wine]) -> None:
        payload = serialize_wines(wines)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # 쓰기 도중 죽어도 기존 파일이 깨지지 않도록 임시 파일 후 교체
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
            self.version_path.write_text(str(self.version), encoding="utf-8")
        except OSError as e:
            raise CacheException(
                message="Failed to write wine cache file",
                error_code="CACHE_WRITE_FAILED",
                details={"path": str(self.path), "error": str(e)},
            )

    def clear(self) -> None:
        for p in (self.path, self.version_path):
            try:
                p.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Failed to remove cache file {p}: {e}")


class RedisWineCacheRepository(WineCacheRepository):
    """Redis 기반 저장소 (여러 워커가 같은 후보 캐시를 공유할 때)"""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        key: Optional[str] = None,
        version: Optional[int] = None,
    ):
        super().__init__(version)
        self.key = key or settings.redis_cache_key
        self.version_key = f"{self.key}:version"
        url = redis_url or settings.redis_url
        if not url:
            raise CacheConnectionException(reason="redis_url is not configured")
        try:
            self.redis_client = Redis.from_url(
                url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        except Exception as e:
            logger.error(f"Failed to create Redis client: {e}")
            raise CacheConnectionException(reason=str(e))

    def load(self) -> list[Wine]:
        try:
            raw = self.redis_client.get(self.key)
            saved_version = self.redis_client.get(self.version_key)
        except Exception as e:
            raise CacheConnectionException(reason=str(e))

        if not raw:
            return []

        try:
            saved = int(saved_version) if saved_version is not None else 0
        except (TypeError, ValueError):
            saved = 0

        if saved != self.version:
            logger.info(
                f"Wine cache version mismatch (saved={saved}, current={self.version}); discarding"
            )
            self.clear()
            return []

        return deserialize_wines(raw)

    def save(self, wines: list[Wine]) -> None:
        payload = serialize_wines(wines)
        try:
            pipe = self.redis_client.pipeline()
            pipe.set(self.key, payload)
            pipe.set(self.version_key, str(self.version))
            pipe.execute()
        except Exception as e:
            raise CacheConnectionException(reason=str(e), details={"key": self.key})

    def clear(self) -> None:
        try:
            self.redis_client.delete(self.key, self.version_key)
        except Exception as e:
            logger.warning(f"Failed to clear Redis wine cache: {e}")


def build_wine_cache_repository() -> WineCacheRepository:
    """설정에 따라 저장소 구현체 선택"""
    if settings.local_cache_backend == "redis":
        return RedisWineCacheRepository()
    return FileWineCacheRepository()
