"""로컬 후보 캐시 - 세션 동안 본 와인을 메모리에 유지하고 퍼지 검색 인덱스를 관리"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Iterable, Optional

from winelens.core.exceptions import CacheException, CacheSerializationException
from winelens.core.logging import logger
from winelens.repositories.impl.wine_cache_repository import WineCacheRepository
from winelens.schemas.wine_schema import Wine
from winelens.utils.text import calculate_similarity, normalize_text


# 로컬 퍼지 매칭 내부 하한 (Resolver는 이보다 엄격한 임계값을 추가로 적용)
FUZZY_FLOOR = 0.5
# 인덱스에 넣는 최소 토큰 길이
MIN_INDEX_TOKEN_LENGTH = 3


@dataclass(frozen=True)
class FuzzyMatch:
    wine: Wine
    score: float


def _match_text(wine: Wine) -> str:
    """정확/퍼지 비교 대상: 생산자 + 와인명"""
    return normalize_text(f"{wine.producer} {wine.name}")


def _index_text(wine: Wine) -> str:
    """인덱스 대상: 생산자 + 와인명 + 지역"""
    return normalize_text(f"{wine.producer} {wine.name} {wine.region or ''}")


class LocalWineCache:
    """로컬 와인 후보 캐시 (단일 소유자)

    와인 맵과 토큰 인덱스는 이 객체만 소유하며, 모든 읽기/쓰기는
    하나의 asyncio.Lock 아래에서 직렬화됩니다.

    - 디스크(또는 Redis) 로드는 start()에서 백그라운드 태스크로 시작되고,
      로드 완료 전 조회는 빈 캐시를 봅니다.
    - cache_many() 이후 저장은 fire-and-forget이며 실패는 로깅만 합니다.
    - 인덱스는 추가만 됩니다. 같은 id의 엔트리가 갱신되어도 예전 토큰은
      clear() 전까지 남습니다 (퍼지 후보가 넓어질 뿐 정확 매칭에는 영향 없음).
    """

    def __init__(self, repository: Optional[WineCacheRepository] = None):
        """
        Args:
            repository: 영속 저장소 (None이면 메모리 전용)
        """
        self.repository = repository
        self._wines: dict[str, Wine] = {}
        self._index: dict[str, set[str]] = {}
        self._lock = asyncio.Lock()
        self._save_lock = asyncio.Lock()
        self._load_task: Optional[asyncio.Task] = None
        self._background: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # 생명주기
    # ------------------------------------------------------------------

    def start(self) -> None:
        """저장소 로드를 백그라운드로 시작 (실행 중인 이벤트 루프 필요)"""
        if self._load_task is not None or self.repository is None:
            return
        self._load_task = asyncio.create_task(self._load_from_storage())

    async def wait_until_loaded(self) -> None:
        if self._load_task is not None:
            await asyncio.shield(self._load_task)

    async def drain(self) -> None:
        """대기 중인 백그라운드 작업(저장/캐시 기록)이 끝날 때까지 대기"""
        await self.wait_until_loaded()
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    # ------------------------------------------------------------------
    # 캐시 조작
    # ------------------------------------------------------------------

    async def cache(self, wine: Wine) -> None:
        """와인 한 건 upsert (저장은 트리거하지 않음)"""
        async with self._lock:
            self._upsert(wine)
        logger.debug(f"LocalWineCache: cached wine id={wine.id}")

    async def cache_many(self, wines: Iterable[Wine]) -> None:
        """여러 건 upsert 후 저장을 fire-and-forget으로 예약"""
        wines = list(wines)
        async with self._lock:
            for wine in wines:
                self._upsert(wine)
        logger.debug(f"LocalWineCache: cached {len(wines)} wines")

        if self.repository is not None:
            self._spawn(self.save())

    def schedule_cache(self, wine: Wine) -> None:
        """원격 매칭 결과를 기다리지 않고 캐시에 기록 (fire-and-forget)"""
        self._spawn(self.cache(wine))

    def schedule_cache_many(self, wines: Iterable[Wine]) -> None:
        """배치 원격 매칭 결과를 한 번에 기록 + 저장 (fire-and-forget)"""
        wines = list(wines)
        if wines:
            self._spawn(self.cache_many(wines))

    async def get_wine(self, wine_id: str) -> Optional[Wine]:
        async with self._lock:
            return self._wines.get(wine_id)

    async def count(self) -> int:
        async with self._lock:
            return len(self._wines)

    async def clear(self) -> None:
        """메모리와 영속 저장소를 모두 비움 (명시적 리셋 전용)"""
        async with self._lock:
            self._wines.clear()
            self._index.clear()

        if self.repository is None:
            return
        try:
            async with self._save_lock:
                await asyncio.to_thread(self.repository.clear)
            logger.info("LocalWineCache: cleared memory and storage")
        except Exception as e:
            logger.warning(f"LocalWineCache: failed to clear storage: {type(e).__name__}: {e}")

    def _upsert(self, wine: Wine) -> None:
        # 호출자가 _lock을 잡고 있어야 합니다.
        self._wines[wine.id] = wine
        for term in _index_text(wine).split():
            if len(term) >= MIN_INDEX_TOKEN_LENGTH:
                self._index.setdefault(term, set()).add(wine.id)

    # ------------------------------------------------------------------
    # 검색
    # ------------------------------------------------------------------

    async def find_exact(self, text: str, vintage: Optional[int] = None) -> Optional[Wine]:
        """'생산자 와인명' 정규화 문자열이 쿼리와 같은 와인 반환.

        vintage가 주어지면 빈티지도 일치해야 하고, 없으면 빈티지 무관.
        캐시 크기가 세션 단위로 작으므로 전체 선형 스캔 (id 오름차순).
        """
        query = normalize_text(text)
        if not query:
            return None

        async with self._lock:
            for wine_id in sorted(self._wines):
                wine = self._wines[wine_id]
                if _match_text(wine) != query:
                    continue
                if vintage is None or wine.vintage == vintage:
                    return wine

        return None

    async def find_fuzzy(self, text: str) -> Optional[FuzzyMatch]:
        """토큰 인덱스로 후보를 좁힌 뒤 유사도 최고점 반환 (FUZZY_FLOOR 이상만).

        후보: 쿼리 토큰과 정확히 같은 인덱스 토큰 + 서로 포함 관계인 인덱스 토큰
        동점이면 id가 가장 작은 와인
        """
        query = normalize_text(text)
        if not query:
            return None

        terms = set(query.split())

        async with self._lock:
            candidate_ids: set[str] = set()
            for term in terms:
                ids = self._index.get(term)
                if ids:
                    candidate_ids.update(ids)

                for index_term, ids in self._index.items():
                    if term in index_term or index_term in term:
                        candidate_ids.update(ids)

            best: Optional[FuzzyMatch] = None
            for wine_id in sorted(candidate_ids):
                wine = self._wines.get(wine_id)
                if wine is None:
                    continue
                score = calculate_similarity(query, _match_text(wine))
                if best is None or score > best.score:
                    best = FuzzyMatch(wine=wine, score=score)

        if best is None or best.score < FUZZY_FLOOR:
            return None
        return best

    # ------------------------------------------------------------------
    # 영속화
    # ------------------------------------------------------------------

    async def save(self) -> bool:
        """현재 엔트리 전체를 저장. 실패는 로깅만 하고 False 반환"""
        if self.repository is None:
            return False

        async with self._lock:
            snapshot = list(self._wines.values())

        try:
            async with self._save_lock:
                await asyncio.to_thread(self.repository.save, snapshot)
            logger.debug(f"LocalWineCache: saved {len(snapshot)} wines")
            return True
        except CacheException as e:
            logger.warning(f"LocalWineCache: save failed: {e}")
        except Exception as e:
            logger.warning(f"LocalWineCache: save failed: {type(e).__name__}: {e}")
        return False

    async def _load_from_storage(self) -> None:
        if self.repository is None:
            return
        try:
            wines = await asyncio.to_thread(self.repository.load)
        except CacheSerializationException as e:
            logger.warning(f"LocalWineCache: corrupt storage, starting empty: {e}")
            await self._discard_storage()
            return
        except CacheException as e:
            logger.warning(f"LocalWineCache: load failed, starting empty: {e}")
            return
        except Exception as e:
            logger.warning(f"LocalWineCache: load failed, starting empty: {type(e).__name__}: {e}")
            return

        async with self._lock:
            for wine in wines:
                # 로드 중에 먼저 기록된(더 최신) 엔트리는 덮어쓰지 않음
                if wine.id not in self._wines:
                    self._upsert(wine)
        logger.info(f"LocalWineCache: loaded {len(wines)} wines from storage")

    async def _discard_storage(self) -> None:
        # 손상된 캐시는 지워서 다음 시작 때 다시 실패하지 않도록
        try:
            async with self._save_lock:
                await asyncio.to_thread(self.repository.clear)
        except Exception as e:
            logger.warning(f"LocalWineCache: failed to discard corrupt storage: {type(e).__name__}: {e}")
