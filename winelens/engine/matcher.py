"""Wine Matcher - Main Engine Entry Point

Coordinates the tiered matching pipeline:
1. Local exact match
2. Local fuzzy match (term index + similarity)
3. Remote catalog fallback (single search or one batch call)
4. Write-back of remote matches into the local cache
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Protocol

from winelens.core.config import settings
from winelens.core.logging import logger, sanitize_for_log
from winelens.schemas.wine_schema import BatchMatchItem, SearchHit
from winelens.services.impl.local_wine_cache import LocalWineCache
from winelens.utils.text import ParsedWineText, parse_wine_text

from .result import MatchResult


class RemoteWineCatalog(Protocol):
    """원격 카탈로그 인터페이스 (WineAPIClient, CatalogSearchService)"""

    async def search_wines(
        self,
        query: str,
        vintage: Optional[int] = None,
        limit: int = 1,
    ) -> list[SearchHit]:
        ...

    async def batch_match(
        self,
        queries: list[str],
        confidence_threshold: Optional[float] = None,
    ) -> dict[str, BatchMatchItem]:
        ...


@dataclass(frozen=True)
class MatchThresholds:
    """매칭 임계값

    Attributes:
        match_confidence: 단건 매칭 / 로컬 퍼지 채택 기준
        partial_match: 배치 원격 결과 채택 기준
    """

    match_confidence: float = 0.7
    partial_match: float = 0.5

    @classmethod
    def from_settings(cls) -> "MatchThresholds":
        return cls(
            match_confidence=settings.match_confidence_threshold,
            partial_match=settings.partial_match_threshold,
        )


class WineMatcher:
    """와인 매칭 오케스트레이터

    Exact → Fuzzy(local) → Remote 순서로 시도하고, 어떤 단계의 오류도
    호출자에게 전파하지 않습니다 (실패 = None).
    """

    def __init__(
        self,
        local_cache: LocalWineCache,
        remote: RemoteWineCatalog,
        thresholds: Optional[MatchThresholds] = None,
        remote_timeout_s: Optional[float] = None,
    ):
        """
        Args:
            local_cache: 로컬 후보 캐시
            remote: 원격 카탈로그 (search_wines / batch_match)
            thresholds: 임계값 (기본값: settings)
            remote_timeout_s: 원격 호출 제한 시간 (None이면 settings, 0 이하면 제한 없음)
        """
        if local_cache is None:
            raise ValueError("local_cache must not be None")
        if remote is None:
            raise ValueError("remote must not be None")

        self.local_cache = local_cache
        self.remote = remote
        self.thresholds = thresholds or MatchThresholds.from_settings()
        if remote_timeout_s is None:
            remote_timeout_s = settings.remote_match_timeout_s
        self.remote_timeout_s = remote_timeout_s if remote_timeout_s > 0 else None

    # ------------------------------------------------------------------
    # 단건
    # ------------------------------------------------------------------

    async def match_wine(self, text: str) -> Optional[MatchResult]:
        """OCR 한 줄을 카탈로그 와인에 매칭

        Args:
            text: OCR 원문 (예: "Opus One 2015 $350")

        Returns:
            Optional[MatchResult]: 매칭 결과, 실패 시 None
        """
        parsed = self._parse(text)
        if parsed is None:
            return None

        result = await self._try_local(parsed)
        if result:
            return result

        result = await self._try_remote(parsed)
        if result:
            logger.info(
                f"Match completed from remote: text='{sanitize_for_log(text)}', "
                f"wine={result.wine.id}, confidence={result.confidence:.2f}"
            )
            return result

        logger.debug(f"No match: text='{sanitize_for_log(text)}'")
        return None

    # ------------------------------------------------------------------
    # 배치
    # ------------------------------------------------------------------

    async def batch_match(self, texts: list[str]) -> dict[str, Optional[MatchResult]]:
        """여러 줄을 한 번에 매칭 (원격 호출은 최대 1회)

        로컬에서 해결되지 않은 줄만 모아 한 번의 batch_match 요청으로 보냅니다.
        입력 텍스트는 모두 결과 키로 존재합니다.
        """
        results: dict[str, Optional[MatchResult]] = {}
        pending: list[tuple[str, ParsedWineText]] = []

        for text in texts:
            results[text] = None
            parsed = self._parse(text)
            if parsed is None:
                continue

            local = await self._try_local(parsed)
            if local:
                results[text] = local
            else:
                pending.append((text, parsed))

        if pending:
            remote_hits = await self._try_batch_remote([parsed.normalized_text for _, parsed in pending])
            accepted = []
            for text, parsed in pending:
                item = remote_hits.get(parsed.normalized_text)
                result = self._accept_batch_item(item, parsed)
                results[text] = result
                if result is not None:
                    accepted.append(result.wine)
            # 원격 히트는 한 번에 캐시 + 저장
            self.local_cache.schedule_cache_many(accepted)

        matched = sum(1 for r in results.values() if r is not None)
        logger.info(
            f"Batch match completed: {matched}/{len(results)} matched, "
            f"remote_queries={len(pending)}"
        )
        return results

    # ------------------------------------------------------------------
    # 단계별
    # ------------------------------------------------------------------

    def _parse(self, text: str) -> Optional[ParsedWineText]:
        if not text or not isinstance(text, str):
            return None
        try:
            parsed = parse_wine_text(text)
        except Exception as e:
            logger.warning(f"Parse failed: text='{sanitize_for_log(text)}', error={type(e).__name__}: {e}")
            return None
        if not parsed.normalized_text:
            return None
        return parsed

    async def _try_local(self, parsed: ParsedWineText) -> Optional[MatchResult]:
        result = await self._try_exact(parsed)
        if result:
            return result
        return await self._try_fuzzy(parsed)

    async def _try_exact(self, parsed: ParsedWineText) -> Optional[MatchResult]:
        try:
            wine = await self.local_cache.find_exact(parsed.normalized_text, parsed.vintage)
        except Exception as e:
            logger.warning(f"Exact lookup failed: {type(e).__name__}: {e}")
            return None

        if wine is None:
            return None

        logger.debug(f"Exact hit: query='{parsed.normalized_text}', wine={wine.id}")
        return MatchResult.exact(wine, parsed.vintage)

    async def _try_fuzzy(self, parsed: ParsedWineText) -> Optional[MatchResult]:
        try:
            match = await self.local_cache.find_fuzzy(parsed.normalized_text)
        except Exception as e:
            logger.warning(f"Fuzzy lookup failed: {type(e).__name__}: {e}")
            return None

        if match is None or match.score < self.thresholds.match_confidence:
            return None

        logger.debug(
            f"Fuzzy hit: query='{parsed.normalized_text}', wine={match.wine.id}, score={match.score:.3f}"
        )
        return MatchResult.fuzzy_local(match.wine, match.score, parsed.vintage)

    async def _try_remote(self, parsed: ParsedWineText) -> Optional[MatchResult]:
        try:
            hits = await self._with_timeout(
                self.remote.search_wines(parsed.normalized_text, vintage=parsed.vintage, limit=1)
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Remote search timeout: query='{parsed.normalized_text}', timeout={self.remote_timeout_s}s"
            )
            return None
        except Exception as e:
            logger.warning(
                f"Remote search failed: query='{parsed.normalized_text}', error={type(e).__name__}: {e}"
            )
            return None

        best = hits[0] if hits else None
        if best is None or best.match_confidence < self.thresholds.match_confidence:
            return None

        self.local_cache.schedule_cache(best.wine)
        return MatchResult.fuzzy_remote(best.wine, best.match_confidence, parsed.vintage)

    async def _try_batch_remote(self, queries: list[str]) -> dict[str, BatchMatchItem]:
        try:
            hits = await self._with_timeout(
                self.remote.batch_match(queries, confidence_threshold=self.thresholds.partial_match)
            )
        except asyncio.CancelledError:
            # 원격 요청만 취소된 경우에도 대기 중인 항목은 모두 미매칭
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.warning(f"Remote batch match cancelled: {len(queries)} queries unmatched")
            return {}
        except asyncio.TimeoutError:
            logger.warning(
                f"Remote batch match timeout: {len(queries)} queries, timeout={self.remote_timeout_s}s"
            )
            return {}
        except Exception as e:
            logger.warning(f"Remote batch match failed: {len(queries)} queries, error={type(e).__name__}: {e}")
            return {}

        return hits or {}

    def _accept_batch_item(
        self,
        item: Optional[BatchMatchItem],
        parsed: ParsedWineText,
    ) -> Optional[MatchResult]:
        if item is None or not item.matched or item.wine is None:
            return None
        if item.confidence < self.thresholds.partial_match:
            return None

        return MatchResult.fuzzy_remote(item.wine, item.confidence, parsed.vintage)

    async def _with_timeout(self, coro):
        if self.remote_timeout_s is None:
            return await coro
        return await asyncio.wait_for(coro, timeout=self.remote_timeout_s)


async def build_wine_matcher(remote: Optional[RemoteWineCatalog] = None) -> WineMatcher:
    """설정 기반 WineMatcher 구성 (로컬 캐시 로드는 백그라운드로 시작)

    Args:
        remote: 원격 카탈로그 (기본값: WineAPIClient)
    """
    from winelens.clients.wine_api_client import WineAPIClient
    from winelens.repositories.impl.wine_cache_repository import build_wine_cache_repository

    local_cache = LocalWineCache(build_wine_cache_repository())
    local_cache.start()
    return WineMatcher(local_cache, remote or WineAPIClient())
