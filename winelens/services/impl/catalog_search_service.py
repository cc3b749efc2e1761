"""카탈로그 검색 서비스 - 검색/배치 매칭 비즈니스 로직 (서버 측)"""
from __future__ import annotations

import asyncio
import time
from typing import Optional

from winelens.core.config import settings
from winelens.core.exceptions import InvalidBatchException, InvalidQueryException
from winelens.core.logging import logger, sanitize_for_log
from winelens.schemas.wine_schema import (
    BatchMatchData,
    BatchMatchItem,
    SearchFilters,
    SearchHit,
    SearchOptions,
)
from winelens.search.base import SearchService


class CatalogSearchService:
    """SearchService 위에서 검색 제한/배치 매칭을 담당

    RemoteWineCatalog 프로토콜(search_wines, batch_match)도 구현하므로
    HTTP를 거치지 않고 같은 프로세스에서 WineMatcher의 원격 단계로 쓸 수 있습니다.
    """

    def __init__(self, search_service: SearchService):
        if search_service is None:
            raise ValueError("search_service must not be None")
        self.search_service = search_service

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> list[SearchHit]:
        """검색 (limit은 search_max_limit으로 제한)

        Raises:
            InvalidQueryException: 빈 검색어
            SearchServiceException: 원격 오류 (호출자가 처리)
        """
        if not query or not query.strip():
            raise InvalidQueryException("query must not be empty")

        options = options or SearchOptions(limit=settings.search_default_limit)
        limit = min(options.limit, settings.search_max_limit)
        if limit != options.limit:
            options = options.model_copy(update={"limit": limit})

        return await self.search_service.search(query, options)

    async def batch_match_report(
        self,
        queries: list[str],
        confidence_threshold: Optional[float] = None,
    ) -> BatchMatchData:
        """배치 매칭 (쿼리별 top-1 검색을 병렬 실행)

        개별 쿼리 실패는 매칭 실패(confidence 0)로 처리하고 나머지는 계속 진행합니다.

        Raises:
            InvalidBatchException: 쿼리가 없거나 최대 개수 초과
        """
        if not queries:
            raise InvalidBatchException("queries array is required")
        if len(queries) > settings.batch_max_queries:
            raise InvalidBatchException(
                f"Maximum {settings.batch_max_queries} queries per request",
                details={"count": len(queries)},
            )

        threshold = (
            confidence_threshold
            if confidence_threshold is not None
            else settings.batch_default_confidence
        )

        started = time.perf_counter()
        matches = await asyncio.gather(
            *(self._match_one(query, threshold) for query in queries)
        )
        elapsed_ms = (time.perf_counter() - started) * 1000

        matched_count = sum(1 for m in matches if m.matched)
        logger.info(
            f"Batch match: {matched_count}/{len(queries)} matched, threshold={threshold}, "
            f"elapsed={elapsed_ms:.1f}ms"
        )

        return BatchMatchData(
            matches=list(matches),
            match_rate=matched_count / len(queries),
            processing_time_ms=elapsed_ms,
        )

    async def _match_one(self, query: str, threshold: float) -> BatchMatchItem:
        try:
            results = await self.search_service.search(query, SearchOptions(limit=1))
        except Exception as e:
            logger.warning(
                f"Batch item search failed: query='{sanitize_for_log(query)}', "
                f"error={type(e).__name__}: {e}"
            )
            return BatchMatchItem(query=query, matched=False, wine=None, confidence=0.0)

        best = results[0] if results else None
        if best is not None and best.match_confidence >= threshold:
            return BatchMatchItem(
                query=query,
                matched=True,
                wine=best.wine,
                confidence=best.match_confidence,
            )

        return BatchMatchItem(
            query=query,
            matched=False,
            wine=None,
            confidence=best.match_confidence if best is not None else 0.0,
        )

    # ------------------------------------------------------------------
    # RemoteWineCatalog
    # ------------------------------------------------------------------

    async def search_wines(
        self,
        query: str,
        vintage: Optional[int] = None,
        limit: int = 1,
    ) -> list[SearchHit]:
        filters = SearchFilters(vintage=vintage) if vintage is not None else None
        return await self.search(query, SearchOptions(limit=limit, filters=filters))

    async def batch_match(
        self,
        queries: list[str],
        confidence_threshold: Optional[float] = None,
    ) -> dict[str, BatchMatchItem]:
        report = await self.batch_match_report(queries, confidence_threshold)
        return {item.query: item for item in report.matches}
