"""Algolia 카탈로그 검색 구현 (algoliasearch async SearchClient)

- 호스트 선택/재시도는 SDK가 담당합니다.
- 서비스 인스턴스 단위로 SearchClient를 재사용하고, 앱 종료 시 close()로 정리합니다.
- SDK 예외는 SearchService*Exception으로 변환합니다.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from algoliasearch.http.exceptions import (
    AlgoliaException,
    AlgoliaUnreachableHostException,
    RequestException,
)
from algoliasearch.search.client import SearchClient

from winelens.core.config import settings
from winelens.core.exceptions import (
    ConfigurationException,
    SearchServiceConnectionException,
    SearchServiceResponseException,
    SearchServiceTimeoutException,
)
from winelens.core.logging import logger, sanitize_for_log
from winelens.schemas.wine_schema import SearchHit, SearchOptions, Wine
from winelens.search.base import SearchService
from winelens.search.records import (
    build_filter_string,
    calculate_confidence,
    record_to_wine,
    wine_to_record,
)
from winelens.utils.resource_loader import load_search_synonyms


# 오타 허용 설정 (인덱스 설정과 쿼리 양쪽에 동일하게 적용)
MIN_WORD_SIZE_FOR_1_TYPO = 3
MIN_WORD_SIZE_FOR_2_TYPOS = 6

INDEX_SETTINGS: dict[str, Any] = {
    "searchableAttributes": [
        "full_name",
        "producer",
        "name",
        "producer_normalized",
        "name_normalized",
        "searchable_text",
        "region",
        "grape_varieties",
    ],
    "attributesForFaceting": [
        "filterOnly(color)",
        "filterOnly(country)",
        "filterOnly(vintage)",
        "searchable(region)",
        "score",
    ],
    # 관련도가 같으면 점수 높은 와인 우선
    "customRanking": ["desc(score)"],
    "typoTolerance": True,
    "minWordSizefor1Typo": MIN_WORD_SIZE_FOR_1_TYPO,
    "minWordSizefor2Typos": MIN_WORD_SIZE_FOR_2_TYPOS,
}


def _as_dict(response: Any) -> dict[str, Any]:
    # SDK 응답 모델 / 테스트용 dict 모두 허용
    if response is None:
        return {}
    if isinstance(response, dict):
        return response
    return response.to_dict()


class AlgoliaSearchService(SearchService):
    """Algolia 인덱스 기반 SearchService"""

    def __init__(
        self,
        app_id: Optional[str] = None,
        api_key: Optional[str] = None,
        index_name: Optional[str] = None,
        timeout_s: Optional[float] = None,
        client: Optional[SearchClient] = None,
    ):
        """
        Args:
            app_id: Algolia Application ID (기본값: settings)
            api_key: Algolia API Key (기본값: settings)
            index_name: 인덱스 이름
            timeout_s: 호출당 제한 시간 (초)
            client: 미리 만든 SearchClient (테스트 주입용)

        Raises:
            ConfigurationException: 자격 증명이 없는 경우
        """
        self.app_id = app_id or settings.algolia_app_id
        self.api_key = api_key or settings.algolia_api_key
        self.index_name = index_name or settings.algolia_index_name
        self.timeout_s = timeout_s or settings.search_timeout_s

        if client is None:
            if not self.app_id:
                raise ConfigurationException("algolia_app_id")
            if not self.api_key:
                raise ConfigurationException("algolia_api_key")

        self._lock = asyncio.Lock()
        self._client: Optional[SearchClient] = client

    # ------------------------------------------------------------------
    # SDK
    # ------------------------------------------------------------------

    async def _ensure_client(self) -> SearchClient:
        async with self._lock:
            if self._client is None:
                self._client = SearchClient(self.app_id, self.api_key)
            return self._client

    async def _call(self, operation: str, method_name: str, **kwargs) -> dict[str, Any]:
        client = await self._ensure_client()
        method = getattr(client, method_name)
        try:
            response = await asyncio.wait_for(method(**kwargs), timeout=self.timeout_s)
        except asyncio.TimeoutError:
            raise SearchServiceTimeoutException(operation=operation, timeout_s=self.timeout_s)
        except RequestException as e:
            raise SearchServiceResponseException(
                status_code=getattr(e, "status_code", None) or 500,
                reason=sanitize_for_log(str(e), max_length=200),
                details={"operation": operation},
            )
        except AlgoliaUnreachableHostException as e:
            logger.info(f"[ALGOLIA] {operation} failed: unreachable hosts: {e!r}")
            raise SearchServiceConnectionException(reason=f"{type(e).__name__}: {e}")
        except AlgoliaException as e:
            logger.info(f"[ALGOLIA] {operation} failed: {type(e).__name__}: {e!r}")
            raise SearchServiceConnectionException(reason=f"{type(e).__name__}: {e}")

        if isinstance(response, list):
            return {"items": [_as_dict(item) for item in response]}
        return _as_dict(response)

    async def close(self) -> None:
        async with self._lock:
            if self._client is None:
                return
            await self._client.close()
            self._client = None

    # ------------------------------------------------------------------
    # SearchService
    # ------------------------------------------------------------------

    def build_search_params(self, query: str, options: SearchOptions) -> dict[str, Any]:
        params: dict[str, Any] = {
            "query": query,
            "hitsPerPage": options.limit,
            "attributesToRetrieve": ["*"],
            "typoTolerance": True,
            "minWordSizefor1Typo": MIN_WORD_SIZE_FOR_1_TYPO,
            "minWordSizefor2Typos": MIN_WORD_SIZE_FOR_2_TYPOS,
        }
        filters = build_filter_string(options.filters)
        if filters:
            params["filters"] = filters
        return params

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> list[SearchHit]:
        options = options or SearchOptions()

        data = await self._call(
            "search",
            "search_single_index",
            index_name=self.index_name,
            search_params=self.build_search_params(query, options),
        )

        hits: list[SearchHit] = []
        for hit in data.get("hits") or []:
            wine = record_to_wine(hit)
            if wine is None:
                continue
            hits.append(
                SearchHit(
                    wine=wine,
                    match_confidence=calculate_confidence(query, hit),
                    match_type="fuzzy",
                )
            )

        logger.debug(
            f"[ALGOLIA] search query='{sanitize_for_log(query)}' hits={len(hits)}"
        )
        return hits

    async def index_wine(self, wine: Wine) -> None:
        await self._call(
            "index_wine",
            "save_object",
            index_name=self.index_name,
            body=wine_to_record(wine),
        )

    async def index_wines(self, wines: list[Wine]) -> None:
        if not wines:
            return
        await self._call(
            "index_wines",
            "save_objects",
            index_name=self.index_name,
            objects=[wine_to_record(wine) for wine in wines],
        )
        logger.info(f"[ALGOLIA] indexed {len(wines)} wines")

    async def delete_wine(self, wine_id: str) -> None:
        await self._call(
            "delete_wine",
            "delete_object",
            index_name=self.index_name,
            object_id=wine_id,
        )

    async def configure_index(self) -> None:
        """인덱스 설정 + 도메인 동의어 등록 (초기 셋업 시 1회)

        동의어 그룹(품종 약어, chateau/domaine 표기 변형)은 인덱스에 한 번
        등록되면 쿼리 시점에 자동으로 적용됩니다.
        """
        await self._call(
            "set_settings",
            "set_settings",
            index_name=self.index_name,
            index_settings=INDEX_SETTINGS,
        )

        synonyms = [
            {"objectID": object_id, "type": "synonym", "synonyms": words}
            for object_id, words in load_search_synonyms().items()
        ]
        if synonyms:
            await self._call(
                "save_synonyms",
                "save_synonyms",
                index_name=self.index_name,
                synonym_hit=synonyms,
            )
        logger.info(f"[ALGOLIA] index '{self.index_name}' configured ({len(synonyms)} synonym groups)")
