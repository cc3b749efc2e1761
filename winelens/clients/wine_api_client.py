"""카탈로그 HTTP API 클라이언트 (httpx)

- WineMatcher의 원격 단계(RemoteWineCatalog)로 사용됩니다.
- 요청마다 AsyncClient를 만들지 않고 인스턴스 단위로 재사용하며,
  종료 시 close()로 정리합니다.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from winelens.core.config import settings
from winelens.core.exceptions import (
    SearchServiceConnectionException,
    SearchServiceResponseException,
    SearchServiceTimeoutException,
)
from winelens.core.logging import logger, sanitize_for_log
from winelens.schemas.wine_schema import BatchMatchData, BatchMatchItem, SearchHit, WineSearchData


class WineAPIClient:
    """/api/v1/wines 엔드포인트 클라이언트"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.wine_api_base_url).rstrip("/")
        self.token = token if token is not None else settings.wine_api_token
        self.timeout_s = timeout_s or settings.wine_api_timeout_s
        self._transport = transport
        self._lock = asyncio.Lock()
        self._client: Optional[httpx.AsyncClient] = None

    def default_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._lock:
            if self._client is not None:
                return self._client
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.default_headers(),
                timeout=self.timeout_s,
                transport=self._transport,
            )
            return self._client

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> dict[str, Any]:
        client = await self._ensure_client()
        try:
            resp = await client.request(method, path, params=params, json=json)
        except httpx.TimeoutException:
            raise SearchServiceTimeoutException(operation=operation, timeout_s=self.timeout_s)
        except httpx.HTTPError as e:
            logger.info(f"[WINE_API] {operation} failed: {type(e).__name__}: {e!r}")
            raise SearchServiceConnectionException(reason=f"{type(e).__name__}: {e}")

        if resp.status_code >= 400:
            raise SearchServiceResponseException(
                status_code=resp.status_code,
                reason=sanitize_for_log(resp.text, max_length=200),
                details={"operation": operation},
            )

        try:
            body = resp.json()
        except ValueError as e:
            raise SearchServiceResponseException(
                status_code=resp.status_code,
                reason=f"invalid JSON: {e}",
                details={"operation": operation},
            )

        if not isinstance(body, dict) or not body.get("success"):
            error = body.get("error") if isinstance(body, dict) else None
            raise SearchServiceResponseException(
                status_code=resp.status_code,
                reason=str((error or {}).get("message", "unsuccessful response")),
                details={"operation": operation},
            )
        return body.get("data") or {}

    async def search_wines(
        self,
        query: str,
        vintage: Optional[int] = None,
        limit: int = 1,
    ) -> list[SearchHit]:
        """GET /wines/search

        Raises:
            SearchServiceException: 전송/HTTP/응답 형식 오류
        """
        params: dict[str, Any] = {"q": query, "limit": limit}
        if vintage is not None:
            params["vintage"] = vintage

        data = await self._request("GET", "/wines/search", "search_wines", params=params)
        try:
            return WineSearchData.model_validate(data).results
        except ValidationError as e:
            raise SearchServiceResponseException(
                status_code=200,
                reason=f"unexpected search payload: {e.error_count()} errors",
                details={"operation": "search_wines"},
            )

    async def batch_match(
        self,
        queries: list[str],
        confidence_threshold: Optional[float] = None,
    ) -> dict[str, BatchMatchItem]:
        """POST /wines/batch-match

        Returns:
            쿼리 -> 매칭 결과 (응답에 없는 쿼리는 키가 없음)
        """
        payload: dict[str, Any] = {"queries": list(queries)}
        if confidence_threshold is not None:
            payload["options"] = {"confidence_threshold": confidence_threshold}

        data = await self._request("POST", "/wines/batch-match", "batch_match", json=payload)
        try:
            report = BatchMatchData.model_validate(data)
        except ValidationError as e:
            raise SearchServiceResponseException(
                status_code=200,
                reason=f"unexpected batch payload: {e.error_count()} errors",
                details={"operation": "batch_match"},
            )

        logger.debug(
            f"[WINE_API] batch_match: {len(queries)} queries, match_rate={report.match_rate:.2f}"
        )
        return {item.query: item for item in report.matches}

    async def close(self) -> None:
        async with self._lock:
            if self._client is None:
                return
            await self._client.aclose()
            self._client = None
