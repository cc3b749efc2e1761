"""Wine Routes - 카탈로그 검색 / 배치 매칭

HTTP Layer는 CatalogSearchService로 요청을 위임하는 Translator 역할만 수행합니다.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from winelens.core.config import settings
from winelens.core.exceptions import ValidationException, WineLensException
from winelens.core.logging import logger, sanitize_for_log
from winelens.schemas.wine_schema import (
    ApiResponse,
    BatchMatchRequest,
    BatchMatchResponse,
    ErrorDetail,
    SearchFilters,
    SearchOptions,
    WineColor,
    WineSearchData,
    WineSearchResponse,
)
from winelens.search.algolia import AlgoliaSearchService
from winelens.search.base import SearchService
from winelens.services.impl.catalog_search_service import CatalogSearchService
from winelens.utils.text import normalize_text

router = APIRouter(prefix="/api/v1/wines", tags=["wines"])

# 싱글톤 서비스
_search_service: Optional[SearchService] = None
_catalog_service: Optional[CatalogSearchService] = None


def get_search_service() -> SearchService:
    """SearchService 싱글톤 (Algolia)"""
    global _search_service
    if _search_service is None:
        _search_service = AlgoliaSearchService()
    return _search_service


def get_catalog_service(
    search_service: SearchService = Depends(get_search_service),
) -> CatalogSearchService:
    """CatalogSearchService 싱글톤"""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogSearchService(search_service)
    return _catalog_service


async def shutdown_search_service() -> None:
    """앱 종료 시 HTTP 클라이언트 정리"""
    global _search_service, _catalog_service
    if _search_service is not None:
        await _search_service.close()
    _search_service = None
    _catalog_service = None


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    body = ApiResponse(success=False, error=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@router.get("/search", response_model=WineSearchResponse)
async def search_wines(
    q: str = Query(..., min_length=1, description="검색어 (OCR 라인)"),
    limit: int = Query(default=settings.search_default_limit, ge=1, le=1000),
    color: Optional[WineColor] = Query(default=None),
    country: Optional[str] = Query(default=None),
    min_score: Optional[int] = Query(default=None, ge=0, le=100),
    vintage: Optional[int] = Query(default=None),
    service: CatalogSearchService = Depends(get_catalog_service),
):
    """와인 검색 API

    Flow:
        1. 필터 구성
        2. CatalogSearchService에 위임 (limit ≤ search_max_limit)
        3. 결과를 표준 응답으로 변환
    """
    logger.info(f"[API] Search request: q='{sanitize_for_log(q)}', limit={limit}")

    options = SearchOptions(
        limit=limit,
        filters=SearchFilters(
            color=color,
            country=country,
            min_score=min_score,
            vintage=vintage,
        ),
    )

    try:
        hits = await service.search(q, options)
    except ValidationException as e:
        return error_response(400, e.error_code, e.message)
    except WineLensException as e:
        logger.error(f"[API] Search failed: {e}")
        return error_response(500, "SEARCH_ERROR", "Search failed")
    except Exception as e:
        logger.error(f"[API] Unexpected search error: {type(e).__name__}: {e}", exc_info=True)
        return error_response(500, "SEARCH_ERROR", "Search failed")

    return WineSearchResponse(
        success=True,
        data=WineSearchData(
            results=hits,
            total_count=len(hits),
            query_normalized=normalize_text(q),
        ),
    )


@router.post("/batch-match", response_model=BatchMatchResponse)
async def batch_match(
    request: BatchMatchRequest,
    service: CatalogSearchService = Depends(get_catalog_service),
):
    """배치 매칭 API (OCR 메뉴 한 장 분량을 한 번에)"""
    logger.info(f"[API] Batch match request: {len(request.queries)} queries")

    threshold = request.options.confidence_threshold if request.options else None

    try:
        data = await service.batch_match_report(request.queries, confidence_threshold=threshold)
    except ValidationException as e:
        logger.warning(f"[API] Batch validation failed: {e}")
        return error_response(400, "INVALID_REQUEST", e.message)
    except WineLensException as e:
        logger.error(f"[API] Batch match failed: {e}")
        return error_response(500, "BATCH_MATCH_ERROR", "Batch match failed")
    except Exception as e:
        logger.error(f"[API] Unexpected batch match error: {type(e).__name__}: {e}", exc_info=True)
        return error_response(500, "BATCH_MATCH_ERROR", "Batch match failed")

    return BatchMatchResponse(success=True, data=data)
