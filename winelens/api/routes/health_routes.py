"""헬스 체크 엔드포인트"""
from fastapi import APIRouter
from datetime import datetime

from winelens.schemas.wine_schema import HealthResponse
from winelens.api.routes.wine_routes import get_search_service
from winelens.core.exceptions import ConfigurationException
from winelens.core.logging import logger
from winelens import __version__

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    헬스 체크 엔드포인트

    - 서버 상태
    - 검색 서비스 설정 상태
    """
    search_ok = False

    try:
        get_search_service()
        search_ok = True
    except ConfigurationException as e:
        logger.warning(f"Search service not configured: {e.error_code}")
    except Exception as e:
        logger.error(f"Unexpected search service error: {e}")

    return HealthResponse(
        status="ok" if search_ok else "degraded",
        timestamp=datetime.now(),
        version=__version__,
        search_configured=search_ok,
    )


@router.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "service": "WineLens Catalog Search",
        "version": __version__,
        "docs": "/docs"
    }
