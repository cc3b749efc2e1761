"""Search service interface - 검색 엔진 교체가 가능하도록 추상화"""

from abc import ABC, abstractmethod
from typing import Optional

from winelens.schemas.wine_schema import SearchHit, SearchOptions, Wine


class SearchService(ABC):
    """카탈로그 검색 서비스 인터페이스"""

    @abstractmethod
    async def search(self, query: str, options: Optional[SearchOptions] = None) -> list[SearchHit]:
        """검색 실행

        Args:
            query: 검색어 (OCR 라인 또는 정규화된 텍스트)
            options: limit / filters

        Returns:
            관련도 순으로 정렬된 히트 목록 (신뢰도 포함)

        Raises:
            SearchServiceException: 네트워크/서비스 오류
        """

    @abstractmethod
    async def index_wine(self, wine: Wine) -> None:
        """와인 한 건 인덱싱 (upsert)"""

    @abstractmethod
    async def index_wines(self, wines: list[Wine]) -> None:
        """여러 건 인덱싱 (upsert)"""

    @abstractmethod
    async def delete_wine(self, wine_id: str) -> None:
        """인덱스에서 삭제"""

    async def close(self) -> None:
        return None
