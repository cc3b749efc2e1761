"""전역 테스트 설정

역할:
- 테스트 환경 구성
- 공통 Fake 주입
- 샘플 와인 픽스처
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


# 프로젝트 루트를 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


from tests.fakes import FakeRemoteCatalog, InMemoryWineCacheRepository  # noqa: E402
from tests.fixtures import WINES  # noqa: E402
from winelens.schemas.wine_schema import Wine  # noqa: E402
from winelens.services.impl.local_wine_cache import LocalWineCache  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def test_env() -> None:
    """테스트 환경 변수 설정 (세션 전역)"""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["LOG_LEVEL"] = "INFO"


@pytest.fixture
def opus_one_2015() -> Wine:
    return Wine.model_validate(WINES["opus_one_2015"])


@pytest.fixture
def sample_wines(opus_one_2015) -> list[Wine]:
    return [
        opus_one_2015,
        Wine.model_validate(WINES["margaux_2010"]),
        Wine.model_validate(WINES["monfortino_1998"]),
        Wine.model_validate(WINES["cloudy_bay_2022"]),
    ]


@pytest.fixture
def fully_populated_wine() -> Wine:
    return Wine.model_validate(WINES["sassicaia_2016"])


@pytest.fixture
def fake_remote() -> FakeRemoteCatalog:
    return FakeRemoteCatalog()


@pytest.fixture
def memory_repository() -> InMemoryWineCacheRepository:
    return InMemoryWineCacheRepository()


@pytest.fixture
async def local_cache(sample_wines) -> LocalWineCache:
    """샘플 와인이 들어 있는 메모리 전용 캐시"""
    cache = LocalWineCache()
    for wine in sample_wines:
        await cache.cache(wine)
    return cache
