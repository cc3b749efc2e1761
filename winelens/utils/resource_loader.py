"""리소스 파일(YAML) 로더 유틸리티"""
import os
import yaml
from typing import Any, Dict
from functools import lru_cache

from winelens.core.logging import logger


def get_resource_path(relative_path: str) -> str:
    """패키지 기준 리소스 절대 경로 반환"""
    # winelens/utils/resource_loader.py -> winelens/utils -> winelens
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(base_dir, "resources", relative_path)


@lru_cache(maxsize=32)
def load_yaml_resource(relative_path: str) -> Dict[str, Any]:
    """YAML 리소스 로드 및 캐싱"""
    path = get_resource_path(relative_path)
    if not os.path.exists(path):
        logger.warning(f"Resource not found: {path}")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except Exception as e:
        logger.error(f"Failed to load YAML resource {path}: {e}")
        return {}


def load_search_synonyms() -> Dict[str, list[str]]:
    """검색 인덱스 동의어 그룹 로드 (objectID -> 동의어 목록)"""
    data = load_yaml_resource("search/synonyms.yaml")
    groups = data.get("synonyms", {}) or {}
    return {
        str(key): [str(word) for word in words]
        for key, words in groups.items()
        if isinstance(words, list) and len(words) >= 2
    }
