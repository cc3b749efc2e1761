"""외부 API 클라이언트 - export only."""

from .wine_api_client import WineAPIClient

__all__ = ["WineAPIClient"]
