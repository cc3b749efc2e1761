"""와인 캐시 리포지토리 유닛 테스트 (파일 / Redis Mock)"""
import json

import pytest
from unittest.mock import MagicMock, patch

from winelens.core.exceptions import (
    CacheConnectionException,
    CacheSerializationException,
)
from winelens.repositories.impl.wine_cache_repository import (
    FileWineCacheRepository,
    RedisWineCacheRepository,
    build_wine_cache_repository,
    deserialize_wines,
    serialize_wines,
)


class TestSerialization:

    def test_optional_fields_written_as_null(self, opus_one_2015):
        payload = json.loads(serialize_wines([opus_one_2015]))

        assert payload[0]["appellation"] is None
        assert payload[0]["release_price"] is None
        assert payload[0]["vintage"] == 2015

    def test_deserialize_rejects_non_list(self):
        with pytest.raises(CacheSerializationException):
            deserialize_wines('{"id": "w1"}')

    def test_deserialize_rejects_bad_json(self):
        with pytest.raises(CacheSerializationException):
            deserialize_wines("[{not json")

    def test_deserialize_rejects_invalid_wine(self):
        with pytest.raises(CacheSerializationException):
            deserialize_wines('[{"id": "w1", "producer": "X", "score": 150}]')


class TestFileWineCacheRepository:

    def test_missing_file_loads_empty(self, tmp_path):
        repo = FileWineCacheRepository(str(tmp_path / "cache.json"), version=2)
        assert repo.load() == []

    def test_save_and_load(self, tmp_path, sample_wines):
        repo = FileWineCacheRepository(str(tmp_path / "nested" / "cache.json"), version=2)
        repo.save(sample_wines)

        assert repo.load() == sample_wines
        assert (tmp_path / "nested" / "cache.json.version").read_text() == "2"

    def test_version_mismatch_discards(self, tmp_path, sample_wines):
        path = tmp_path / "cache.json"
        FileWineCacheRepository(str(path), version=1).save(sample_wines)

        repo = FileWineCacheRepository(str(path), version=2)

        assert repo.load() == []
        assert not path.exists()

    def test_missing_version_file_discards(self, tmp_path, sample_wines):
        path = tmp_path / "cache.json"
        repo = FileWineCacheRepository(str(path), version=2)
        repo.save(sample_wines)
        (tmp_path / "cache.json.version").unlink()

        assert repo.load() == []

    def test_corrupt_file_raises_serialization_error(self, tmp_path):
        path = tmp_path / "cache.json"
        repo = FileWineCacheRepository(str(path), version=2)
        repo.save([])
        path.write_text("{corrupt", encoding="utf-8")

        with pytest.raises(CacheSerializationException):
            repo.load()

    def test_clear_is_idempotent(self, tmp_path):
        repo = FileWineCacheRepository(str(tmp_path / "cache.json"), version=2)
        repo.clear()
        repo.clear()


class TestRedisWineCacheRepository:

    def test_requires_url(self):
        with pytest.raises(CacheConnectionException):
            RedisWineCacheRepository(redis_url="")

    @patch('winelens.repositories.impl.wine_cache_repository.Redis')
    def test_save_writes_payload_and_version(self, mock_redis, sample_wines):
        mock_client = MagicMock()
        mock_pipe = MagicMock()
        mock_client.pipeline.return_value = mock_pipe
        mock_redis.from_url.return_value = mock_client

        repo = RedisWineCacheRepository(redis_url="redis://localhost:6379/0", key="wl:test", version=2)
        repo.save(sample_wines)

        mock_pipe.set.assert_any_call("wl:test:version", "2")
        mock_pipe.execute.assert_called_once()

    @patch('winelens.repositories.impl.wine_cache_repository.Redis')
    def test_load_round_trip(self, mock_redis, sample_wines):
        mock_client = MagicMock()
        mock_client.get.side_effect = lambda key: {
            "wl:test": serialize_wines(sample_wines),
            "wl:test:version": "2",
        }.get(key)
        mock_redis.from_url.return_value = mock_client

        repo = RedisWineCacheRepository(redis_url="redis://localhost:6379/0", key="wl:test", version=2)

        assert repo.load() == sample_wines

    @patch('winelens.repositories.impl.wine_cache_repository.Redis')
    def test_load_version_mismatch(self, mock_redis, sample_wines):
        mock_client = MagicMock()
        mock_client.get.side_effect = lambda key: {
            "wl:test": serialize_wines(sample_wines),
            "wl:test:version": "1",
        }.get(key)
        mock_redis.from_url.return_value = mock_client

        repo = RedisWineCacheRepository(redis_url="redis://localhost:6379/0", key="wl:test", version=2)

        assert repo.load() == []
        mock_client.delete.assert_called_once_with("wl:test", "wl:test:version")

    @patch('winelens.repositories.impl.wine_cache_repository.Redis')
    def test_load_connection_error(self, mock_redis):
        mock_client = MagicMock()
        mock_client.get.side_effect = Exception("Connection refused")
        mock_redis.from_url.return_value = mock_client

        repo = RedisWineCacheRepository(redis_url="redis://localhost:6379/0", key="wl:test", version=2)

        with pytest.raises(CacheConnectionException):
            repo.load()


class TestBuildRepository:

    def test_default_is_file(self):
        with patch('winelens.repositories.impl.wine_cache_repository.settings') as mock_settings:
            mock_settings.local_cache_backend = "file"
            mock_settings.local_cache_path = ".cache/test.json"
            mock_settings.local_cache_version = 2

            assert isinstance(build_wine_cache_repository(), FileWineCacheRepository)

    @patch('winelens.repositories.impl.wine_cache_repository.Redis')
    def test_redis_backend(self, mock_redis):
        with patch('winelens.repositories.impl.wine_cache_repository.settings') as mock_settings:
            mock_settings.local_cache_backend = "redis"
            mock_settings.redis_url = "redis://localhost:6379/0"
            mock_settings.redis_cache_key = "winelens:wine_cache"
            mock_settings.local_cache_version = 2

            repo = build_wine_cache_repository()

        assert isinstance(repo, RedisWineCacheRepository)
        assert repo.version_key == "winelens:wine_cache:version"
