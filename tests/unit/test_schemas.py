"""스키마 / 설정 / 예외 유닛 테스트"""
import pytest
from pydantic import ValidationError

from winelens.core.config import Settings
from winelens.core.exceptions import (
    InvalidBatchException,
    SearchServiceException,
    SearchServiceTimeoutException,
    ValidationException,
    WineLensException,
)
from winelens.core.logging import sanitize_for_log
from winelens.engine import MatchResult, MatchType
from winelens.schemas.wine_schema import SearchFilters, Wine

from tests.fakes import make_wine


class TestWineSchema:

    def test_minimal_wine_keeps_optionals_absent(self):
        wine = make_wine("w1", "Krug")

        assert wine.vintage is None
        assert wine.country is None
        assert wine.grape_varieties == []

    def test_color_is_required(self):
        with pytest.raises(ValidationError):
            Wine(id="w1", producer="Krug")

    def test_score_range(self):
        with pytest.raises(ValidationError):
            make_wine("w1", "Krug", score=101)

    def test_implausible_vintage(self):
        with pytest.raises(ValidationError):
            make_wine("w1", "Krug", vintage=1500)

    def test_drink_window_order(self):
        with pytest.raises(ValidationError):
            make_wine("w1", "Krug", drink_window_start=2030, drink_window_end=2025)

    def test_full_name_and_display_name(self, opus_one_2015):
        assert opus_one_2015.full_name == "Opus One 2015"
        assert opus_one_2015.display_name == "Opus One"
        assert make_wine("w2", "Ridge", "Monte Bello").display_name == "Ridge Monte Bello"

    def test_round_trip_json(self, fully_populated_wine):
        restored = Wine.model_validate(fully_populated_wine.model_dump(mode="json"))
        assert restored == fully_populated_wine

    def test_search_filters_is_empty(self):
        assert SearchFilters().is_empty()
        assert not SearchFilters(vintage=2015).is_empty()


class TestMatchResult:

    def test_remote_uses_wine_vintage_when_unparsed(self, opus_one_2015):
        result = MatchResult.fuzzy_remote(opus_one_2015, 0.8, None)

        assert result.matched_vintage == 2015
        assert result.match_type == MatchType.FUZZY_REMOTE
        assert not result.is_local

    def test_result_is_immutable(self, opus_one_2015):
        result = MatchResult.exact(opus_one_2015, 2015)

        with pytest.raises(AttributeError):
            result.confidence = 0.1


class TestSettings:

    def test_defaults(self):
        s = Settings(_env_file=None)

        assert s.match_confidence_threshold == 0.7
        assert s.partial_match_threshold == 0.5
        assert s.local_cache_version == 2

    def test_threshold_range(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, match_confidence_threshold=1.5)

    def test_partial_must_not_exceed_strict(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, match_confidence_threshold=0.4, partial_match_threshold=0.6)

    def test_cache_backend_normalized(self):
        assert Settings(_env_file=None, local_cache_backend=" Redis ").local_cache_backend == "redis"
        with pytest.raises(ValidationError):
            Settings(_env_file=None, local_cache_backend="sqlite")


class TestExceptions:

    def test_hierarchy(self):
        exc = SearchServiceTimeoutException(operation="search", timeout_s=5.0)

        assert isinstance(exc, SearchServiceException)
        assert isinstance(exc, WineLensException)
        assert exc.error_code == "SEARCH_TIMEOUT"
        assert exc.details["timeout_s"] == 5.0

    def test_validation_details(self):
        exc = InvalidBatchException("queries array is required")

        assert isinstance(exc, ValidationException)
        assert exc.details["field"] == "queries"
        assert str(exc).startswith("[VALIDATION_ERROR]")


class TestSanitizeForLog:

    def test_masks_secrets(self):
        assert sanitize_for_log("api_key=abc") == "api_key=***"
        assert sanitize_for_log("Authorization: Bearer xyz") == "Authorization: ***"

    def test_flattens_ocr_newlines(self):
        assert sanitize_for_log("Opus One\n2015\t$350") == "Opus One 2015 $350"

    def test_truncates_long_lines(self):
        assert sanitize_for_log("x" * 150, max_length=10) == "x" * 10 + "..."

    def test_empty(self):
        assert sanitize_for_log("") == "[empty]"
