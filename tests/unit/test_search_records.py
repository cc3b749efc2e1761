"""검색 인덱스 레코드 / 신뢰도 / 필터 유닛 테스트"""
import pytest

from winelens.schemas.wine_schema import SearchFilters, WineColor
from winelens.search.records import (
    MAX_CONFIDENCE,
    build_filter_string,
    calculate_confidence,
    record_to_wine,
    wine_to_record,
)

from tests.fixtures import ALGOLIA_HITS


class TestWineToRecord:

    def test_normalized_fields(self, fully_populated_wine):
        record = wine_to_record(fully_populated_wine)

        assert record["objectID"] == "w-sassicaia-2016"
        assert record["full_name"] == "Tenuta San Guido Sassicaia 2016"
        assert record["searchable_text"] == "tenuta san guido sassicaia 2016"
        assert record["producer_normalized"] == "tenuta san guido"
        assert record["grape_varieties"] == ["Cabernet Sauvignon", "Cabernet Franc"]
        assert record["color"] == "red"

    def test_record_back_to_wine_drops_unindexed_fields(self, fully_populated_wine):
        wine = record_to_wine(wine_to_record(fully_populated_wine))

        assert wine.id == fully_populated_wine.id
        assert wine.score == 97
        assert wine.appellation is None
        assert wine.alcohol is None
        assert [g.percentage for g in wine.grape_varieties] == [None, None]


class TestRecordToWine:

    def test_algolia_hit(self):
        wine = record_to_wine(ALGOLIA_HITS["opus_one_2015"])

        assert wine.producer == "Opus One"
        assert wine.vintage == 2015
        assert wine.color == WineColor.RED

    def test_malformed_hit_returns_none(self):
        assert record_to_wine(ALGOLIA_HITS["malformed"]) is None

    def test_hit_without_color_is_rejected(self):
        assert record_to_wine(ALGOLIA_HITS["colorless"]) is None
        assert record_to_wine({**ALGOLIA_HITS["opus_one_2015"], "color": None}) is None


class TestCalculateConfidence:

    def test_full_overlap_with_vintage(self):
        confidence = calculate_confidence("Opus One 2015", ALGOLIA_HITS["opus_one_2015"])
        # 1.0 * 0.8 + 0.15 + 0.05 = 1.0 -> 상한 0.99
        assert confidence == MAX_CONFIDENCE

    def test_full_overlap_without_vintage(self):
        confidence = calculate_confidence("opus one", ALGOLIA_HITS["opus_one_2015"])
        assert confidence == pytest.approx(0.85)

    def test_partial_overlap(self):
        confidence = calculate_confidence("opus one overture", ALGOLIA_HITS["opus_one_2015"])
        assert confidence == pytest.approx((2 / 3) * 0.8 + 0.05)

    def test_empty_query_floor(self):
        assert calculate_confidence("", ALGOLIA_HITS["opus_one_2015"]) == pytest.approx(0.05)

    def test_falls_back_to_full_name(self):
        hit = {"objectID": "w1", "full_name": "Château Margaux Grand Vin"}
        assert calculate_confidence("chateau margaux", hit) == pytest.approx(0.85)


class TestBuildFilterString:

    def test_no_filters(self):
        assert build_filter_string(None) == ""
        assert build_filter_string(SearchFilters()) == ""

    def test_all_filters(self):
        filters = SearchFilters(color=WineColor.RED, country="France", min_score=90, vintage=2015)

        assert build_filter_string(filters) == (
            'color:red AND country:"France" AND score >= 90 AND vintage = 2015'
        )

    def test_single_filter(self):
        assert build_filter_string(SearchFilters(min_score=95)) == "score >= 95"
