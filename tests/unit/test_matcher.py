"""WineMatcher 유닛 테스트 (Fake 원격 카탈로그 사용)"""

from __future__ import annotations

import asyncio

import pytest

from winelens.core.exceptions import SearchServiceConnectionException
from winelens.engine import (
    EXACT_MATCH_CONFIDENCE,
    MatchThresholds,
    MatchType,
    WineMatcher,
)
from winelens.schemas.wine_schema import BatchMatchItem, SearchHit
from winelens.services.impl.local_wine_cache import LocalWineCache
from winelens.utils.text.matching import calculate_similarity

from tests.fakes import FakeRemoteCatalog, make_wine


THRESHOLDS = MatchThresholds(match_confidence=0.7, partial_match=0.5)


def make_matcher(local_cache, remote, timeout_s: float = 0) -> WineMatcher:
    return WineMatcher(local_cache, remote, thresholds=THRESHOLDS, remote_timeout_s=timeout_s)


def hit(wine, confidence: float) -> SearchHit:
    return SearchHit(wine=wine, match_confidence=confidence)


def batch_item(query: str, wine, confidence: float) -> BatchMatchItem:
    return BatchMatchItem(query=query, matched=True, wine=wine, confidence=confidence)


class TestMatchWine:
    """단건 매칭"""

    @pytest.mark.asyncio
    async def test_exact_local_match(self, local_cache, fake_remote):
        matcher = make_matcher(local_cache, fake_remote)

        result = await matcher.match_wine("Opus One $350")

        assert result is not None
        assert result.match_type == MatchType.EXACT
        assert result.confidence == EXACT_MATCH_CONFIDENCE
        assert result.wine.id == "w-opus-2015"
        assert result.matched_vintage is None
        assert fake_remote.search_calls == []

    @pytest.mark.asyncio
    async def test_fuzzy_local_match(self, local_cache, fake_remote):
        matcher = make_matcher(local_cache, fake_remote)

        result = await matcher.match_wine("Conterno Barolo Monfortino")

        assert result is not None
        assert result.match_type == MatchType.FUZZY_LOCAL
        assert result.wine.id == "w-barolo-1998"
        assert result.confidence >= THRESHOLDS.match_confidence
        assert fake_remote.search_calls == []

    @pytest.mark.asyncio
    async def test_fuzzy_below_threshold_goes_remote(self, fake_remote):
        cache = LocalWineCache()
        await cache.cache(make_wine("w1", "Opus One", ""))
        matcher = make_matcher(cache, fake_remote)

        # similarity("opus one 2015", "opus one") ~ 0.646 < 0.7
        result = await matcher.match_wine("Opus One 2015 $350")

        assert result is None
        assert fake_remote.search_calls == [("opus one 2015", 2015, 1)]

    @pytest.mark.asyncio
    async def test_fuzzy_threshold_boundary(self, fake_remote):
        cache = LocalWineCache()
        await cache.cache(make_wine("w1", "Opus One", ""))
        score = calculate_similarity("opus one 2015", "opus one")

        at_score = MatchThresholds(match_confidence=score, partial_match=0.5)
        matcher = WineMatcher(cache, fake_remote, thresholds=at_score, remote_timeout_s=0)
        result = await matcher.match_wine("Opus One 2015 $350")

        assert result.match_type == MatchType.FUZZY_LOCAL
        assert result.confidence == score
        assert fake_remote.search_calls == []

        above_score = MatchThresholds(match_confidence=score + 1e-9, partial_match=0.5)
        matcher = WineMatcher(cache, fake_remote, thresholds=above_score, remote_timeout_s=0)

        assert await matcher.match_wine("Opus One 2015 $350") is None
        assert fake_remote.search_calls == [("opus one 2015", 2015, 1)]

    @pytest.mark.asyncio
    async def test_remote_match_and_write_back(self, fake_remote, opus_one_2015):
        cache = LocalWineCache()
        fake_remote.search_hits = [hit(opus_one_2015, 0.95)]
        matcher = make_matcher(cache, fake_remote)

        result = await matcher.match_wine("Opus One 2015 $350")

        assert result.match_type == MatchType.FUZZY_REMOTE
        assert result.confidence == 0.95
        assert result.matched_vintage == 2015

        await cache.drain()
        assert await cache.get_wine(opus_one_2015.id) == opus_one_2015

    @pytest.mark.asyncio
    async def test_remote_vintage_falls_back_to_wine(self, fake_remote, opus_one_2015):
        fake_remote.search_hits = [hit(opus_one_2015, 0.9)]
        matcher = make_matcher(LocalWineCache(), fake_remote)

        result = await matcher.match_wine("Opus One Napa")

        assert result.matched_vintage == 2015

    @pytest.mark.asyncio
    async def test_remote_threshold_boundary_accepted(self, fake_remote, opus_one_2015):
        fake_remote.search_hits = [hit(opus_one_2015, 0.7)]
        matcher = make_matcher(LocalWineCache(), fake_remote)

        assert await matcher.match_wine("opus one napa") is not None

    @pytest.mark.asyncio
    async def test_remote_below_threshold_rejected(self, fake_remote, opus_one_2015):
        cache = LocalWineCache()
        fake_remote.search_hits = [hit(opus_one_2015, 0.69)]
        matcher = make_matcher(cache, fake_remote)

        assert await matcher.match_wine("opus one napa") is None
        await cache.drain()
        assert await cache.count() == 0

    @pytest.mark.asyncio
    async def test_remote_failure_returns_none(self, fake_remote):
        fake_remote.error = SearchServiceConnectionException(reason="down")
        matcher = make_matcher(LocalWineCache(), fake_remote)

        assert await matcher.match_wine("Krug Grande Cuvee") is None

    @pytest.mark.asyncio
    async def test_remote_timeout_returns_none(self, opus_one_2015):
        class SlowRemote(FakeRemoteCatalog):
            async def search_wines(self, query, vintage=None, limit=1):
                await asyncio.sleep(1)
                return [hit(opus_one_2015, 0.99)]

        matcher = make_matcher(LocalWineCache(), SlowRemote(), timeout_s=0.01)

        assert await matcher.match_wine("opus one") is None

    @pytest.mark.asyncio
    async def test_empty_text(self, local_cache, fake_remote):
        matcher = make_matcher(local_cache, fake_remote)

        assert await matcher.match_wine("") is None
        assert await matcher.match_wine("$45") is None
        assert fake_remote.search_calls == []


class TestBatchMatch:
    """배치 매칭"""

    @pytest.mark.asyncio
    async def test_single_remote_call_for_unresolved(self, fake_remote):
        matcher = make_matcher(LocalWineCache(), fake_remote)
        texts = ["Krug Grande Cuvee", "Petrus 2005 $4,000", "Screaming Eagle '12"]

        results = await matcher.batch_match(texts)

        assert len(fake_remote.batch_calls) == 1
        assert fake_remote.batch_calls[0] == ["krug grande cuvee", "petrus 2005", "screaming eagle 12"]
        assert fake_remote.batch_thresholds == [THRESHOLDS.partial_match]
        assert set(results) == set(texts)
        assert all(r is None for r in results.values())
        assert fake_remote.search_calls == []

    @pytest.mark.asyncio
    async def test_local_hits_skip_remote(self, local_cache, fake_remote):
        matcher = make_matcher(local_cache, fake_remote)

        results = await matcher.batch_match(["Opus One", "Cloudy Bay Sauvignon Blanc"])

        assert fake_remote.batch_calls == []
        assert results["Opus One"].match_type == MatchType.EXACT
        assert results["Cloudy Bay Sauvignon Blanc"].match_type == MatchType.EXACT

    @pytest.mark.asyncio
    async def test_mixed_local_and_remote(self, local_cache, fake_remote):
        petrus = make_wine("w-petrus-2005", "Petrus", "", 2005)
        fake_remote.batch_results = {"petrus 2005": batch_item("petrus 2005", petrus, 0.88)}
        matcher = make_matcher(local_cache, fake_remote)

        results = await matcher.batch_match(["Opus One", "Petrus 2005 $4,000"])

        assert fake_remote.batch_calls == [["petrus 2005"]]
        assert results["Opus One"].match_type == MatchType.EXACT
        remote = results["Petrus 2005 $4,000"]
        assert remote.match_type == MatchType.FUZZY_REMOTE
        assert remote.matched_vintage == 2005

        await local_cache.drain()
        assert await local_cache.get_wine("w-petrus-2005") == petrus

    @pytest.mark.asyncio
    async def test_remote_hits_persisted_once(self, fake_remote, memory_repository, opus_one_2015):
        petrus = make_wine("w-petrus-2005", "Petrus", "", 2005)
        fake_remote.batch_results = {
            "opus one 2015": batch_item("opus one 2015", opus_one_2015, 0.9),
            "petrus 2005": batch_item("petrus 2005", petrus, 0.8),
        }
        cache = LocalWineCache(memory_repository)
        matcher = make_matcher(cache, fake_remote)

        results = await matcher.batch_match(["Opus One 2015 $350", "Petrus 2005 $4,000", "Krug"])
        await cache.drain()

        assert results["Opus One 2015 $350"].wine == opus_one_2015
        assert results["Krug"] is None
        assert memory_repository.save_calls == 1
        assert {w.id for w in memory_repository.wines} == {"w-opus-2015", "w-petrus-2005"}

    @pytest.mark.asyncio
    async def test_no_save_without_remote_hits(self, fake_remote, memory_repository):
        cache = LocalWineCache(memory_repository)
        matcher = make_matcher(cache, fake_remote)

        assert await matcher.batch_match(["Krug Grande Cuvee"]) == {"Krug Grande Cuvee": None}
        await cache.drain()

        assert memory_repository.save_calls == 0

    @pytest.mark.asyncio
    async def test_partial_threshold_boundary(self, fake_remote):
        krug = make_wine("w-krug", "Krug", "Grande Cuvee")
        fake_remote.batch_results = {
            "krug grande cuvee": batch_item("krug grande cuvee", krug, 0.5),
            "krug rose": batch_item("krug rose", krug, 0.49),
        }
        matcher = make_matcher(LocalWineCache(), fake_remote)

        results = await matcher.batch_match(["Krug Grande Cuvee", "Krug Rose"])

        assert results["Krug Grande Cuvee"] is not None
        assert results["Krug Rose"] is None

    @pytest.mark.asyncio
    async def test_unmatched_item_ignored(self, fake_remote):
        fake_remote.batch_results = {
            "krug": BatchMatchItem(query="krug", matched=False, wine=None, confidence=0.3),
        }
        matcher = make_matcher(LocalWineCache(), fake_remote)

        results = await matcher.batch_match(["Krug"])

        assert results == {"Krug": None}

    @pytest.mark.asyncio
    async def test_remote_failure_maps_pending_to_none(self, local_cache, fake_remote):
        fake_remote.error = SearchServiceConnectionException(reason="down")
        matcher = make_matcher(local_cache, fake_remote)

        results = await matcher.batch_match(["Opus One", "Krug Grande Cuvee"])

        assert results["Opus One"] is not None
        assert results["Krug Grande Cuvee"] is None

    @pytest.mark.asyncio
    async def test_remote_cancellation_maps_pending_to_none(self, fake_remote):
        fake_remote.error = asyncio.CancelledError()
        matcher = make_matcher(LocalWineCache(), fake_remote)

        results = await matcher.batch_match(["Krug Grande Cuvee"])

        assert results == {"Krug Grande Cuvee": None}

    @pytest.mark.asyncio
    async def test_duplicates_not_deduplicated(self, fake_remote):
        matcher = make_matcher(LocalWineCache(), fake_remote)

        results = await matcher.batch_match(["Krug", "Krug"])

        assert fake_remote.batch_calls == [["krug", "krug"]]
        assert results == {"Krug": None}

    @pytest.mark.asyncio
    async def test_empty_batch(self, fake_remote):
        matcher = make_matcher(LocalWineCache(), fake_remote)

        assert await matcher.batch_match([]) == {}
        assert fake_remote.batch_calls == []


class TestMatchThresholds:

    def test_from_settings(self):
        thresholds = MatchThresholds.from_settings()

        assert 0.0 <= thresholds.partial_match <= thresholds.match_confidence <= 1.0
