import asyncio
from typing import Any, Dict, List, Optional, Set

import pytest

from catalog_stats.config import AUDIO_FEATURE_DIMENSIONS
from catalog_stats.core import (
    FeatureServiceUnavailable,
    FeatureVector,
    InsufficientData,
    MalformedFeatureVector,
    QueryStatus,
    Record,
    StatisticsResult,
)
from catalog_stats.stats import (
    FeatureService,
    LastFMRankingService,
    RankingService,
    SpotifyRankingService,
    StatisticsQuery,
    StatsConfig,
    aggregate,
    classify,
    get_ranking_service,
)


def _catalog(track_id: str, genres: List[str], release_date: str, popularity: int, explicit: bool) -> Dict[str, Any]:
    return {
        "id": track_id,
        "name": f"Track {track_id}",
        "popularity": popularity,
        "explicit": explicit,
        "album": {"release_date": release_date},
        "artists": [{"genres": genres}],
    }


MIXED = [
    _catalog("a", ["rock", "pop"], "2020-01-01", 80, True),
    {"id": "lfm-1", "name": "Scrobble only"},
    _catalog("b", ["pop"], "2020-06-01", 40, False),
    _catalog("c", [], "1999-12-31", 60, False),
]


def _vector(value: float) -> FeatureVector:
    return {dimension: value for dimension in AUDIO_FEATURE_DIMENSIONS}


class FakeRanking(RankingService):
    id = "fake"

    def __init__(self, by_window: Dict[str, List[Dict[str, Any]]]) -> None:
        self.by_window = by_window
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[str] = []

    async def get_ranked(self, time_window: str, limit: int) -> List[Record]:
        self.calls.append(time_window)
        gate = self.gates.get(time_window)
        if gate is not None:
            await gate.wait()
        return [classify(raw) for raw in self.by_window.get(time_window, [])][:limit]


class FakeFeatures(FeatureService):
    id = "fake"

    def __init__(self, vectors: Dict[str, FeatureVector]) -> None:
        self.vectors = vectors
        self.requested: List[Set[str]] = []

    async def get_features(self, ids: Set[str]) -> Dict[str, FeatureVector]:
        self.requested.append(set(ids))
        return {i: self.vectors[i] for i in ids if i in self.vectors}


FEATURES = {"a": _vector(0.2), "b": _vector(0.4), "c": _vector(0.9)}


@pytest.mark.asyncio
async def test_aggregate_builds_a_complete_result() -> None:
    features = FakeFeatures(FEATURES)

    result = await aggregate(
        "short_term",
        StatsConfig(),
        FakeRanking({"short_term": MIXED}),
        features,
    )

    assert isinstance(result, StatisticsResult)
    assert result.genres == {"rock": 1, "pop": 2}
    assert result.release_years == {"2020": 2, "1999": 1}
    assert result.analysis["popularity"] == pytest.approx(60.0)
    assert result.analysis["explicit"] == pytest.approx(1 / 3)
    assert result.analysis["energy"] == pytest.approx(0.5)
    assert set(result.analysis) == set(AUDIO_FEATURE_DIMENSIONS) | {"popularity", "explicit"}
    # Only catalog ids reach the feature service.
    assert features.requested == [{"a", "b", "c"}]


@pytest.mark.asyncio
async def test_aggregate_of_external_only_records_is_insufficient() -> None:
    ranking = FakeRanking({"long_term": [{"id": "x", "name": "x"}, {"id": "y", "name": "y"}]})

    with pytest.raises(InsufficientData):
        await aggregate("long_term", StatsConfig(), ranking, FakeFeatures(FEATURES))


@pytest.mark.asyncio
async def test_aggregate_caps_ranked_records() -> None:
    features = FakeFeatures(FEATURES)
    config = StatsConfig(top_tracks_limit=1)

    result = await aggregate("short_term", config, FakeRanking({"short_term": MIXED}), features)

    assert result.genres == {"rock": 1, "pop": 1}
    assert features.requested == [{"a"}]


@pytest.mark.asyncio
async def test_aggregate_produces_no_result_on_feature_failure() -> None:
    features = FakeFeatures({"a": _vector(0.2), "b": _vector(0.4)})

    with pytest.raises(FeatureServiceUnavailable):
        await aggregate("short_term", StatsConfig(), FakeRanking({"short_term": MIXED}), features)


@pytest.mark.asyncio
async def test_aggregate_requires_every_configured_dimension() -> None:
    features = FakeFeatures({i: {"energy": 0.1} for i in ("a", "b", "c")})

    with pytest.raises(MalformedFeatureVector):
        await aggregate("short_term", StatsConfig(), FakeRanking({"short_term": MIXED}), features)


@pytest.mark.asyncio
async def test_aggregate_keeps_every_averaged_dimension() -> None:
    vectors = {
        track_id: {**_vector(value), "loudness": loudness}
        for track_id, value, loudness in (("a", 0.2, -6.0), ("b", 0.4, -9.0), ("c", 0.9, -3.0))
    }

    result = await aggregate(
        "short_term", StatsConfig(), FakeRanking({"short_term": MIXED}), FakeFeatures(vectors)
    )

    assert result.analysis["loudness"] == pytest.approx(-6.0)
    assert result.analysis["energy"] == pytest.approx(0.5)
    assert set(result.analysis) == set(AUDIO_FEATURE_DIMENSIONS) | {"loudness", "popularity", "explicit"}


@pytest.mark.asyncio
async def test_aggregate_rejects_unknown_time_window() -> None:
    with pytest.raises(ValueError):
        await aggregate("last_decade", StatsConfig(), FakeRanking({}), FakeFeatures({}))


@pytest.mark.asyncio
async def test_statistics_query_caches_results_per_window() -> None:
    ranking = FakeRanking({"short_term": MIXED, "long_term": MIXED})
    query = StatisticsQuery(ranking, FakeFeatures(FEATURES))

    first = await query.load()
    again = await query.load()

    assert query.status == QueryStatus.READY
    assert again is first
    assert ranking.calls == ["short_term"]

    assert query.select("long_term") is True
    assert query.status == QueryStatus.PENDING
    assert query.data is None
    await query.load()
    assert query.select("short_term") is True
    assert query.status == QueryStatus.READY
    assert query.data is first
    assert ranking.calls == ["short_term", "long_term"]


@pytest.mark.asyncio
async def test_statistics_query_refetch_runs_again() -> None:
    ranking = FakeRanking({"short_term": MIXED})
    query = StatisticsQuery(ranking, FakeFeatures(FEATURES))

    first = await query.load()
    second = await query.refetch()

    assert second == first
    assert second is not first
    assert ranking.calls == ["short_term", "short_term"]


@pytest.mark.asyncio
async def test_statistics_query_discards_superseded_result() -> None:
    ranking = FakeRanking({"short_term": MIXED, "medium_term": MIXED[:1]})
    ranking.gates["short_term"] = asyncio.Event()
    query = StatisticsQuery(ranking, FakeFeatures(FEATURES))

    stale = asyncio.ensure_future(query.load())
    await asyncio.sleep(0)
    query.select("medium_term")
    current = await query.load()

    ranking.gates["short_term"].set()
    assert await stale is None

    assert query.data is current
    assert current.genres == {"rock": 1, "pop": 1}
    assert query.select("short_term") is True
    assert query.data is None


@pytest.mark.asyncio
async def test_statistics_query_error_status() -> None:
    query = StatisticsQuery(FakeRanking({"short_term": MIXED[1:2]}), FakeFeatures(FEATURES))

    with pytest.raises(InsufficientData) as excinfo:
        await query.load()

    assert query.status == QueryStatus.ERROR
    assert query.error is excinfo.value
    assert query.data is None


def test_get_ranking_service_picks_source() -> None:
    assert isinstance(get_ranking_service(StatsConfig()), SpotifyRankingService)

    lastfm = get_ranking_service(
        StatsConfig(use_lastfm=True, lastfm_user="someone", lastfm_api_key="key")
    )
    assert isinstance(lastfm, LastFMRankingService)

    with pytest.raises(ValueError):
        get_ranking_service(StatsConfig(use_lastfm=True, lastfm_user=None, lastfm_api_key=None))
