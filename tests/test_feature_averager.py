from typing import Dict, List, Optional, Set

import pytest

from catalog_stats.core import (
    EmptyBatch,
    FeatureServiceUnavailable,
    FeatureVector,
    MalformedFeatureVector,
)
from catalog_stats.stats import FeatureService, SpotifyFeatureService, mean_features


class FakeFeatureService(FeatureService):
    id = "fake"

    def __init__(self, vectors: Dict[str, FeatureVector], fail: bool = False) -> None:
        self.vectors = vectors
        self.fail = fail
        self.requested: List[Set[str]] = []

    async def get_features(self, ids: Set[str]) -> Dict[str, FeatureVector]:
        self.requested.append(set(ids))
        if self.fail:
            raise TimeoutError("feature lookup timed out")
        return {i: self.vectors[i] for i in ids if i in self.vectors}


VECTORS = {
    "a": {"energy": 0.1, "tempo": 100.0},
    "b": {"energy": 0.4, "tempo": 120.0},
    "c": {"energy": 0.7, "tempo": 140.0},
}


@pytest.mark.asyncio
async def test_mean_features_is_coordinate_wise_mean() -> None:
    mean = await mean_features({"a", "b", "c"}, FakeFeatureService(VECTORS))

    assert mean["energy"] == pytest.approx(0.4)
    assert mean["tempo"] == pytest.approx(120.0)


@pytest.mark.asyncio
async def test_mean_features_ignores_input_order() -> None:
    service = FakeFeatureService(VECTORS)

    first = await mean_features(["a", "b", "c"], service)
    second = await mean_features(["c", "a", "b"], service)

    assert first == second


@pytest.mark.asyncio
async def test_mean_features_of_empty_batch_fails() -> None:
    service = FakeFeatureService(VECTORS)

    with pytest.raises(EmptyBatch):
        await mean_features(set(), service)
    assert service.requested == []


@pytest.mark.asyncio
async def test_partial_resolution_fails_the_whole_batch() -> None:
    with pytest.raises(FeatureServiceUnavailable):
        await mean_features({"a", "missing"}, FakeFeatureService(VECTORS))


@pytest.mark.asyncio
async def test_service_failure_is_wrapped() -> None:
    with pytest.raises(FeatureServiceUnavailable) as excinfo:
        await mean_features({"a"}, FakeFeatureService(VECTORS, fail=True))

    assert isinstance(excinfo.value.__cause__, TimeoutError)


@pytest.mark.asyncio
async def test_mismatched_dimensions_are_malformed() -> None:
    vectors = {"a": {"energy": 0.1, "tempo": 90.0}, "b": {"energy": 0.2}}

    with pytest.raises(MalformedFeatureVector):
        await mean_features({"a", "b"}, FakeFeatureService(vectors))


@pytest.mark.asyncio
async def test_non_numeric_values_are_malformed() -> None:
    vectors = {"a": {"energy": "high"}}

    with pytest.raises(MalformedFeatureVector):
        await mean_features({"a"}, FakeFeatureService(vectors))


@pytest.mark.asyncio
async def test_spotify_service_projects_payloads_onto_dimensions(monkeypatch) -> None:
    calls: Dict[str, object] = {}

    def fake_get_audio_features(token_info: Dict, track_ids: List[str]) -> Dict[str, Optional[Dict]]:
        calls["token_info"] = token_info
        calls["track_ids"] = track_ids
        return {
            "a": {"id": "a", "energy": 0.5, "tempo": 128.0, "key": 5},
            "b": None,
        }

    monkeypatch.setattr(
        "catalog_stats.stats.features.get_audio_features",
        fake_get_audio_features,
        raising=True,
    )

    service = SpotifyFeatureService(
        token_info={"access_token": "token"},
        dimensions=("energy", "tempo"),
    )
    vectors = await service.get_features({"b", "a"})

    assert vectors == {"a": {"energy": 0.5, "tempo": 128.0}}
    assert calls["track_ids"] == ["a", "b"]
    assert calls["token_info"] == {"access_token": "token"}

    with pytest.raises(FeatureServiceUnavailable):
        await mean_features({"a", "b"}, service)
