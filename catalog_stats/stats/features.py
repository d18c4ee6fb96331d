"""Per-track audio features and their batch mean.

A FeatureService resolves numeric feature vectors for track ids. mean_features()
averages them coordinate-wise and refuses to produce a mean from a partial
batch: either every requested id resolves or the whole call fails.
"""

import asyncio
from abc import ABC, abstractmethod
from numbers import Real
from typing import Dict, Iterable, Optional, Sequence, Set

from catalog_stats.config import AUDIO_FEATURE_DIMENSIONS
from catalog_stats.core import (
    CatalogStatsError,
    EmptyBatch,
    FeatureServiceUnavailable,
    FeatureVector,
    MalformedFeatureVector,
    log_step,
)
from catalog_stats.spotify import get_audio_features, load_spotify_token


class FeatureService(ABC):
    """
    Abstract provider of numeric feature vectors.

    Implementations return a mapping track_id -> FeatureVector and leave out the
    ids they cannot resolve.
    """

    id: str
    version: Optional[str] = None

    @abstractmethod
    async def get_features(self, ids: Set[str]) -> Dict[str, FeatureVector]:
        raise NotImplementedError


class SpotifyFeatureService(FeatureService):
    """Audio features from the Spotify Web API, projected onto `dimensions`."""

    id = "spotify_audio_features"
    version = "v1"

    def __init__(
        self,
        token_info: Optional[Dict] = None,
        dimensions: Sequence[str] = AUDIO_FEATURE_DIMENSIONS,
    ) -> None:
        self._token_info = token_info
        self.dimensions = tuple(dimensions)

    async def get_features(self, ids: Set[str]) -> Dict[str, FeatureVector]:
        token_info = self._token_info or load_spotify_token()
        payloads = await asyncio.to_thread(get_audio_features, token_info, sorted(ids))

        vectors: Dict[str, FeatureVector] = {}
        for track_id, payload in payloads.items():
            if not payload:
                continue
            vectors[track_id] = {
                dimension: payload[dimension]
                for dimension in self.dimensions
                if dimension in payload
            }
        return vectors


def _is_number(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


async def mean_features(ids: Iterable[str], service: FeatureService) -> FeatureVector:
    """
    Coordinate-wise mean of the feature vectors of `ids`.

    Raises:
      - EmptyBatch when no id is given
      - FeatureServiceUnavailable when the service fails or misses any id
      - MalformedFeatureVector when vectors disagree on their dimensions or
        carry non-numeric values
    """
    unique_ids = set(ids)
    if not unique_ids:
        raise EmptyBatch("Cannot average features of an empty batch.")

    log_step(f"Fetching audio features for {len(unique_ids)} tracks...")
    try:
        vectors = await service.get_features(unique_ids)
    except CatalogStatsError:
        raise
    except Exception as exc:
        raise FeatureServiceUnavailable(f"Feature service failed: {exc}") from exc

    missing = unique_ids.difference(vectors)
    if missing:
        raise FeatureServiceUnavailable(
            f"Feature service could not resolve {len(missing)} of {len(unique_ids)} ids "
            f"(e.g. {sorted(missing)[0]!r})."
        )

    # Sorted iteration keeps the float sums identical for any input order.
    dimensions = None
    sums: Dict[str, float] = {}
    for track_id in sorted(unique_ids):
        vector = vectors[track_id]
        if dimensions is None:
            dimensions = set(vector)
        elif set(vector) != dimensions:
            raise MalformedFeatureVector(
                f"Feature vector of {track_id!r} has dimensions {sorted(vector)}, "
                f"expected {sorted(dimensions)}."
            )
        for dimension, value in vector.items():
            if not _is_number(value):
                raise MalformedFeatureVector(
                    f"Feature {dimension!r} of {track_id!r} is not numeric: {value!r}"
                )
            sums[dimension] = sums.get(dimension, 0.0) + float(value)

    count = len(unique_ids)
    return {dimension: total / count for dimension, total in sums.items()}
