"""Statistics aggregation for a ranking time window.

aggregate() wires the stats stages together:

  ranking -> classify -> filter_catalog -> popularity / explicit fraction
          -> genre and release-year distributions -> mean audio features

and assembles one StatisticsResult. It keeps no state between calls, so calls
for different time windows can interleave freely.

StatisticsQuery is the page-level session on top of it: it tracks the selected
time window, caches one result per StatsQueryKey and drops results that arrive
after the selection moved on.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from catalog_stats.config import (
    AUDIO_FEATURE_DIMENSIONS,
    LASTFM_API_KEY,
    LASTFM_USER,
    TOP_TRACKS_LIMIT,
)
from catalog_stats.core import (
    CatalogStatsError,
    InsufficientData,
    MalformedFeatureVector,
    QueryStatus,
    StatisticsResult,
    StatsQueryKey,
    TimeRange,
    log_error,
    log_info,
    log_section,
    log_success,
    log_warning,
)

from .aggregators import aggregate_genres, aggregate_release_years
from .classifier import filter_catalog
from .features import FeatureService, mean_features
from .ranking import LastFMRankingService, RankingService, SpotifyRankingService


@dataclass
class StatsConfig:
    use_lastfm: bool = False
    lastfm_user: Optional[str] = LASTFM_USER
    lastfm_api_key: Optional[str] = LASTFM_API_KEY
    top_tracks_limit: int = TOP_TRACKS_LIMIT
    feature_dimensions: Tuple[str, ...] = field(default=AUDIO_FEATURE_DIMENSIONS)


def get_ranking_service(
    config: StatsConfig, token_info: Optional[Dict] = None
) -> RankingService:
    if config.use_lastfm:
        if not config.lastfm_user or not config.lastfm_api_key:
            raise ValueError("use_lastfm requires lastfm_user and lastfm_api_key.")
        return LastFMRankingService(
            user=config.lastfm_user,
            api_key=config.lastfm_api_key,
            token_info=token_info,
        )
    return SpotifyRankingService(token_info=token_info)


async def aggregate(
    time_window: str,
    config: StatsConfig,
    ranking: RankingService,
    features: FeatureService,
) -> StatisticsResult:
    """
    Build the statistics of `time_window`.

    Raises InsufficientData when no catalog record is ranked for the window,
    and lets every other pipeline error propagate; no partial result is ever
    returned.
    """
    time_window = TimeRange(time_window).value
    log_section(f"Statistics ({time_window})")

    records = await ranking.get_ranked(time_window, config.top_tracks_limit)
    records = records[: config.top_tracks_limit]

    catalog = filter_catalog(records)
    if not catalog:
        raise InsufficientData(
            f"No catalog tracks among the {len(records)} ranked tracks for {time_window}."
        )
    log_info(f"{len(catalog)}/{len(records)} ranked tracks carry catalog data.")

    count = len(catalog)
    popularity = sum(record.popularity for record in catalog) / count
    explicit = sum(1 for record in catalog if record.explicit) / count

    genres = aggregate_genres(catalog)
    release_years = aggregate_release_years(catalog)

    audio_features = await mean_features([record.id for record in catalog], features)
    missing = [d for d in config.feature_dimensions if d not in audio_features]
    if missing:
        raise MalformedFeatureVector(f"Feature vectors lack dimensions {missing}.")

    analysis = dict(audio_features)
    analysis["popularity"] = popularity
    analysis["explicit"] = explicit

    log_success(
        f"Statistics ready: {len(genres)} genres, {len(release_years)} release years."
    )
    return StatisticsResult(analysis=analysis, genres=genres, release_years=release_years)


class StatisticsQuery:
    """Statistics page session keyed by the selected time window."""

    query_name = "top-genres"

    def __init__(
        self,
        ranking: RankingService,
        features: FeatureService,
        config: Optional[StatsConfig] = None,
        range_id: str = TimeRange.SHORT_TERM.value,
    ) -> None:
        self._ranking = ranking
        self._features = features
        self._config = config or StatsConfig()
        self._key = StatsQueryKey(self.query_name, TimeRange(range_id).value)
        self._generation = 0
        self._results: Dict[StatsQueryKey, StatisticsResult] = {}
        self._status = QueryStatus.PENDING
        self._error: Optional[CatalogStatsError] = None

    @property
    def key(self) -> StatsQueryKey:
        return self._key

    @property
    def status(self) -> QueryStatus:
        return self._status

    @property
    def error(self) -> Optional[CatalogStatsError]:
        return self._error

    @property
    def data(self) -> Optional[StatisticsResult]:
        return self._results.get(self._key)

    def select(self, range_id: str) -> bool:
        """
        Switch to another time window. Returns False when it is already selected.
        """
        key = StatsQueryKey(self.query_name, TimeRange(range_id).value)
        if key == self._key:
            return False
        self._key = key
        self._generation += 1
        self._error = None
        self._status = QueryStatus.READY if key in self._results else QueryStatus.PENDING
        return True

    async def load(self) -> Optional[StatisticsResult]:
        cached = self._results.get(self._key)
        if cached is not None:
            self._status = QueryStatus.READY
            return cached
        return await self._run()

    async def refetch(self) -> Optional[StatisticsResult]:
        self._results.pop(self._key, None)
        self._generation += 1
        return await self._run()

    async def _run(self) -> Optional[StatisticsResult]:
        """
        Aggregate the active key. Returns None if the selection changed before
        the aggregation finished.
        """
        generation, key = self._generation, self._key
        self._status = QueryStatus.PENDING
        self._error = None

        try:
            result = await aggregate(key.range_id, self._config, self._ranking, self._features)
        except CatalogStatsError as exc:
            if generation != self._generation:
                log_warning(f"Ignoring failure of superseded statistics {key}: {exc}")
                return None
            log_error(f"Statistics for {key.range_id} failed ({exc.kind}): {exc}")
            self._status = QueryStatus.ERROR
            self._error = exc
            raise

        if generation != self._generation:
            log_warning(f"Discarding statistics of superseded {key}.")
            return None

        self._results[key] = result
        self._status = QueryStatus.READY
        return result
