from dataclasses import replace
from functools import lru_cache

from fastapi import Depends, HTTPException

from catalog_stats.library import PaginatedFetcher, SpotifyFollowedArtistsSource
from catalog_stats.stats import (
    FeatureService,
    RankingService,
    SpotifyFeatureService,
    StatsConfig,
    get_ranking_service,
)


@lru_cache(maxsize=1)
def get_library_fetcher() -> PaginatedFetcher:
    """Process-wide fetcher so the page cache is shared between requests."""
    return PaginatedFetcher(SpotifyFollowedArtistsSource())


def get_stats_config(use_lastfm: bool = False) -> StatsConfig:
    config = StatsConfig()
    if use_lastfm:
        config = replace(config, use_lastfm=True)
    return config


def get_ranking(config: StatsConfig = Depends(get_stats_config)) -> RankingService:
    try:
        return get_ranking_service(config)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def get_feature_service(config: StatsConfig = Depends(get_stats_config)) -> FeatureService:
    return SpotifyFeatureService(dimensions=config.feature_dimensions)
