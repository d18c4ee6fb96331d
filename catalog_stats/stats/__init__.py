"""Public façade for the catalog_stats.stats package.

This module exposes record classification, frequency aggregation, feature
averaging, ranking services and the statistics orchestration. Other packages
should import stats behaviour from this façade instead of the submodules.
"""

from .aggregators import aggregate_genres, aggregate_release_years
from .classifier import classify, filter_catalog
from .features import FeatureService, SpotifyFeatureService, mean_features
from .orchestration import StatisticsQuery, StatsConfig, aggregate, get_ranking_service
from .ranking import LastFMRankingService, RankingService, SpotifyRankingService

__all__ = [
    "classify",
    "filter_catalog",
    "aggregate_genres",
    "aggregate_release_years",
    "FeatureService",
    "SpotifyFeatureService",
    "mean_features",
    "RankingService",
    "SpotifyRankingService",
    "LastFMRankingService",
    "StatsConfig",
    "get_ranking_service",
    "aggregate",
    "StatisticsQuery",
]
