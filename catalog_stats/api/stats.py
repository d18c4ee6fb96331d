from fastapi import APIRouter, Depends

from catalog_stats.core import TimeRange
from catalog_stats.stats import FeatureService, RankingService, StatsConfig, aggregate

from .dependencies import get_feature_service, get_ranking, get_stats_config
from .schemas import StatisticsResponse

router = APIRouter()


@router.get("/genres", response_model=StatisticsResponse)
async def get_top_genres(
    range: TimeRange = TimeRange.SHORT_TERM,
    config: StatsConfig = Depends(get_stats_config),
    ranking: RankingService = Depends(get_ranking),
    features: FeatureService = Depends(get_feature_service),
) -> StatisticsResponse:
    """
    Genre, release-year and audio-feature statistics of the user's top tracks.

    Pass `use_lastfm=true` to rank tracks from Last.fm scrobbles instead.
    """
    result = await aggregate(range.value, config, ranking, features)
    return StatisticsResponse(
        time_range=range.value,
        analysis=result.analysis,
        genres=result.genres,
        release_years=result.release_years,
    )
