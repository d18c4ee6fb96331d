"""Public façade for the catalog_stats.core package.

This module exposes logging helpers, filesystem utilities, the error taxonomy
and the value models shared by the library and stats packages. Callers should
import these cross-cutting concerns from this façade instead of the internal
submodules.
"""

from .errors import (
    CatalogStatsError,
    EmptyBatch,
    FeatureServiceUnavailable,
    InsufficientData,
    MalformedDate,
    MalformedFeatureVector,
    MalformedRecord,
    RankingUnavailable,
    SourceUnavailable,
)
from .fs_utils import read_json
from .logging_config import configure_logging
from .logging_utils import (
    log_error,
    log_info,
    log_progress,
    log_section,
    log_step,
    log_success,
    log_warning,
)
from .models import (
    Album,
    Artist,
    CatalogRecord,
    ExternalRecord,
    FeatureVector,
    FrequencyMap,
    Image,
    LibraryEntry,
    LibraryQueryKey,
    Page,
    QueryStatus,
    Record,
    SortOption,
    StatisticsResult,
    StatsQueryKey,
    TimeRange,
)

__all__ = [
    "configure_logging",
    "log_section",
    "log_info",
    "log_step",
    "log_success",
    "log_warning",
    "log_error",
    "log_progress",
    "read_json",
    "CatalogStatsError",
    "SourceUnavailable",
    "FeatureServiceUnavailable",
    "RankingUnavailable",
    "MalformedRecord",
    "MalformedDate",
    "MalformedFeatureVector",
    "EmptyBatch",
    "InsufficientData",
    "QueryStatus",
    "TimeRange",
    "SortOption",
    "LibraryQueryKey",
    "StatsQueryKey",
    "Image",
    "LibraryEntry",
    "Page",
    "Album",
    "Artist",
    "CatalogRecord",
    "ExternalRecord",
    "Record",
    "FrequencyMap",
    "FeatureVector",
    "StatisticsResult",
]
