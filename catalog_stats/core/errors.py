"""Failure taxonomy of the aggregation pipeline.

Every error is surfaced to the caller of the page or aggregation call that
triggered it. Nothing here is retried internally.
"""


class CatalogStatsError(Exception):
    """Base class for all pipeline failures."""

    kind = "error"
    http_status = 500


class SourceUnavailable(CatalogStatsError):
    """The content source could not be reached or returned malformed data."""

    kind = "source_unavailable"
    http_status = 502


class FeatureServiceUnavailable(CatalogStatsError):
    """The feature service failed or could not resolve every requested id."""

    kind = "feature_service_unavailable"
    http_status = 502


class RankingUnavailable(CatalogStatsError):
    """The ranking service could not produce the ranked records."""

    kind = "ranking_unavailable"
    http_status = 502


class MalformedRecord(CatalogStatsError):
    kind = "malformed_record"
    http_status = 422


class MalformedDate(CatalogStatsError):
    kind = "malformed_date"
    http_status = 422


class MalformedFeatureVector(CatalogStatsError):
    kind = "malformed_feature_vector"
    http_status = 422


class EmptyBatch(CatalogStatsError):
    kind = "empty_batch"
    http_status = 422


class InsufficientData(CatalogStatsError):
    """No catalog record survived filtering, so no statistic is defined."""

    kind = "insufficient_data"
    http_status = 422
