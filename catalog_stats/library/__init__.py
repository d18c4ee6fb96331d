"""Public façade for the catalog_stats.library package.

This module exposes content sources, the cache-keyed paginated fetcher and the
incremental LibraryQuery session used by library browsing pages.
"""

from .paginator import PaginatedFetcher, next_offset
from .query import LibraryQuery
from .sources import ContentSource, SpotifyFollowedArtistsSource

__all__ = [
    "ContentSource",
    "SpotifyFollowedArtistsSource",
    "PaginatedFetcher",
    "next_offset",
    "LibraryQuery",
]
