"""Content sources for library pages.

A content source answers one bounded request:
    get_page(filters, sort_order, text_filter, offset, limit)
        -> {"items": [...], "totalLength": int}
The paginator owns caching and sequencing. A source that keeps a snapshot of
its content drops it in refresh(), which the paginator calls on refresh.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from catalog_stats.core import SortOption
from catalog_stats.spotify import get_followed_artists, load_spotify_token


class ContentSource(ABC):
    """Opaque paged content provider."""

    @abstractmethod
    async def get_page(
        self,
        filters: List[str],
        sort_order: str,
        text_filter: str,
        offset: int,
        limit: int,
    ) -> Dict[str, Any]:
        raise NotImplementedError

    def refresh(self) -> None:
        """Forget any content snapshot; stateless sources have nothing to drop."""
        return None


def _to_library_entry(artist: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "uri": artist["uri"],
        "name": artist["name"],
        "images": [{"url": image["url"]} for image in artist.get("images") or []],
    }


class SpotifyFollowedArtistsSource(ContentSource):
    """
    Saved artists backed by the Spotify Web API follow list.

    The follow endpoint is cursor-based and has no server-side filtering, so the
    whole list is loaded once and filtered, sorted and sliced locally. Requests
    arriving while the list loads share that single load; refresh() makes the
    next request reload it.
    """

    def __init__(self, token_info: Optional[Dict] = None) -> None:
        self._token_info = token_info
        self._artists: Optional[List[Dict[str, Any]]] = None
        self._loading: Optional["asyncio.Future[List[Dict[str, Any]]]"] = None
        self._epoch = 0

    def refresh(self) -> None:
        self._epoch += 1
        self._artists = None
        self._loading = None

    async def _fetch_artists(self, epoch: int) -> List[Dict[str, Any]]:
        token_info = self._token_info or load_spotify_token()
        artists = await asyncio.to_thread(get_followed_artists, token_info)
        # A load started before refresh() still answers its callers but is not kept.
        if epoch == self._epoch:
            self._artists = artists
        return artists

    async def _load_artists(self) -> List[Dict[str, Any]]:
        if self._artists is not None:
            return self._artists

        if self._loading is None:
            self._loading = asyncio.ensure_future(self._fetch_artists(self._epoch))
        loading = self._loading
        try:
            return await asyncio.shield(loading)
        finally:
            if self._loading is loading and loading.done():
                self._loading = None

    async def get_page(
        self,
        filters: List[str],
        sort_order: str,
        text_filter: str,
        offset: int,
        limit: int,
    ) -> Dict[str, Any]:
        artists = await self._load_artists()

        needle = text_filter.strip().casefold()
        if needle:
            artists = [a for a in artists if needle in a.get("name", "").casefold()]

        # The follow list carries no added date; its API order stands in for it.
        if sort_order == SortOption.NAME.value:
            artists = sorted(artists, key=lambda a: a.get("name", "").casefold())

        window = artists[offset : offset + limit]
        return {
            "items": [_to_library_entry(a) for a in window],
            "totalLength": len(artists),
        }
