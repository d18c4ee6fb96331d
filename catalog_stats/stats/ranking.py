"""Ranking services: a user's top tracks for a time window.

Spotify's own ranking yields catalog records only. The Last.fm ranking resolves
each scrobbled track against the Spotify catalog; tracks without a catalog match
stay external records.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from catalog_stats.core import (
    CatalogStatsError,
    RankingUnavailable,
    Record,
    log_info,
    log_step,
)
from catalog_stats.lastfm import get_user_top_tracks
from catalog_stats.spotify import (
    get_artists,
    get_top_tracks,
    load_spotify_token,
    search_track,
)

from .classifier import classify


class RankingService(ABC):
    """Ordered records for a time window, capped at `limit`."""

    id: str

    @abstractmethod
    async def get_ranked(self, time_window: str, limit: int) -> List[Record]:
        raise NotImplementedError


def _to_catalog_raw(track: Dict[str, Any], artists_by_id: Dict[str, Dict]) -> Dict[str, Any]:
    """Shape a Spotify track object (plus its artists' genres) as a raw catalog record."""
    album = track.get("album") or {}
    return {
        "variant": "catalog",
        "id": track.get("id"),
        "uri": track.get("uri", ""),
        "name": track.get("name"),
        "images": [{"url": image["url"]} for image in album.get("images") or []],
        "popularity": track.get("popularity"),
        "explicit": track.get("explicit"),
        "album": {
            "release_date": album.get("release_date"),
            "name": album.get("name", ""),
        },
        "artists": [
            {
                "id": artist.get("id") or "",
                "name": artist.get("name", ""),
                "genres": artists_by_id.get(artist.get("id"), {}).get("genres", []),
            }
            for artist in track.get("artists") or []
        ],
    }


def _artist_ids(tracks: List[Dict[str, Any]]) -> List[str]:
    return [a["id"] for t in tracks for a in t.get("artists") or [] if a.get("id")]


class SpotifyRankingService(RankingService):
    id = "spotify"

    def __init__(self, token_info: Optional[Dict] = None) -> None:
        self._token_info = token_info

    def _fetch(self, time_window: str, limit: int) -> List[Dict[str, Any]]:
        token_info = self._token_info or load_spotify_token()
        tracks = get_top_tracks(token_info, time_window, limit)
        artists_by_id = get_artists(token_info, _artist_ids(tracks))
        return [_to_catalog_raw(track, artists_by_id) for track in tracks]

    async def get_ranked(self, time_window: str, limit: int) -> List[Record]:
        log_step(f"Fetching Spotify top tracks ({time_window})...")
        try:
            raws = await asyncio.to_thread(self._fetch, time_window, limit)
        except CatalogStatsError:
            raise
        except Exception as exc:
            raise RankingUnavailable(f"Spotify top tracks unavailable: {exc}") from exc
        return [classify(raw) for raw in raws[:limit]]


class LastFMRankingService(RankingService):
    id = "lastfm"

    def __init__(
        self,
        user: str,
        api_key: str,
        token_info: Optional[Dict] = None,
    ) -> None:
        self.user = user
        self._api_key = api_key
        self._token_info = token_info

    def _fetch(self, time_window: str, limit: int) -> List[Dict[str, Any]]:
        token_info = self._token_info or load_spotify_token()
        scrobbled = get_user_top_tracks(self.user, self._api_key, time_window, limit)

        matches = [search_track(token_info, t["name"], t["artist"]) for t in scrobbled]
        matched_tracks = [m for m in matches if m]
        artists_by_id = get_artists(token_info, _artist_ids(matched_tracks))

        raws: List[Dict[str, Any]] = []
        for entry, match in zip(scrobbled, matches):
            if match:
                raws.append(_to_catalog_raw(match, artists_by_id))
            else:
                raws.append(
                    {
                        "variant": "external",
                        "id": entry["mbid"] or entry["url"] or entry["name"],
                        "name": entry["name"],
                    }
                )

        log_info(f"{len(matched_tracks)}/{len(scrobbled)} Last.fm tracks matched on Spotify.")
        return raws

    async def get_ranked(self, time_window: str, limit: int) -> List[Record]:
        log_step(f"Fetching Last.fm top tracks for {self.user} ({time_window})...")
        try:
            raws = await asyncio.to_thread(self._fetch, time_window, limit)
        except CatalogStatsError:
            raise
        except Exception as exc:
            raise RankingUnavailable(f"Last.fm top tracks unavailable: {exc}") from exc
        return [classify(raw) for raw in raws[:limit]]
