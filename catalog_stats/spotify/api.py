"""Blocking Spotify Web API helpers.

Every helper raises requests.HTTPError (via raise_for_status) or another
requests.RequestException on transport failure; the async adapters in the
library and stats packages translate those into pipeline errors.
"""

from typing import Dict, List, Optional

import requests

from catalog_stats.config import HTTP_TIMEOUT, SPOTIFY_API_BASE
from catalog_stats.core import log_progress, log_step

from .auth import spotify_headers

ARTISTS_BATCH_SIZE = 50
AUDIO_FEATURES_BATCH_SIZE = 100
TOP_TRACKS_PAGE_SIZE = 50


def get_followed_artists(token_info: Dict) -> List[Dict]:
    """
    Fetch every artist followed by the current user, in API order.

    The endpoint is cursor-based: each page carries the URL of the next one.
    """
    log_step("Fetching followed artists from Spotify...")
    artists: List[Dict] = []
    url: Optional[str] = f"{SPOTIFY_API_BASE}/me/following"
    params: Optional[Dict] = {"type": "artist", "limit": 50}
    headers = spotify_headers(token_info)

    page = 0
    total = None

    while url:
        page += 1
        r = requests.get(url, headers=headers, params=params, timeout=HTTP_TIMEOUT)
        r.raise_for_status()
        data = r.json()["artists"]
        if total is None:
            total = data.get("total", 0)

        artists.extend(data.get("items", []))
        url = data.get("next")
        params = None  # next URL already includes params

        if total:
            estimated_pages = (total + 49) // 50
            log_progress(page, estimated_pages, prefix="  Followed artists pages")

    return artists


def get_top_tracks(token_info: Dict, time_range: str, limit: int) -> List[Dict]:
    """
    Fetch up to `limit` of the user's top tracks for `time_range`.

    The endpoint serves at most TOP_TRACKS_PAGE_SIZE tracks per request, so
    larger limits are paged with `offset` until a short page arrives.
    """
    tracks: List[Dict] = []
    while len(tracks) < limit:
        page_size = min(TOP_TRACKS_PAGE_SIZE, limit - len(tracks))
        r = requests.get(
            f"{SPOTIFY_API_BASE}/me/top/tracks",
            headers=spotify_headers(token_info),
            params={"time_range": time_range, "limit": page_size, "offset": len(tracks)},
            timeout=HTTP_TIMEOUT,
        )
        r.raise_for_status()
        items = r.json().get("items", [])
        tracks.extend(items[:page_size])
        if len(items) < page_size:
            break
    return tracks


def get_artists(token_info: Dict, artist_ids: List[str]) -> Dict[str, Dict]:
    """
    Resolve full artist objects (with genres), keyed by artist id.
    """
    headers = spotify_headers(token_info)
    result: Dict[str, Dict] = {}

    unique_ids = list(dict.fromkeys(a for a in artist_ids if a))
    for i in range(0, len(unique_ids), ARTISTS_BATCH_SIZE):
        batch = unique_ids[i : i + ARTISTS_BATCH_SIZE]
        r = requests.get(
            f"{SPOTIFY_API_BASE}/artists",
            headers=headers,
            params={"ids": ",".join(batch)},
            timeout=HTTP_TIMEOUT,
        )
        r.raise_for_status()
        for artist in r.json().get("artists", []):
            if artist:
                result[artist["id"]] = artist
    return result


def get_audio_features(token_info: Dict, track_ids: List[str]) -> Dict[str, Optional[Dict]]:
    """
    Fetch audio features for the given track ids.

    Ids the API cannot resolve map to None.
    """
    headers = spotify_headers(token_info)
    result: Dict[str, Optional[Dict]] = {}

    for i in range(0, len(track_ids), AUDIO_FEATURES_BATCH_SIZE):
        batch = track_ids[i : i + AUDIO_FEATURES_BATCH_SIZE]
        r = requests.get(
            f"{SPOTIFY_API_BASE}/audio-features",
            headers=headers,
            params={"ids": ",".join(batch)},
            timeout=HTTP_TIMEOUT,
        )
        r.raise_for_status()
        payloads = r.json().get("audio_features", [])
        for track_id, payload in zip(batch, payloads):
            result[track_id] = payload
    return result


def search_track(token_info: Dict, name: str, artist: str) -> Optional[Dict]:
    """
    Return the best catalog match for a title + artist pair, or None.
    """
    query = f'track:"{name}"'
    if artist:
        query += f' artist:"{artist}"'

    r = requests.get(
        f"{SPOTIFY_API_BASE}/search",
        headers=spotify_headers(token_info),
        params={"q": query, "type": "track", "limit": 1},
        timeout=HTTP_TIMEOUT,
    )
    r.raise_for_status()
    items = r.json().get("tracks", {}).get("items", [])
    return items[0] if items else None
