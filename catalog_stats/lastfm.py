from typing import Dict, List

import requests

from catalog_stats.config import HTTP_TIMEOUT, LASTFM_API_BASE

# Last.fm period names for each ranking time window
LASTFM_PERIODS = {
    "short_term": "1month",
    "medium_term": "6month",
    "long_term": "overall",
}


def get_user_top_tracks(
    user: str, api_key: str, time_range: str, limit: int
) -> List[Dict]:
    """
    Fetch a Last.fm user's top tracks for the period matching `time_range`.

    Each returned entry is a plain dict: {"name", "artist", "mbid", "url"}.
    """
    params = {
        "method": "user.gettoptracks",
        "user": user,
        "api_key": api_key,
        "period": LASTFM_PERIODS[time_range],
        "limit": limit,
        "format": "json",
    }
    r = requests.get(LASTFM_API_BASE, params=params, timeout=HTTP_TIMEOUT)
    r.raise_for_status()
    data = r.json()

    tracks: List[Dict] = []
    for item in data.get("toptracks", {}).get("track", []):
        tracks.append(
            {
                "name": item.get("name", ""),
                "artist": (item.get("artist") or {}).get("name", ""),
                "mbid": item.get("mbid") or "",
                "url": item.get("url", ""),
            }
        )
    return tracks
