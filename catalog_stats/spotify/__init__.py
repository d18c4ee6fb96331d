"""Public façade for the catalog_stats.spotify package.

This module exposes the blocking Spotify Web API helpers used by the library
content source, the ranking service and the feature service. Callers should
import these symbols from this façade instead of the internal auth or api
modules.
"""

from .api import (
    get_artists,
    get_audio_features,
    get_followed_artists,
    get_top_tracks,
    search_track,
)
from .auth import SpotifyTokenMissing, load_spotify_token, spotify_headers

__all__ = [
    "load_spotify_token",
    "spotify_headers",
    "SpotifyTokenMissing",
    "get_followed_artists",
    "get_top_tracks",
    "get_artists",
    "get_audio_features",
    "search_track",
]
