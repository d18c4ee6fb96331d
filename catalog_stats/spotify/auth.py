from typing import Dict

from catalog_stats.config import SPOTIFY_ACCESS_TOKEN, SPOTIFY_TOKEN_FILE
from catalog_stats.core import log_warning, read_json


class SpotifyTokenMissing(Exception):
    pass


def load_spotify_token() -> Dict:
    """
    Load the Spotify token issued by the host application.

    The token file (written by the host) wins over SPOTIFY_ACCESS_TOKEN.
    """

    def _on_error(e: Exception) -> None:
        log_warning("Spotify token file is corrupted; ignoring it.")

    token_info = read_json(SPOTIFY_TOKEN_FILE, default=None, on_error=_on_error)
    if isinstance(token_info, dict) and token_info.get("access_token"):
        return token_info

    if SPOTIFY_ACCESS_TOKEN:
        return {"access_token": SPOTIFY_ACCESS_TOKEN}

    raise SpotifyTokenMissing(
        f"No Spotify token found in {SPOTIFY_TOKEN_FILE} or SPOTIFY_ACCESS_TOKEN."
    )


def spotify_headers(token_info: Dict) -> Dict:
    return {"Authorization": f"Bearer {token_info['access_token']}"}
