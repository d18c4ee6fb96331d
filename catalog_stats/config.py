from dotenv import load_dotenv
import os

load_dotenv()

# Spotify Web API
SPOTIFY_API_BASE = os.getenv("SPOTIFY_API_BASE", "https://api.spotify.com/v1")
SPOTIFY_ACCESS_TOKEN = os.getenv("SPOTIFY_ACCESS_TOKEN")
SPOTIFY_TOKEN_FILE = os.getenv(
    "SPOTIFY_TOKEN_FILE",
    os.path.join(os.path.expanduser("~"), ".catalog_stats", "spotify_token.json"),
)

# Last.fm (optional ranking source)
LASTFM_API_BASE = os.getenv("LASTFM_API_BASE", "https://ws.audioscrobbler.com/2.0/")
LASTFM_API_KEY = os.getenv("LASTFM_API_KEY")
LASTFM_USER = os.getenv("LASTFM_USER")

HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))

# Library pages
LIBRARY_PAGE_SIZE = int(os.getenv("LIBRARY_PAGE_SIZE", "200"))
LIBRARY_ARTISTS_FILTER = "1"
LIBRARY_CACHED_QUERIES = int(os.getenv("LIBRARY_CACHED_QUERIES", "32"))

# Statistics
TOP_TRACKS_LIMIT = int(os.getenv("TOP_TRACKS_LIMIT", "50"))

AUDIO_FEATURE_DIMENSIONS = (
    "danceability",
    "energy",
    "speechiness",
    "acousticness",
    "instrumentalness",
    "liveness",
    "valence",
    "tempo",
)
