from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

# Managed playlists carry this prefix so user playlists are never touched.
PLAYLIST_PREFIX = "st"
PLAYLIST_DESCRIPTION = "Managed by spotitable"

EPOCH = 1970
DECADE_YEARS = 10

# Spotify Web API per-request ceilings
MAX_TRACKS = 50  # GET /tracks
MAX_PLAYLISTS = 50  # GET /users/{id}/playlists
MAX_PLAYLIST_TRACKS = 100  # playlist items: list, add, remove

REDIRECT_URI = os.getenv("SPOTIFY_REDIRECT_URI", "http://127.0.0.1:8080/callback")
SPOTIFY_AUTH_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_SCOPES = (
    "user-read-private playlist-read-private playlist-modify-public playlist-modify-private"
)
NUM_RANDOM_BYTES = 32

AIRTABLE_API_URL = "https://api.airtable.com/v0"
AIRTABLE_TRACK_FIELD = "Spotify ID"
AIRTABLE_PAGE_SIZE = 100

# Rate limiting and retry behaviour
REQUEST_TIMEOUT = 15
RETRY_MAX_TRIES = 5
RETRY_BASE_SLEEP = 0.5

REQUIRED_ENV_VARS = (
    "SPOTIFY_CLIENT_ID",
    "SPOTIFY_CLIENT_SECRET",
    "AIRTABLE_API_KEY",
)


def missing_env_vars() -> List[str]:
    return [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]


__all__ = [
    "PLAYLIST_PREFIX",
    "PLAYLIST_DESCRIPTION",
    "EPOCH",
    "DECADE_YEARS",
    "MAX_TRACKS",
    "MAX_PLAYLISTS",
    "MAX_PLAYLIST_TRACKS",
    "REDIRECT_URI",
    "SPOTIFY_AUTH_URL",
    "SPOTIFY_TOKEN_URL",
    "SPOTIFY_SCOPES",
    "NUM_RANDOM_BYTES",
    "AIRTABLE_API_URL",
    "AIRTABLE_TRACK_FIELD",
    "AIRTABLE_PAGE_SIZE",
    "REQUEST_TIMEOUT",
    "RETRY_MAX_TRIES",
    "RETRY_BASE_SLEEP",
    "REQUIRED_ENV_VARS",
    "missing_env_vars",
]
