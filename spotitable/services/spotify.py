from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import spotipy
from spotipy.exceptions import SpotifyException

from ..config import REQUEST_TIMEOUT
from ..console import logger
from ..retry import retry_call


def build_client(access_token: str) -> spotipy.Spotify:
    return spotipy.Spotify(auth=access_token, requests_timeout=REQUEST_TIMEOUT)


def spotify_preflight(client: spotipy.Spotify) -> str:
    """Return the current user's ID, surfacing the usual 403 misconfiguration."""
    try:
        me = retry_call(client.me)
    except SpotifyException as err:
        if err.http_status == 403:
            logger.error(
                "[red]Spotify 403.[/red] Fix in Dashboard:\n"
                "  - Add your user under 'Users and Access' (Development mode)\n"
                "  - Ensure Redirect URI matches exactly (e.g., http://127.0.0.1:8080/callback)"
            )
        raise
    logger.debug(f"[cyan]Spotify user:[/cyan] {me.get('id')} ({me.get('display_name')})")
    return me["id"]


class SpotifyService:
    def __init__(self, client: spotipy.Spotify):
        self.client = client

    # Playlist management -------------------------------------------------
    def user_playlists(self, user_id: str, limit: int, offset: int) -> Dict[str, Any]:
        return retry_call(self.client.user_playlists, user_id, limit=limit, offset=offset)

    def playlist_items(self, playlist_id: str, limit: int, offset: int) -> Dict[str, Any]:
        return retry_call(
            self.client.playlist_items,
            playlist_id,
            fields="items(track(id)),next,total",
            limit=limit,
            offset=offset,
            additional_types=("track",),
        )

    def create_playlist(self, user_id: str, name: str, description: str) -> Dict[str, Any]:
        return retry_call(
            self.client.user_playlist_create,
            user_id,
            name,
            public=False,
            collaborative=False,
            description=description,
            idempotent=False,
        )

    # Track handling ------------------------------------------------------
    def tracks(self, track_ids: Sequence[str]) -> List[Optional[Dict[str, Any]]]:
        results = retry_call(self.client.tracks, list(track_ids))
        return list(results.get("tracks") or [])

    def add_tracks(self, playlist_id: str, track_ids: Sequence[str]) -> None:
        # a replayed add after a read timeout would insert the tracks twice
        retry_call(self.client.playlist_add_items, playlist_id, list(track_ids), idempotent=False)

    def remove_tracks(self, playlist_id: str, track_ids: Sequence[str]) -> None:
        retry_call(
            self.client.playlist_remove_all_occurrences_of_items,
            playlist_id,
            list(track_ids),
        )


__all__ = ["SpotifyService", "build_client", "spotify_preflight"]
