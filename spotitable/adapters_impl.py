from __future__ import annotations

from typing import List, Optional, Sequence

from .adapters import PlaylistServiceAdapter
from .models import PlaylistPage, PlaylistSummary, TrackPage
from .services.spotify import SpotifyService


class SpotifyAdapter(PlaylistServiceAdapter):
    def __init__(self, service: SpotifyService):
        self._service = service

    def list_playlists(self, user_id: str, limit: int, offset: int) -> PlaylistPage:
        results = self._service.user_playlists(user_id, limit, offset) or {}
        items = [
            PlaylistSummary(
                id=item["id"],
                name=item.get("name", ""),
                track_count=(item.get("tracks") or {}).get("total", 0),
                owner=(item.get("owner") or {}).get("id"),
            )
            for item in results.get("items", [])
            if item
        ]
        return PlaylistPage(items=items, total=results.get("total", 0), next=results.get("next"))

    def list_playlist_tracks(self, playlist_id: str, limit: int, offset: int) -> TrackPage:
        results = self._service.playlist_items(playlist_id, limit, offset) or {}
        track_ids: List[str] = []
        for item in results.get("items", []):
            data = (item or {}).get("track")
            # local files and removed episodes have no catalog ID
            if not data or not data.get("id"):
                continue
            track_ids.append(data["id"])
        return TrackPage(track_ids=track_ids, total=results.get("total", 0), next=results.get("next"))

    def create_playlist(self, user_id: str, name: str, description: str) -> str:
        playlist = self._service.create_playlist(user_id, name, description)
        return playlist["id"]

    def get_tracks(self, track_ids: Sequence[str]) -> List[Optional[str]]:
        tracks = self._service.tracks(track_ids)
        return [track.get("id") if track else None for track in tracks]

    def add_tracks(self, playlist_id: str, track_ids: Sequence[str]) -> None:
        self._service.add_tracks(playlist_id, track_ids)

    def remove_tracks(self, playlist_id: str, track_ids: Sequence[str]) -> None:
        self._service.remove_tracks(playlist_id, track_ids)


__all__ = ["SpotifyAdapter"]
