from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from .models import PlaylistPage, TrackPage


class PlaylistServiceAdapter(Protocol):
    """Capabilities the reconciliation engine needs from a playlist service.

    ``get_tracks`` returns one entry per requested ID, in request order, with
    ``None`` where the service reports the track as missing.
    """

    def list_playlists(self, user_id: str, limit: int, offset: int) -> PlaylistPage:
        ...

    def list_playlist_tracks(self, playlist_id: str, limit: int, offset: int) -> TrackPage:
        ...

    def create_playlist(self, user_id: str, name: str, description: str) -> str:
        ...

    def get_tracks(self, track_ids: Sequence[str]) -> List[Optional[str]]:
        ...

    def add_tracks(self, playlist_id: str, track_ids: Sequence[str]) -> None:
        ...

    def remove_tracks(self, playlist_id: str, track_ids: Sequence[str]) -> None:
        ...


class RecordStore(Protocol):
    def list_track_ids(self, table: str, formula: str) -> List[str]:
        ...


__all__ = ["PlaylistServiceAdapter", "RecordStore"]
