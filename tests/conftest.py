"""Test configuration and fixtures"""

import socket
from typing import Dict, List, Optional, Sequence

import pytest

from spotitable.cache import RemoteStateCache
from spotitable.errors import RecordStoreError
from spotitable.executor import BatchMutationExecutor
from spotitable.manager import PlaylistManager
from spotitable.models import PlaylistPage, PlaylistSummary, TrackPage


class FakePlaylistService:
    """In-memory playlist service with offset pagination and call logging."""

    def __init__(
        self,
        playlists: Optional[Dict[str, str]] = None,
        tracks: Optional[Dict[str, List[str]]] = None,
        owners: Optional[Dict[str, str]] = None,
    ):
        # playlist id -> name, in listing order; owner id per playlist where given
        owners = owners or {}
        self.playlists: List[PlaylistSummary] = [
            PlaylistSummary(id=playlist_id, name=name, owner=owners.get(playlist_id))
            for playlist_id, name in (playlists or {}).items()
        ]
        self.tracks: Dict[str, List[str]] = {key: list(value) for key, value in (tracks or {}).items()}
        self.missing: set = set()
        self.created: List[tuple] = []
        self.lookup_calls: List[List[str]] = []
        self.add_calls: List[tuple] = []
        self.remove_calls: List[tuple] = []
        self.list_playlist_calls: List[int] = []
        self.list_track_calls: List[tuple] = []
        self.fail_add_at: Optional[int] = None
        self.add_attempts = 0
        self.fail_remove_at: Optional[int] = None
        self.remove_attempts = 0
        self.fail_list_at: Optional[int] = None

    def list_playlists(self, user_id: str, limit: int, offset: int) -> PlaylistPage:
        if self.fail_list_at is not None and len(self.list_playlist_calls) == self.fail_list_at:
            raise RuntimeError("listing failed")
        self.list_playlist_calls.append(offset)
        items = self.playlists[offset : offset + limit]
        more = offset + limit < len(self.playlists)
        return PlaylistPage(items=list(items), total=len(self.playlists), next="next-page" if more else None)

    def list_playlist_tracks(self, playlist_id: str, limit: int, offset: int) -> TrackPage:
        self.list_track_calls.append((playlist_id, offset))
        members = self.tracks.get(playlist_id, [])
        more = offset + limit < len(members)
        return TrackPage(
            track_ids=list(members[offset : offset + limit]),
            total=len(members),
            next="next-page" if more else None,
        )

    def create_playlist(self, user_id: str, name: str, description: str) -> str:
        playlist_id = f"created{len(self.created) + 1}"
        self.created.append((user_id, name, description))
        self.playlists.append(PlaylistSummary(id=playlist_id, name=name, owner=user_id))
        self.tracks[playlist_id] = []
        return playlist_id

    def get_tracks(self, track_ids: Sequence[str]) -> List[Optional[str]]:
        self.lookup_calls.append(list(track_ids))
        return [None if track_id in self.missing else track_id for track_id in track_ids]

    def add_tracks(self, playlist_id: str, track_ids: Sequence[str]) -> None:
        attempt = self.add_attempts
        self.add_attempts += 1
        if attempt == self.fail_add_at:
            raise RuntimeError("add failed")
        self.add_calls.append((playlist_id, list(track_ids)))
        self.tracks.setdefault(playlist_id, []).extend(track_ids)

    def remove_tracks(self, playlist_id: str, track_ids: Sequence[str]) -> None:
        attempt = self.remove_attempts
        self.remove_attempts += 1
        if attempt == self.fail_remove_at:
            raise RuntimeError("remove failed")
        self.remove_calls.append((playlist_id, list(track_ids)))
        doomed = set(track_ids)
        self.tracks[playlist_id] = [t for t in self.tracks.get(playlist_id, []) if t not in doomed]

    @property
    def mutated_playlists(self) -> set:
        return {call[0] for call in self.add_calls + self.remove_calls}


class FakeRecordStore:
    def __init__(self, results: Optional[Dict[str, List[str]]] = None):
        self.results = results or {}
        self.queries: List[tuple] = []
        self.fail_on: set = set()

    def list_track_ids(self, table: str, formula: str) -> List[str]:
        self.queries.append((table, formula))
        if formula in self.fail_on:
            raise RecordStoreError(f"query {formula} failed")
        return list(self.results.get(formula, []))


@pytest.fixture
def service():
    """Remote state with one managed and one user-owned playlist"""
    return FakePlaylistService(
        playlists={"foo1": "st-foo", "mine": "Road trip"},
        tracks={"mine": ["keep1", "keep2"]},
    )


@pytest.fixture
def cache(service):
    return RemoteStateCache(service, "koenrh")


@pytest.fixture
def manager(service, cache):
    return PlaylistManager(service, cache, BatchMutationExecutor(service))


@pytest.fixture
def free_port():
    """Reserve an unused local port for the callback listener"""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
