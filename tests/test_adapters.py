"""Test the spotipy-backed playlist service"""

from unittest.mock import Mock, patch

import pytest
import requests

from spotitable.adapters_impl import SpotifyAdapter
from spotitable.services.spotify import SpotifyService, spotify_preflight


def make_adapter():
    client = Mock()
    return SpotifyAdapter(SpotifyService(client)), client


class TestSpotifyAdapter:
    """Test conversion of Web API payloads"""

    def test_list_playlists(self):
        """Playlist pages carry items, total and next"""
        adapter, client = make_adapter()
        client.user_playlists.return_value = {
            "items": [
                {"id": "p1", "name": "st-foo", "tracks": {"total": 3}, "owner": {"id": "koenrh"}},
                None,
                {"id": "p2", "name": "st-bar", "tracks": {"total": 0}, "owner": {"id": "someone-else"}},
            ],
            "total": 51,
            "next": "https://api.spotify.com/v1/users/koenrh/playlists?offset=50",
        }

        page = adapter.list_playlists("koenrh", 50, 0)

        client.user_playlists.assert_called_once_with("koenrh", limit=50, offset=0)
        assert [(item.id, item.name, item.track_count, item.owner) for item in page.items] == [
            ("p1", "st-foo", 3, "koenrh"),
            ("p2", "st-bar", 0, "someone-else"),
        ]
        assert page.total == 51
        assert page.next

    def test_list_playlist_tracks_skips_local_files(self):
        """Items without a catalog ID are skipped"""
        adapter, client = make_adapter()
        client.playlist_items.return_value = {
            "items": [
                {"track": {"id": "t1"}},
                {"track": {"id": None}},
                {"track": None},
                {"track": {"id": "t2"}},
            ],
            "total": 4,
            "next": None,
        }

        page = adapter.list_playlist_tracks("p1", 100, 0)

        assert page.track_ids == ["t1", "t2"]
        assert page.next is None
        kwargs = client.playlist_items.call_args.kwargs
        assert kwargs["limit"] == 100
        assert kwargs["offset"] == 0

    def test_create_playlist_is_private(self):
        """New playlists are private and not collaborative"""
        adapter, client = make_adapter()
        client.user_playlist_create.return_value = {"id": "new1"}

        playlist_id = adapter.create_playlist("koenrh", "st-liked", "Managed by spotitable")

        assert playlist_id == "new1"
        client.user_playlist_create.assert_called_once_with(
            "koenrh",
            "st-liked",
            public=False,
            collaborative=False,
            description="Managed by spotitable",
        )

    def test_get_tracks_maps_missing_to_none(self):
        """Null entries in the lookup response mean the track is gone"""
        adapter, client = make_adapter()
        client.tracks.return_value = {"tracks": [{"id": "a"}, None, {"id": "c"}]}

        assert adapter.get_tracks(["a", "b", "c"]) == ["a", None, "c"]
        client.tracks.assert_called_once_with(["a", "b", "c"])

    def test_mutations(self):
        """Add and remove go to the playlist items endpoints"""
        adapter, client = make_adapter()

        adapter.add_tracks("p1", ["a", "b"])
        adapter.remove_tracks("p1", ["c"])

        client.playlist_add_items.assert_called_once_with("p1", ["a", "b"])
        client.playlist_remove_all_occurrences_of_items.assert_called_once_with("p1", ["c"])

    @patch("spotitable.retry.time.sleep")
    def test_add_not_replayed_after_read_timeout(self, sleep):
        """A timed out add may already be applied, so it is raised instead of sent again"""
        adapter, client = make_adapter()
        client.playlist_add_items.side_effect = requests.ReadTimeout()

        with pytest.raises(requests.ReadTimeout):
            adapter.add_tracks("p1", ["a", "b"])

        assert client.playlist_add_items.call_count == 1
        sleep.assert_not_called()

    @patch("spotitable.retry.time.sleep")
    def test_remove_retried_after_read_timeout(self, sleep):
        """Removing all occurrences can be repeated safely"""
        adapter, client = make_adapter()
        client.playlist_remove_all_occurrences_of_items.side_effect = [requests.ReadTimeout(), {}]

        adapter.remove_tracks("p1", ["c"])

        assert client.playlist_remove_all_occurrences_of_items.call_count == 2


class TestPreflight:
    """Test the current user lookup"""

    def test_returns_user_id(self):
        """The user ID comes from /me"""
        client = Mock()
        client.me.return_value = {"id": "koenrh", "display_name": "Koen"}

        assert spotify_preflight(client) == "koenrh"
