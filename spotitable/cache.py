from __future__ import annotations

from typing import Callable, Dict, List, Optional

from .adapters import PlaylistServiceAdapter
from .config import MAX_PLAYLIST_TRACKS, MAX_PLAYLISTS, PLAYLIST_PREFIX
from .console import logger
from .errors import DiscoveryError
from .models import Delta
from .utils import has_prefix


def _paginate(fetch: Callable[[int, int], object], limit: int) -> List[object]:
    """Collect pages until ``next`` is empty or the offset reaches ``total``."""
    pages = []
    offset = 0
    while True:
        page = fetch(limit, offset)
        pages.append(page)
        offset += limit
        if not page.next or offset >= page.total:
            break
    return pages


class RemoteStateCache:
    """In-memory snapshot of the managed playlists and their members.

    Populated lazily on first use and never re-read during a run.
    """

    def __init__(
        self,
        adapter: PlaylistServiceAdapter,
        user_id: str,
        prefix: str = PLAYLIST_PREFIX,
    ):
        self.adapter = adapter
        self.user_id = user_id
        self.prefix = prefix
        self._playlists: Dict[str, str] = {}
        self._tracks: Dict[str, List[str]] = {}
        self._populated = False

    @property
    def is_populated(self) -> bool:
        return self._populated

    def ensure_populated(self) -> None:
        if self._populated:
            return
        playlists: Dict[str, str] = {}
        tracks: Dict[str, List[str]] = {}
        try:
            pages = _paginate(
                lambda limit, offset: self.adapter.list_playlists(self.user_id, limit, offset),
                MAX_PLAYLISTS,
            )
            for page in pages:
                for summary in page.items:
                    if not has_prefix(summary.name, self.prefix):
                        continue
                    if summary.owner and summary.owner != self.user_id:
                        # followed playlists cannot be modified
                        logger.debug(f"Skipping {summary.name}, owned by spotify:user:{summary.owner}")
                        continue
                    if summary.name in playlists:
                        logger.warning(
                            f"[yellow]Duplicate playlist name ignored:[/yellow] {summary.name} "
                            f"(spotify:playlist:{summary.id})"
                        )
                        continue
                    playlists[summary.name] = summary.id
                    tracks[summary.id] = self._fetch_tracks(summary.id)
        except DiscoveryError:
            raise
        except Exception as exc:
            raise DiscoveryError(f"Could not list remote playlists: {exc}") from exc

        self._playlists = playlists
        self._tracks = tracks
        self._populated = True
        logger.info(f"[cyan]Managed playlists found:[/cyan] {len(playlists)}")

    def _fetch_tracks(self, playlist_id: str) -> List[str]:
        members: List[str] = []
        pages = _paginate(
            lambda limit, offset: self.adapter.list_playlist_tracks(playlist_id, limit, offset),
            MAX_PLAYLIST_TRACKS,
        )
        for page in pages:
            members.extend(page.track_ids)
        logger.debug(f"spotify:playlist:{playlist_id} has {len(members)} tracks")
        return members

    # Lookups -------------------------------------------------------------
    def playlist_id(self, name: str) -> Optional[str]:
        return self._playlists.get(name)

    def playlist_names(self) -> List[str]:
        return list(self._playlists)

    def tracks_for(self, playlist_id: str) -> List[str]:
        return list(self._tracks.get(playlist_id, []))

    # Updates -------------------------------------------------------------
    def register_playlist(self, name: str, playlist_id: str) -> None:
        self._playlists.setdefault(name, playlist_id)
        self._tracks.setdefault(playlist_id, [])

    def record_delta(self, playlist_id: str, delta: Delta) -> None:
        """Fold an applied delta into the snapshot without asking the server."""
        removed = set(delta.to_remove)
        members = [track_id for track_id in self._tracks.get(playlist_id, []) if track_id not in removed]
        members.extend(delta.to_add)
        self._tracks[playlist_id] = members


__all__ = ["RemoteStateCache"]
