from __future__ import annotations

from typing import Optional, Sequence

from .adapters import PlaylistServiceAdapter
from .cache import RemoteStateCache
from .config import PLAYLIST_DESCRIPTION
from .console import logger
from .errors import MutationError, SpotitableError
from .executor import BatchMutationExecutor
from .models import Delta
from .state import PlaylistSyncResult, SyncStage
from .utils import dedupe


class PlaylistManager:
    def __init__(
        self,
        adapter: PlaylistServiceAdapter,
        cache: RemoteStateCache,
        executor: Optional[BatchMutationExecutor] = None,
        description: str = PLAYLIST_DESCRIPTION,
    ):
        self.adapter = adapter
        self.cache = cache
        self.executor = executor or BatchMutationExecutor(adapter)
        self.description = description

    # Resolution ----------------------------------------------------------
    def find_or_create_playlist(self, name: str) -> str:
        self.cache.ensure_populated()
        playlist_id = self.cache.playlist_id(name)
        if playlist_id:
            return playlist_id
        try:
            playlist_id = self.adapter.create_playlist(self.cache.user_id, name, self.description)
        except Exception as exc:
            raise MutationError(
                f"Could not create playlist {name}: {exc}", playlist_id=name, cause=exc
            ) from exc
        logger.info(f"[green]create[/green] spotify:playlist:{playlist_id} ({name})")
        self.cache.register_playlist(name, playlist_id)
        return playlist_id

    # Diffing -------------------------------------------------------------
    def compute_delta(self, playlist_id: str, desired: Sequence[str]) -> Delta:
        current = self.cache.tracks_for(playlist_id)
        desired_set = set(desired)
        current_set = set(current)

        to_remove = [track_id for track_id in current if track_id not in desired_set]
        to_add = [track_id for track_id in desired if track_id not in current_set]
        return Delta(to_add=to_add, to_remove=to_remove)

    # Sync ----------------------------------------------------------------
    def update_playlist(
        self,
        playlist_id: str,
        desired: Sequence[str],
        result: Optional[PlaylistSyncResult] = None,
    ) -> Delta:
        result = result or PlaylistSyncResult(bucket=playlist_id, playlist_id=playlist_id)
        result.playlist_id = playlist_id
        result.advance(SyncStage.PLAYLIST_RESOLVED)
        try:
            seen = len(self.executor.missing)
            existing = self.executor.validate_existence(desired)
            result.missing = [problem.track_id for problem in self.executor.missing[seen:]]
            result.advance(SyncStage.EXISTENCE_VALIDATED)

            delta = self.compute_delta(playlist_id, existing)
            result.delta = delta

            for track_id in delta.to_remove:
                logger.info(f"[red]remove[/red] spotify:track:{track_id} from spotify:playlist:{playlist_id}")
            self.executor.apply_removals(playlist_id, delta.to_remove)
            self.cache.record_delta(playlist_id, Delta(to_remove=delta.to_remove))
            result.advance(SyncStage.REMOVALS_APPLIED)

            # additions are only announced once every removal went through
            for track_id in delta.to_add:
                logger.info(f"[green]add[/green] spotify:track:{track_id} to spotify:playlist:{playlist_id}")
            self.executor.apply_additions(playlist_id, delta.to_add)
            self.cache.record_delta(playlist_id, Delta(to_add=delta.to_add))
            result.advance(SyncStage.ADDITIONS_APPLIED)
        except SpotitableError as exc:
            result.fail(exc)
            raise
        result.advance(SyncStage.DONE)
        return delta

    def add_tracks_to_named_playlist(
        self,
        name: str,
        desired: Sequence[str],
        result: Optional[PlaylistSyncResult] = None,
    ) -> Optional[Delta]:
        result = result or PlaylistSyncResult(bucket=name)
        if not desired:
            result.advance(SyncStage.SKIPPED)
            logger.debug(f"{name}: no tracks, skipping")
            return None
        try:
            playlist_id = self.find_or_create_playlist(name)
        except SpotitableError as exc:
            result.fail(exc)
            raise
        return self.update_playlist(playlist_id, dedupe(desired), result)


__all__ = ["PlaylistManager"]
