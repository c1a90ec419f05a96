from __future__ import annotations

from typing import Callable, List, Sequence

from .adapters import PlaylistServiceAdapter
from .config import MAX_PLAYLIST_TRACKS, MAX_TRACKS
from .console import logger
from .errors import DiscoveryError, MutationError, ValidationError
from .utils import chunked


class BatchMutationExecutor:
    """Applies track lookups and playlist mutations within the per-request ceilings."""

    def __init__(
        self,
        adapter: PlaylistServiceAdapter,
        lookup_batch: int = MAX_TRACKS,
        mutation_batch: int = MAX_PLAYLIST_TRACKS,
    ):
        self.adapter = adapter
        self.lookup_batch = lookup_batch
        self.mutation_batch = mutation_batch
        self.missing: List[ValidationError] = []

    def validate_existence(self, track_ids: Sequence[str]) -> List[str]:
        existing: List[str] = []
        for chunk in chunked(track_ids, self.lookup_batch):
            try:
                found = self.adapter.get_tracks(chunk)
            except Exception as exc:
                raise DiscoveryError(f"Could not look up {len(chunk)} tracks: {exc}") from exc
            for requested, track_id in zip(chunk, found):
                if track_id:
                    existing.append(track_id)
                else:
                    problem = ValidationError(requested)
                    self.missing.append(problem)
                    logger.warning(f"[yellow]{problem}[/yellow]")
        return existing

    def apply_removals(self, playlist_id: str, track_ids: Sequence[str]) -> int:
        return self._apply("remove", self.adapter.remove_tracks, playlist_id, track_ids)

    def apply_additions(self, playlist_id: str, track_ids: Sequence[str]) -> int:
        return self._apply("add", self.adapter.add_tracks, playlist_id, track_ids)

    def _apply(
        self,
        action: str,
        call: Callable[[str, Sequence[str]], None],
        playlist_id: str,
        track_ids: Sequence[str],
    ) -> int:
        applied = 0
        for chunk in chunked(track_ids, self.mutation_batch):
            try:
                call(playlist_id, chunk)
            except Exception as exc:
                raise MutationError(
                    f"Could not {action} {len(chunk)} tracks on spotify:playlist:{playlist_id} "
                    f"after {applied} successful batches: {exc}",
                    playlist_id=playlist_id,
                    applied_batches=applied,
                    cause=exc,
                ) from exc
            applied += 1
        return applied


__all__ = ["BatchMutationExecutor"]
