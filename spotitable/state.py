from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .models import Delta


class SyncStage(Enum):
    IDLE = "idle"
    PLAYLIST_RESOLVED = "playlist_resolved"
    EXISTENCE_VALIDATED = "existence_validated"
    REMOVALS_APPLIED = "removals_applied"
    ADDITIONS_APPLIED = "additions_applied"
    DONE = "done"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class PlaylistSyncResult:
    bucket: str
    playlist_id: Optional[str] = None
    stage: SyncStage = SyncStage.IDLE
    delta: Delta = field(default_factory=Delta)
    missing: List[str] = field(default_factory=list)
    error: Optional[BaseException] = None

    def advance(self, stage: SyncStage) -> None:
        self.stage = stage

    def fail(self, error: BaseException) -> None:
        self.stage = SyncStage.FAILED
        self.error = error


@dataclass
class SyncReport:
    results: List[PlaylistSyncResult] = field(default_factory=list)

    def add(self, result: PlaylistSyncResult) -> None:
        self.results.append(result)

    @property
    def failed(self) -> List[PlaylistSyncResult]:
        return [result for result in self.results if result.stage is SyncStage.FAILED]

    @property
    def added(self) -> int:
        return sum(len(result.delta.to_add) for result in self.results)

    @property
    def removed(self) -> int:
        return sum(len(result.delta.to_remove) for result in self.results)

    @property
    def missing(self) -> int:
        return sum(len(result.missing) for result in self.results)


__all__ = ["SyncStage", "PlaylistSyncResult", "SyncReport"]
