from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class PlaylistSummary:
    id: str
    name: str
    track_count: int = 0
    owner: Optional[str] = None


@dataclass
class PlaylistPage:
    items: List[PlaylistSummary] = field(default_factory=list)
    total: int = 0
    next: Optional[str] = None


@dataclass
class TrackPage:
    track_ids: List[str] = field(default_factory=list)
    total: int = 0
    next: Optional[str] = None


@dataclass
class Delta:
    to_add: List[str] = field(default_factory=list)
    to_remove: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


@dataclass
class Bucket:
    name: str
    formula: str


@dataclass
class AuthResult:
    user_id: str
    client: Any = None


__all__ = ["PlaylistSummary", "PlaylistPage", "TrackPage", "Delta", "Bucket", "AuthResult"]
