from __future__ import annotations

from typing import Optional


class SpotitableError(Exception):
    """Base class for every error raised by spotitable."""


class AuthorizationError(SpotitableError):
    """Consent was denied or the token exchange failed. Never retried."""


class DiscoveryError(SpotitableError):
    """Listing playlists, playlist items or tracks failed."""


class ValidationError(SpotitableError):
    """A desired track no longer exists on the remote service.

    Collected and reported, not raised out of the executor.
    """

    def __init__(self, track_id: str):
        super().__init__(f"spotify:track:{track_id} does not exist")
        self.track_id = track_id


class MutationError(SpotitableError):
    """An add/remove batch failed. Earlier batches stay applied."""

    def __init__(
        self,
        message: str,
        playlist_id: str,
        applied_batches: int = 0,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.playlist_id = playlist_id
        self.applied_batches = applied_batches
        self.cause = cause


class RecordStoreError(SpotitableError):
    pass


__all__ = [
    "SpotitableError",
    "AuthorizationError",
    "DiscoveryError",
    "ValidationError",
    "MutationError",
    "RecordStoreError",
]
