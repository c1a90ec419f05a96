from __future__ import annotations

import datetime
from typing import List, Optional

from .adapters import RecordStore
from .config import DECADE_YEARS, EPOCH, PLAYLIST_PREFIX
from .console import logger
from .errors import SpotitableError
from .manager import PlaylistManager
from .models import Bucket
from .state import PlaylistSyncResult, SyncReport


def build_buckets(
    epoch: int = EPOCH,
    current_year: Optional[int] = None,
    prefix: str = PLAYLIST_PREFIX,
) -> List[Bucket]:
    """Year buckets, then decade buckets, then liked and loved."""
    if current_year is None:
        current_year = datetime.date.today().year
    buckets = [
        Bucket(name=f"{prefix}-year-{year}", formula=f"{{Year}} = {year}")
        for year in range(epoch, current_year + 1)
    ]
    buckets.extend(
        Bucket(
            name=f"{prefix}-decade-{decade}s",
            formula=f"AND({{Year}} >= {decade}, {{Year}} < {decade + DECADE_YEARS})",
        )
        for decade in range(epoch, current_year + DECADE_YEARS, DECADE_YEARS)
    )
    buckets.append(Bucket(name=f"{prefix}-liked", formula="{Like} = 1"))
    buckets.append(Bucket(name=f"{prefix}-loved", formula="{Love} = 1"))
    return buckets


class SyncDriver:
    def __init__(
        self,
        records: RecordStore,
        manager: PlaylistManager,
        table: str,
        buckets: Optional[List[Bucket]] = None,
        continue_on_error: bool = False,
    ):
        self.records = records
        self.manager = manager
        self.table = table
        self.buckets = buckets if buckets is not None else build_buckets(prefix=manager.cache.prefix)
        self.continue_on_error = continue_on_error

    def run(self) -> SyncReport:
        report = SyncReport()
        for bucket in self.buckets:
            result = PlaylistSyncResult(bucket=bucket.name)
            report.add(result)
            try:
                self.sync_bucket(bucket, result)
            except SpotitableError as exc:
                result.fail(exc)
                if not self.continue_on_error:
                    raise
                logger.error(f"[red]{bucket.name} failed:[/red] {exc}")
        return report

    def sync_bucket(self, bucket: Bucket, result: PlaylistSyncResult) -> None:
        track_ids = self.records.list_track_ids(self.table, bucket.formula)
        logger.debug(f"{bucket.name}: {len(track_ids)} desired tracks")
        self.manager.add_tracks_to_named_playlist(bucket.name, track_ids, result)


__all__ = ["SyncDriver", "build_buckets"]
