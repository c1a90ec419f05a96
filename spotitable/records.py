from __future__ import annotations

import urllib.parse
from typing import Any, Dict, List, Optional

import requests

from .config import AIRTABLE_API_URL, AIRTABLE_PAGE_SIZE, AIRTABLE_TRACK_FIELD, REQUEST_TIMEOUT
from .console import logger
from .errors import RecordStoreError
from .retry import retry_call


class AirtableClient:
    """Read-only lookup of Spotify track IDs stored in an Airtable table."""

    def __init__(
        self,
        api_key: str,
        base_id: str,
        session: Optional[requests.Session] = None,
        field: str = AIRTABLE_TRACK_FIELD,
    ):
        self.api_key = api_key
        self.base_id = base_id
        self.field = field
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def _table_url(self, table: str) -> str:
        return f"{AIRTABLE_API_URL}/{self.base_id}/{urllib.parse.quote(table, safe='')}"

    def _get_page(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        response = self.session.get(url, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()

    def list_track_ids(self, table: str, formula: str) -> List[str]:
        url = self._table_url(table)
        params: Dict[str, Any] = {
            "filterByFormula": formula,
            "fields[]": self.field,
            "pageSize": AIRTABLE_PAGE_SIZE,
        }
        track_ids: List[str] = []
        while True:
            try:
                payload = retry_call(self._get_page, url, params)
            except (requests.RequestException, ValueError) as exc:
                raise RecordStoreError(f"Airtable query {formula!r} on {table} failed: {exc}") from exc
            for record in payload.get("records", []):
                track_id = (record.get("fields") or {}).get(self.field)
                if not track_id:
                    logger.debug(f"Airtable record {record.get('id')} has no {self.field}")
                    continue
                track_ids.append(track_id)
            offset = payload.get("offset")
            if not offset:
                break
            params = {**params, "offset": offset}
        logger.debug(f"{formula}: {len(track_ids)} tracks")
        return track_ids


__all__ = ["AirtableClient"]
