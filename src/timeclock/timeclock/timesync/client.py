from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import requests

from ..core.exceptions import TimeSyncError


class WorldTimeClient:
    """HTTP client for a WorldTimeAPI-compatible time authority.

    `GET {base_url}/{timezone}` returns JSON with `utc_datetime` and/or
    `datetime` ISO-8601 fields.
    """

    def __init__(self, base_url: str, *, timeout: float = 10, session: Optional[requests.Session] = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def fetch_trusted_instant(self, tz_name: str) -> datetime:
        url = f"{self._base_url}/{tz_name}"
        try:
            resp = self._session.get(url, timeout=self._timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise TimeSyncError(f"Failed to fetch time from {url}: {e}") from e

        raw = data.get("utc_datetime") or data.get("datetime")
        if not raw:
            raise TimeSyncError(f"Time response from {url} has no datetime field")
        try:
            value = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
        except ValueError as e:
            raise TimeSyncError(f"Unparseable datetime {raw!r}") from e

        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
