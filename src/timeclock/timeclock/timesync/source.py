from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import utc_now
from ..core.constants import DEFAULT_TIMEZONE, RESYNC_MAX_AGE

logger = logging.getLogger(__name__)

TrustedInstantFetcher = Callable[[str], datetime]


class TimeSource:
    """Trusted current instant, corrected for local clock skew.

    `sync()` measures `offset = trusted - local` against the trusted time
    authority and caches it with the local time of the sync. `now()` applies
    the cached offset to the local clock, or returns uncorrected local time
    until a sync has succeeded. A failed sync keeps the previous offset.

    One instance is shared by every consumer (services, sweeper, sessions).
    """

    def __init__(
        self,
        fetch_trusted_instant: Optional[TrustedInstantFetcher] = None,
        *,
        timezone: str = DEFAULT_TIMEZONE,
        local_clock: Callable[[], datetime] = utc_now,
        max_age: timedelta = RESYNC_MAX_AGE,
    ):
        self._fetch = fetch_trusted_instant
        self._timezone = timezone
        self._local_clock = local_clock
        self._max_age = max_age
        self._offset: Optional[timedelta] = None
        self._last_sync: Optional[datetime] = None

    @property
    def offset(self) -> Optional[timedelta]:
        return self._offset

    @property
    def last_sync(self) -> Optional[datetime]:
        return self._last_sync

    def local_now(self) -> datetime:
        return self._local_clock()

    def now(self) -> datetime:
        local = self._local_clock()
        if self._offset is None:
            return local
        return local + self._offset

    def sync(self) -> bool:
        if self._fetch is None:
            logger.debug("No trusted time source configured; using local clock")
            return False

        try:
            trusted = self._fetch(self._timezone)
        except Exception as e:
            logger.warning("Time sync failed, keeping previous offset: %s", e)
            return False

        local = self._local_clock()
        self._offset = trusted - local
        self._last_sync = local
        logger.info("Time synchronized with server. Offset: %dms", self._offset / timedelta(milliseconds=1))
        return True

    def is_stale(self, max_age: Optional[timedelta] = None) -> bool:
        max_age = self._max_age if max_age is None else max_age
        if self._offset is None or self._last_sync is None:
            return True
        return self._local_clock() - self._last_sync > max_age

    def resync_if_stale(self, max_age: Optional[timedelta] = None) -> bool:
        """Re-run `sync()` when the cache is empty or older than `max_age`."""

        if self.is_stale(max_age):
            return self.sync()
        return False
