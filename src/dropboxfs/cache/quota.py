"""Account quota snapshot with its own refresh cadence."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from dropboxfs.config import DEFAULT_QUOTA_TTL_SEC
from dropboxfs.models import QuotaSnapshot, SpaceUsage

logger = logging.getLogger(__name__)


class QuotaTracker:
    """Caches (total, used) bytes; stale snapshots are refreshed on next access."""

    def __init__(
        self,
        fetch: Callable[[], SpaceUsage],
        *,
        ttl_sec: float = DEFAULT_QUOTA_TTL_SEC,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self._ttl_sec = ttl_sec
        self._clock = clock
        self._snapshot: Optional[QuotaSnapshot] = None
        self._refresh_lock = threading.Lock()

    @property
    def snapshot(self) -> Optional[QuotaSnapshot]:
        return self._snapshot

    def get_usage(self) -> QuotaSnapshot:
        snapshot = self._snapshot
        if snapshot is not None and not self._is_stale(snapshot):
            return snapshot

        # Callers that queue behind an in-flight refresh find it fresh on re-check.
        with self._refresh_lock:
            snapshot = self._snapshot
            if snapshot is not None and not self._is_stale(snapshot):
                return snapshot

            usage = self._fetch()
            snapshot = QuotaSnapshot(
                total_bytes=usage.allocated,
                used_bytes=usage.used,
                fetched_at=self._clock(),
            )
            self._snapshot = snapshot
            logger.debug("Quota refreshed: used=%d total=%d", usage.used, usage.allocated)
            return snapshot

    def total_bytes(self) -> int:
        return self.get_usage().total_bytes

    def used_bytes(self) -> int:
        return self.get_usage().used_bytes

    def invalidate(self) -> None:
        self._snapshot = None

    def _is_stale(self, snapshot: QuotaSnapshot) -> bool:
        return self._clock() - snapshot.fetched_at > self._ttl_sec
