"""Time-expiring metadata cache keyed by remote id."""

from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Optional

from cachetools import TTLCache

from dropboxfs.config import DEFAULT_CACHE_TTL_SEC
from dropboxfs.errors import NotFoundError
from dropboxfs.models import Metadata

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CacheEntry:
    metadata: Metadata
    inserted_at: float


class MetadataCache:
    """
    Unbounded id -> Metadata cache with a fixed time-to-live from insertion.

    Notes:
        - Entries live in a `cachetools.TTLCache` driven by `clock`; an entry
          is gone once `ttl_sec` has elapsed since it was written.
        - A miss or an expired entry is reloaded synchronously through `loader`.
        - Concurrent loads of the same id share one in-flight call.
        - NotFoundError from the loader is reported as None and not cached;
          every other loader failure propagates.
    """

    def __init__(
        self,
        loader: Callable[[str], Metadata],
        *,
        ttl_sec: float = DEFAULT_CACHE_TTL_SEC,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: TTLCache = TTLCache(maxsize=math.inf, ttl=ttl_sec, timer=clock)
        self._loading: dict[str, Future] = {}

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)

    def get(self, item_id: str) -> Optional[Metadata]:
        with self._lock:
            entry = self._entries.get(item_id)
            if entry is not None:
                return entry.metadata

            pending = self._loading.get(item_id)
            is_owner = pending is None
            if is_owner:
                pending = Future()
                self._loading[item_id] = pending

        if not is_owner:
            return pending.result()

        logger.debug("Metadata cache miss for %s", item_id)
        try:
            metadata: Optional[Metadata] = self._loader(item_id)
        except NotFoundError:
            metadata = None
        except BaseException as exc:
            with self._lock:
                if self._loading.get(item_id) is pending:
                    del self._loading[item_id]
            pending.set_exception(exc)
            raise

        with self._lock:
            # An invalidation during the load detaches `pending`; its result
            # must not repopulate the cache.
            if self._loading.get(item_id) is pending:
                del self._loading[item_id]
                if metadata is None:
                    self._entries.pop(item_id, None)
                else:
                    self._entries[item_id] = CacheEntry(metadata, self._clock())
        pending.set_result(metadata)
        return metadata

    def exists(self, item_id: str) -> bool:
        return self.get(item_id) is not None

    def put(self, metadata: Metadata) -> None:
        with self._lock:
            self._entries[metadata.id] = CacheEntry(metadata, self._clock())

    def invalidate(self, item_id: str) -> None:
        with self._lock:
            self._entries.pop(item_id, None)
            self._loading.pop(item_id, None)

    def invalidate_path(self, path: str) -> None:
        """
        Drop every entry at or below `path` (compared case-insensitively).

        Loads in flight are detached as well, since their target paths are
        not known until they finish.
        """
        prefix = path.rstrip("/").lower()
        if not prefix:
            self.clear()
            return

        with self._lock:
            self._entries.expire()
            for item_id in list(self._entries.keys()):
                entry = self._entries.get(item_id)
                if entry is None:
                    continue
                entry_path = entry.metadata.path.lower()
                if entry_path == prefix or entry_path.startswith(prefix + "/"):
                    del self._entries[item_id]
            self._loading.clear()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._loading.clear()
