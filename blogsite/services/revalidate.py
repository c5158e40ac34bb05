"""Time-based regeneration of page props."""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 512


class RevalidatingCache:
    """Serve page props for up to ``ttl_seconds`` before regenerating them.

    A failed regeneration keeps serving the previous value when there is one,
    so a store outage does not take down pages that rendered before.

    ``None`` results (unknown slugs, missing authors) are never stored, and at
    most ``max_entries`` keys are kept, evicting the least recently used.
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_or_load(self, key: str, loader: Callable[[], Any]) -> Any:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
        if entry is not None and now - entry[0] < self.ttl_seconds:
            return entry[1]

        try:
            value = loader()
        except Exception:
            if entry is None:
                raise
            logger.exception("revalidate_failed key=%s serving_stale=true", key)
            return entry[1]

        with self._lock:
            if value is None:
                self._entries.pop(key, None)
                return None
            self._entries[key] = (now, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("revalidate_evicted key=%s", evicted)
        return value

    def invalidate(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)


__all__ = ["DEFAULT_MAX_ENTRIES", "RevalidatingCache"]
