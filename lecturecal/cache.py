"""
Time-bounded cache for serialized calendars.

Entries map a request fingerprint (see CalendarRequest.cache_key) to the
bytes of a successfully serialized calendar:
- an entry expires `ttl` seconds after its last put (reads do not extend it)
- a janitor thread removes expired entries every `cleanup_interval` seconds
- when `maxsize` entries are held, the least recently used one is evicted

All operations take an internal lock, so callers never lock themselves.
Two concurrent misses for the same key both compute; the last put wins.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

DEFAULT_TTL = 10 * 60
DEFAULT_CLEANUP_INTERVAL = 30 * 60
DEFAULT_MAXSIZE = 4096


class ArtifactCache:
    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        cleanup_interval: float = DEFAULT_CLEANUP_INTERVAL,
        maxsize: int = DEFAULT_MAXSIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl!r}")
        if maxsize <= 0:
            raise ValueError(f"maxsize must be positive, got {maxsize!r}")
        self.ttl = ttl
        self.cleanup_interval = cleanup_interval
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=clock)
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._janitor: Optional[threading.Thread] = None

    def get(self, key: str) -> Optional[bytes]:
        """
        Return the cached bytes, or None if missing, expired or evicted.
        """
        with self._lock:
            value = self._entries.get(key)
        logger.debug("cache %s key=%s", "hit" if value is not None else "miss", key)
        return value

    def put(self, key: str, value: bytes) -> None:
        """
        Store (or overwrite) a value and restart its expiry clock.
        """
        with self._lock:
            self._entries[key] = bytes(value)

    def sweep(self) -> int:
        """
        Drop expired entries now. Returns the number of removed entries.
        """
        with self._lock:
            removed = len(self._entries.expire())
        if removed:
            logger.debug("cache sweep removed %d entries", removed)
        return removed

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)

    # -----------------------------------------------------------------------
    # Background cleanup
    # -----------------------------------------------------------------------

    def start_janitor(self) -> None:
        if self.cleanup_interval <= 0 or self._janitor is not None:
            return

        def loop() -> None:
            while not self._stop.wait(self.cleanup_interval):
                self.sweep()

        self._janitor = threading.Thread(target=loop, name="lecturecal-cache-janitor", daemon=True)
        self._janitor.start()

    def close(self) -> None:
        self._stop.set()
        if self._janitor is not None:
            self._janitor.join(timeout=5)
            self._janitor = None
