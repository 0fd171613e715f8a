# src/cache.py
"""In-memory TTL cache owned by the caller.

Used to avoid repeated calls to the model extractor for the same phrase.
The clock is injectable so expiry can be tested without sleeping.
"""

import hashlib
import logging
import time
from threading import Lock
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class TTLCache:
    """Hash-keyed cache with a fixed TTL per entry."""

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}  # hash -> (value, stored_at)
        self._lock = Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def hash_key(text: str) -> str:
        return hashlib.sha256(text.encode("utf-8")).hexdigest()

    def get(self, key: str) -> Optional[Any]:
        """Value for key if present and not expired, else None."""
        h = self.hash_key(key)
        with self._lock:
            entry = self._entries.get(h)
            if entry is not None:
                value, stored_at = entry
                age = self._clock() - stored_at
                if age < self.ttl_seconds:
                    self.hits += 1
                    return value
                del self._entries[h]
                logger.debug("Cache expired: %s... (age: %.1fs)", h[:16], age)
            self.misses += 1
            return None

    def set(self, key: str, value: Any) -> None:
        if self.ttl_seconds <= 0:
            return
        with self._lock:
            now = self._clock()
            self._prune_expired(now)
            self._entries[self.hash_key(key)] = (value, now)

    def _prune_expired(self, now: float) -> None:
        # вызывается под self._lock
        expired = [h for h, (_value, stored_at) in self._entries.items() if now - stored_at >= self.ttl_seconds]
        for h in expired:
            del self._entries[h]
        if expired:
            logger.debug("Pruned %d expired cache entries", len(expired))

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        if count:
            logger.info("Cleared cache (%d entries)", count)
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
