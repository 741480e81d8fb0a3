"""
Key/value caches with a fixed time-to-live.
"""
import time
import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class MemoryTTLCache:
    """
    In-process cache. Entries expire after ``ttl`` seconds and are only
    dropped when read after expiry; size is not bounded.
    """

    def __init__(self, ttl: int, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            value, stored_at = entry
            if self._clock() - stored_at >= self.ttl:
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None

            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock())


class RedisTTLCache:
    """Cache shared between processes, stored in Redis with a key prefix."""

    def __init__(self, redis_client, ttl: int, prefix: str = ""):
        self.redis_client = redis_client
        self.ttl = ttl
        self.prefix = prefix

    def get(self, key: str) -> Optional[Any]:
        return self.redis_client.get(f"{self.prefix}{key}")

    def set(self, key: str, value: Any) -> None:
        if not self.redis_client.set(f"{self.prefix}{key}", value, expire=self.ttl):
            logger.warning(f"Failed to cache key {self.prefix}{key} in Redis")
