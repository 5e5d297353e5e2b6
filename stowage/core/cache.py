"""
Thread-safe in-memory TTL cache.

Shared collaborator for the caching behavior. One cache may back many
providers, so callers are expected to scope their keys.
"""

import threading
import time
from typing import Any


class TTLCache:
    """
    Time-to-live cache with FIFO eviction once max_size is reached.

    All access is serialized by a lock so a single cache can be shared
    between providers used from several threads or tasks.
    """

    def __init__(self, ttl_seconds: float = 300, max_size: int = 2048):
        """
        Initialize TTL cache.

        Args:
            ttl_seconds: Default time-to-live of an entry
            max_size: Maximum number of entries before the oldest is evicted
        """
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._cache: dict[Any, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: Any, default: Any = None) -> Any:
        """Return the cached value, or default when missing or expired."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return default

            value, expiry = entry
            if time.monotonic() > expiry:
                del self._cache[key]
                return default

            return value

    def set(self, key: Any, value: Any, ttl_seconds: float | None = None) -> None:
        """Store value under key for ttl_seconds (default TTL when None)."""
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            if len(self._cache) >= self.max_size and key not in self._cache:
                oldest_key = next(iter(self._cache))
                del self._cache[oldest_key]

            self._cache[key] = (value, time.monotonic() + ttl)

    def delete(self, key: Any) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def delete_prefix(self, prefix: str) -> int:
        """Remove every string key starting with prefix; returns how many were removed."""
        with self._lock:
            keys = [key for key in self._cache if isinstance(key, str) and key.startswith(prefix)]
            for key in keys:
                del self._cache[key]
            return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __contains__(self, key: Any) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
