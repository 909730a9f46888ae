"""Time-based cache for hero catalog and roster lookups."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _Entry(Generic[T]):
    value: T
    loaded_at: float


class TTLCache(Generic[T]):
    """Keyed loader cache with a fixed time-to-live.

    ``clock`` is injected so tests can move time forward without sleeping.
    Concurrent misses for one key call the loader once.
    """

    def __init__(
        self,
        loader: Callable[[Hashable], T],
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, _Entry[T]] = {}
        self._lock = threading.Lock()

    def _is_fresh(self, entry: _Entry[T], now: float) -> bool:
        return (now - entry.loaded_at) < self.ttl_seconds

    def get(self, key: Hashable = None) -> T:
        """Return the cached value for ``key``, loading it if missing or stale."""
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is not None and self._is_fresh(entry, now):
                return entry.value

            logger.debug(f"Cache miss for {key!r}, loading")
            value = self._loader(key)
            self._entries[key] = _Entry(value=value, loaded_at=self._clock())
            return value

    def invalidate(self, key: Hashable = None) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and self._is_fresh(entry, self._clock())
