"""Lock-protected facade over ``ExpiringCache`` for multi-threaded hosts."""

from __future__ import annotations

from collections.abc import Callable, Mapping
import threading
from typing import Any

from .cache import CacheLookup, CacheStatisticsSnapshot, ExpiringCache
from .config import CacheSettings
from .events import EventChannel


class SynchronizedCache:
    """Serialize every public cache operation behind one re-entrant lock.

    Sweeping, eviction, insertion and the inline listener calls of a single
    operation all happen while the lock is held, so concurrent callers never
    observe a half-applied change. A listener that calls back into this
    wrapper from the publishing thread re-enters the lock instead of
    deadlocking; a slow listener blocks every other caller.
    """

    def __init__(self, cache: ExpiringCache | None = None) -> None:
        self._cache = cache if cache is not None else ExpiringCache()
        self._lock = threading.RLock()

    @property
    def cache(self) -> ExpiringCache:
        return self._cache

    @property
    def channel(self) -> EventChannel:
        return self._cache.channel

    @property
    def settings(self) -> CacheSettings:
        with self._lock:
            return self._cache.settings

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._cache

    def configure(
        self, options: Mapping[str, Any] | None = None, /, **overrides: Any
    ) -> CacheSettings:
        with self._lock:
            return self._cache.configure(options, **overrides)

    def set(self, key: str, value: Any, ttl_ms: float | None = None) -> bool:
        with self._lock:
            return self._cache.set(key, value, ttl_ms)

    def get(self, key: str) -> CacheLookup[Any]:
        with self._lock:
            return self._cache.get(key)

    def get_or_set(
        self, key: str, factory: Callable[[], Any], ttl_ms: float | None = None
    ) -> Any:
        # The factory runs under the lock so two threads never compute one key twice.
        with self._lock:
            return self._cache.get_or_set(key, factory, ttl_ms)

    def has(self, key: str) -> bool:
        with self._lock:
            return self._cache.has(key)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._cache.delete(key)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def keys(self) -> list[str]:
        with self._lock:
            return self._cache.keys()

    def get_statistics(self) -> CacheStatisticsSnapshot:
        with self._lock:
            return self._cache.get_statistics()

    def reset_statistics(self) -> None:
        with self._lock:
            self._cache.reset_statistics()

    def debug(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            return self._cache.debug()
