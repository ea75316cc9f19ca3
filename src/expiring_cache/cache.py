"""Bounded key/value cache with per-entry TTL and pluggable eviction."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass
import logging
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from .clock import Clock, MonotonicClock
from .config import CacheSettings
from .events import EXPIRED_REASON, CacheEvent, EventChannel
from .eviction import EvictionStrategy, Selector, build_selectors, select_victim
from .exceptions import ConfigValidationError, EvictionError, InvalidArgumentError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry:
    """One stored value plus the bookkeeping eviction policies read."""

    value: Any
    ttl_ms: float
    created_at: float
    last_accessed_at: float | None = None
    access_count: int = 0

    def __post_init__(self) -> None:
        if self.last_accessed_at is None:
            self.last_accessed_at = self.created_at

    def age(self, now: float) -> float:
        return now - self.created_at

    def is_expired(self, now: float) -> bool:
        return self.age(now) > self.ttl_ms

    def expires_in(self, now: float) -> float:
        return max(0.0, self.ttl_ms - self.age(now))


@dataclass
class CacheStatistics:
    """Counters accumulated since construction or the last reset."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    total_gets: int = 0
    total_sets: int = 0

    @property
    def hit_rate(self) -> str:
        if self.total_gets == 0:
            return "0%"
        return f"{self.hits / self.total_gets * 100:.2f}%"


@dataclass(frozen=True)
class CacheStatisticsSnapshot:
    """Point-in-time copy of the counters and current configuration."""

    hits: int
    misses: int
    evictions: int
    total_gets: int
    total_sets: int
    size: int
    hit_rate: str
    eviction_strategy: str
    default_ttl_ms: float
    max_size: int | None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CacheLookup(Generic[T]):
    """Result of ``ExpiringCache.get``.

    ``found`` separates a miss from a stored ``None`` or other falsy value;
    truthiness follows ``found``, never the value.
    """

    found: bool
    value: T | None = None

    @classmethod
    def hit(cls, value: T) -> CacheLookup[T]:
        return cls(found=True, value=value)

    @classmethod
    def miss(cls) -> CacheLookup[Any]:
        return cls(found=False)

    def value_or(self, default: Any = None) -> Any:
        return self.value if self.found else default

    def __bool__(self) -> bool:
        return self.found


def _require_key(key: Any) -> str:
    if not isinstance(key, str) or not key.strip():
        raise InvalidArgumentError("Cache key must be a non-empty string.")
    return key


def _require_str_key(key: Any) -> str:
    if not isinstance(key, str):
        raise InvalidArgumentError("Cache key must be a string.")
    return key


def _require_ttl(ttl_ms: Any) -> float:
    if isinstance(ttl_ms, bool) or not isinstance(ttl_ms, (int, float)) or ttl_ms <= 0:
        raise InvalidArgumentError("TTL must be a positive number of milliseconds.")
    return float(ttl_ms)


class ExpiringCache:
    """In-memory cache with lazy TTL expiry and capacity-driven eviction.

    ``set``, ``get`` and ``has`` first sweep expired entries, then act, then
    publish a lifecycle event on ``channel``. ``keys``, ``len`` and
    ``get_statistics`` sweep too, so they only ever count live entries.
    ``selectors`` overrides the eviction function of individual strategies
    for this instance only. Not thread-safe on its own; see
    ``SynchronizedCache`` for multi-threaded hosts.
    """

    def __init__(
        self,
        channel: EventChannel | None = None,
        *,
        settings: CacheSettings | Mapping[str, Any] | None = None,
        clock: Clock | None = None,
        selectors: Mapping[EvictionStrategy, Selector] | None = None,
    ) -> None:
        self._channel = channel if channel is not None else EventChannel()
        self._clock = clock if clock is not None else MonotonicClock()
        self._settings = self._coerce_settings(settings)
        self._selectors = build_selectors(selectors)
        self._entries: dict[str, CacheEntry] = {}
        self._stats = CacheStatistics()

    @staticmethod
    def _coerce_settings(
        settings: CacheSettings | Mapping[str, Any] | None,
    ) -> CacheSettings:
        if settings is None:
            return CacheSettings()
        if isinstance(settings, CacheSettings):
            return settings
        try:
            return CacheSettings.model_validate(dict(settings))
        except ValidationError as exc:
            raise ConfigValidationError(f"Invalid cache settings: {exc}") from exc

    @property
    def channel(self) -> EventChannel:
        return self._channel

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def settings(self) -> CacheSettings:
        return self._settings

    def __len__(self) -> int:
        self._purge_expired()
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def configure(
        self, options: Mapping[str, Any] | None = None, /, **overrides: Any
    ) -> CacheSettings:
        """Apply recognized options one at a time; invalid ones are logged and skipped.

        Accepts field names (``max_size``) or their aliases (``maxSize``).
        Never raises for bad values: the previous setting is kept instead.
        """
        requested = {**(options or {}), **overrides}
        names = CacheSettings.option_names()
        for option, value in requested.items():
            field_name = names.get(option)
            if field_name is None:
                LOGGER.warning(
                    "cache.configure.ignored",
                    extra={
                        "event": "cache.configure.ignored",
                        "option": option,
                        "reason": "unknown option",
                    },
                )
                continue
            candidate = self._settings.model_dump()
            candidate[field_name] = value
            try:
                updated = CacheSettings.model_validate(candidate)
            except ValidationError as exc:
                LOGGER.warning(
                    "cache.configure.ignored",
                    extra={
                        "event": "cache.configure.ignored",
                        "option": option,
                        "value": repr(value),
                        "reason": exc.errors()[0]["msg"] if exc.errors() else str(exc),
                    },
                )
                continue
            self._settings = updated
            LOGGER.info(
                "cache.configure.applied",
                extra={
                    "event": "cache.configure.applied",
                    "option": field_name,
                    "value": repr(getattr(updated, field_name)),
                },
            )
        return self._settings

    def set(self, key: str, value: Any, ttl_ms: float | None = None) -> bool:
        """Store ``value`` under ``key`` for ``ttl_ms`` (default TTL when omitted)."""
        key = _require_key(key)
        ttl = self._settings.default_ttl_ms if ttl_ms is None else _require_ttl(ttl_ms)

        self._purge_expired()
        if key in self._entries:
            # Overwrites never evict; re-insertion moves the key to the back.
            del self._entries[key]
        else:
            self._evict_for_capacity()

        now = self._clock.now()
        self._entries[key] = CacheEntry(value=value, ttl_ms=ttl, created_at=now)
        self._stats.total_sets += 1
        self._channel.publish(CacheEvent.SET.value, key, value, ttl)
        return True

    def get(self, key: str) -> CacheLookup[Any]:
        """Return a hit with the stored value, or a miss."""
        key = _require_str_key(key)
        self._stats.total_gets += 1
        self._purge_expired()

        entry = self._entries.get(key)
        if entry is None:
            self._stats.misses += 1
            self._channel.publish(CacheEvent.MISS.value, key)
            return CacheLookup.miss()

        entry.last_accessed_at = self._clock.now()
        entry.access_count += 1
        self._stats.hits += 1
        self._channel.publish(CacheEvent.HIT.value, key, entry.value)
        return CacheLookup.hit(entry.value)

    def get_or_set(
        self, key: str, factory: Callable[[], Any], ttl_ms: float | None = None
    ) -> Any:
        """Return the cached value, computing and storing it on a miss."""
        lookup = self.get(key)
        if lookup.found:
            return lookup.value
        value = factory()
        self.set(key, value, ttl_ms)
        return value

    def has(self, key: str) -> bool:
        """Report whether ``key`` is live without counting it as an access."""
        key = _require_str_key(key)
        self._purge_expired()
        return key in self._entries

    def delete(self, key: str) -> bool:
        """Remove ``key``; returns False (and publishes nothing) when absent."""
        key = _require_str_key(key)
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        self._channel.publish(CacheEvent.DELETE.value, key, entry.value)
        return True

    def clear(self) -> None:
        """Drop every entry. Statistics are kept."""
        previous_size = len(self._entries)
        self._entries.clear()
        self._channel.publish(CacheEvent.CLEAR.value, previous_size)

    def keys(self) -> list[str]:
        """Snapshot of live keys in insertion order."""
        self._purge_expired()
        return list(self._entries)

    def get_statistics(self) -> CacheStatisticsSnapshot:
        """Counters plus the live entry count and active settings."""
        self._purge_expired()
        stats = self._stats
        return CacheStatisticsSnapshot(
            hits=stats.hits,
            misses=stats.misses,
            evictions=stats.evictions,
            total_gets=stats.total_gets,
            total_sets=stats.total_sets,
            size=len(self._entries),
            hit_rate=stats.hit_rate,
            eviction_strategy=self._settings.eviction_strategy.value,
            default_ttl_ms=self._settings.default_ttl_ms,
            max_size=self._settings.max_size,
        )

    def reset_statistics(self) -> None:
        """Zero all counters without touching stored entries."""
        self._stats = CacheStatistics()
        LOGGER.info("cache.statistics.reset", extra={"event": "cache.statistics.reset"})

    def debug(self) -> dict[str, dict[str, Any]]:
        """Per-key diagnostics. Does not sweep expired entries."""
        now = self._clock.now()
        return {
            key: {
                "value": entry.value,
                "ttl_ms": entry.ttl_ms,
                "age_ms": entry.age(now),
                "expires_in_ms": entry.expires_in(now),
                "last_accessed_at": entry.last_accessed_at,
                "access_count": entry.access_count,
                "is_expired": entry.is_expired(now),
            }
            for key, entry in self._entries.items()
        }

    def _purge_expired(self) -> int:
        """Remove every expired entry, announcing each one. Returns the count."""
        now = self._clock.now()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        removed = 0
        for key in expired:
            # A listener may already have swept this key through a nested call.
            entry = self._entries.pop(key, None)
            if entry is None:
                continue
            removed += 1
            self._stats.evictions += 1
            self._channel.publish(CacheEvent.EVICTION.value, key, EXPIRED_REASON, entry.value)

        if removed:
            self._channel.publish(CacheEvent.CLEANUP.value, removed)
        return removed

    def _evict_for_capacity(self) -> None:
        """Make room for one new key under the active strategy."""
        max_size = self._settings.max_size
        if max_size is None:
            return
        strategy: EvictionStrategy = self._settings.eviction_strategy
        # Normally a single pass; more only after max_size was lowered.
        while len(self._entries) >= max_size:
            victim = select_victim(strategy, self._entries, self._selectors)
            if victim is None or victim not in self._entries:
                LOGGER.warning(
                    "cache.eviction.selector_invalid",
                    extra={
                        "event": "cache.eviction.selector_invalid",
                        "strategy": strategy.value,
                        "victim": repr(victim),
                        "size": len(self._entries),
                        "max_size": max_size,
                    },
                )
                raise EvictionError(
                    f"{strategy.value} selector returned {victim!r}, which is not a stored key."
                )
            entry = self._entries.pop(victim)
            self._stats.evictions += 1
            self._channel.publish(CacheEvent.EVICTION.value, victim, strategy.value, entry.value)
