"""Top-level package for expiring-cache."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .cache import CacheEntry, CacheLookup, CacheStatisticsSnapshot, ExpiringCache
    from .clock import ManualClock, MonotonicClock
    from .config import CacheSettings, load_config
    from .events import CacheEvent, EventChannel
    from .eviction import EvictionStrategy
    from .exceptions import (
        ConfigValidationError,
        EvictionError,
        ExpiringCacheError,
        InvalidArgumentError,
    )
    from .listeners import CacheEventLogger
    from .synchronized import SynchronizedCache

__all__ = [
    "CacheEntry",
    "CacheEvent",
    "CacheEventLogger",
    "CacheLookup",
    "CacheSettings",
    "CacheStatisticsSnapshot",
    "ConfigValidationError",
    "EventChannel",
    "EvictionError",
    "EvictionStrategy",
    "ExpiringCache",
    "ExpiringCacheError",
    "InvalidArgumentError",
    "ManualClock",
    "MonotonicClock",
    "SynchronizedCache",
    "load_config",
]

_EXPORTS = {
    "CacheEntry": ".cache",
    "CacheLookup": ".cache",
    "CacheStatisticsSnapshot": ".cache",
    "ExpiringCache": ".cache",
    "ManualClock": ".clock",
    "MonotonicClock": ".clock",
    "CacheSettings": ".config",
    "load_config": ".config",
    "CacheEvent": ".events",
    "EventChannel": ".events",
    "EvictionStrategy": ".eviction",
    "ConfigValidationError": ".exceptions",
    "EvictionError": ".exceptions",
    "ExpiringCacheError": ".exceptions",
    "InvalidArgumentError": ".exceptions",
    "CacheEventLogger": ".listeners",
    "SynchronizedCache": ".synchronized",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols so ``import expiring_cache`` stays cheap."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
