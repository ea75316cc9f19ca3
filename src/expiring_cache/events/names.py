from __future__ import annotations

from enum import Enum

EXPIRED_REASON = "TTL_EXPIRED"


class CacheEvent(str, Enum):
    """Lifecycle events published by ``ExpiringCache``."""

    SET = "cache:set"  # (key, value, ttl_ms)
    HIT = "cache:hit"  # (key, value)
    MISS = "cache:miss"  # (key,)
    DELETE = "cache:delete"  # (key, value)
    CLEAR = "cache:clear"  # (previous_size,)
    EVICTION = "cache:eviction"  # (key, reason, value)
    CLEANUP = "cache:cleanup"  # (removed_count,)
