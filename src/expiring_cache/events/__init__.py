"""Event channel used by the cache to announce lifecycle changes."""

from .bus import EventChannel
from .names import EXPIRED_REASON, CacheEvent

__all__ = ["CacheEvent", "EXPIRED_REASON", "EventChannel"]
