"""Log listeners wired onto a cache's event channel."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any

from .events import CacheEvent, EventChannel

LOGGER = logging.getLogger(__name__)


class CacheEventLogger:
    """Subscribe one log listener per cache lifecycle event.

    Hits, misses, sets and deletes log at DEBUG; evictions, cleanups and
    clears log at INFO since they change what the cache holds without the
    caller asking for that specific key.
    """

    def __init__(self, channel: EventChannel, logger: logging.Logger | None = None) -> None:
        self._channel = channel
        self._logger = logger or LOGGER
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def attached(self) -> bool:
        return bool(self._unsubscribers)

    def attach(self) -> None:
        """Subscribe the log listeners; a second call is a no-op."""
        if self._unsubscribers:
            return
        handlers: dict[CacheEvent, Callable[..., None]] = {
            CacheEvent.HIT: self._on_hit,
            CacheEvent.MISS: self._on_miss,
            CacheEvent.SET: self._on_set,
            CacheEvent.DELETE: self._on_delete,
            CacheEvent.EVICTION: self._on_eviction,
            CacheEvent.CLEAR: self._on_clear,
            CacheEvent.CLEANUP: self._on_cleanup,
        }
        for event, handler in handlers.items():
            self._unsubscribers.append(self._channel.subscribe(event.value, handler))
        self._logger.debug(
            "cache.listeners.attached", extra={"event": "cache.listeners.attached"}
        )

    def detach(self) -> None:
        """Remove every listener installed by ``attach``."""
        while self._unsubscribers:
            self._unsubscribers.pop()()

    def on(self, event: CacheEvent | str, callback: Callable[..., Any]) -> Callable[[], None]:
        """Register a custom listener on the underlying channel."""
        return self._channel.subscribe(_event_name(event), callback)

    def off(self, event: CacheEvent | str, callback: Callable[..., Any]) -> None:
        self._channel.unsubscribe(_event_name(event), callback)

    def _on_hit(self, key: str, value: Any) -> None:
        self._logger.debug("cache.hit", extra={"event": "cache.hit", "key": key})

    def _on_miss(self, key: str) -> None:
        self._logger.debug("cache.miss", extra={"event": "cache.miss", "key": key})

    def _on_set(self, key: str, value: Any, ttl_ms: float) -> None:
        self._logger.debug(
            "cache.set", extra={"event": "cache.set", "key": key, "ttl_ms": ttl_ms}
        )

    def _on_delete(self, key: str, value: Any) -> None:
        self._logger.debug("cache.delete", extra={"event": "cache.delete", "key": key})

    def _on_eviction(self, key: str, reason: str, value: Any) -> None:
        self._logger.info(
            "cache.eviction",
            extra={"event": "cache.eviction", "key": key, "reason": reason},
        )

    def _on_clear(self, previous_size: int) -> None:
        self._logger.info(
            "cache.clear", extra={"event": "cache.clear", "previous_size": previous_size}
        )

    def _on_cleanup(self, removed: int) -> None:
        self._logger.info(
            "cache.cleanup", extra={"event": "cache.cleanup", "removed": removed}
        )


def _event_name(event: CacheEvent | str) -> str:
    return event.value if isinstance(event, CacheEvent) else event
