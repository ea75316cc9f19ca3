"""Named-topic event channel for decoupled component communication.

Usage:
    channel = EventChannel()

    def on_set(key, value, ttl_ms):
        print(f"stored {key} for {ttl_ms}ms")

    unsubscribe = channel.subscribe("cache:set", on_set)
    channel.publish("cache:set", "user:1", {"id": 1}, 5000)
    unsubscribe()
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any

from ..exceptions import InvalidArgumentError

LOGGER = logging.getLogger(__name__)

Listener = Callable[..., Any]
Unsubscribe = Callable[[], None]


def _validate_subscription(event_name: Any, callback: Any) -> str:
    if not isinstance(event_name, str) or not event_name.strip():
        raise InvalidArgumentError("Event name must be a non-empty string.")
    if not callable(callback):
        raise InvalidArgumentError("Callback must be callable.")
    return event_name


class EventChannel:
    """Synchronous publish/subscribe registry keyed by event name.

    Listeners for one event run in subscription order. A listener that raises
    is logged and skipped; the publisher and the remaining listeners never see
    the error.
    """

    def __init__(self) -> None:
        # dict-as-ordered-set: a callable registers at most once per event.
        self._subscribers: dict[str, dict[Listener, None]] = {}

    def subscribe(self, event_name: str, callback: Listener) -> Unsubscribe:
        """Register ``callback`` for ``event_name``.

        Returns a zero-argument handle removing exactly this callback from
        exactly this event. Calling the handle more than once is harmless.
        """
        event_name = _validate_subscription(event_name, callback)
        self._subscribers.setdefault(event_name, {})[callback] = None
        LOGGER.debug(
            "event_channel.subscribed",
            extra={"event": "event_channel.subscribed", "event_name": event_name},
        )

        def unsubscribe() -> None:
            self.unsubscribe(event_name, callback)

        return unsubscribe

    def unsubscribe(self, event_name: str, callback: Listener) -> None:
        """Remove ``callback`` from ``event_name``; absent callbacks are ignored."""
        listeners = self._subscribers.get(event_name)
        if listeners is None or callback not in listeners:
            return
        del listeners[callback]
        if not listeners:
            del self._subscribers[event_name]
        LOGGER.debug(
            "event_channel.unsubscribed",
            extra={"event": "event_channel.unsubscribed", "event_name": event_name},
        )

    def subscribe_once(self, event_name: str, callback: Listener) -> Unsubscribe:
        """Register ``callback`` for a single delivery of ``event_name``."""
        event_name = _validate_subscription(event_name, callback)

        def once(*payload: Any) -> Any:
            # Detach before running so a failing callback is still removed.
            self.unsubscribe(event_name, once)
            return callback(*payload)

        return self.subscribe(event_name, once)

    def publish(self, event_name: str, *payload: Any) -> int:
        """Invoke every listener of ``event_name`` with ``payload``.

        Returns the number of listeners invoked.
        """
        if not isinstance(event_name, str):
            raise InvalidArgumentError("Event name must be a string.")

        listeners = list(self._subscribers.get(event_name, ()))
        for listener in listeners:
            try:
                listener(*payload)
            except Exception as exc:
                LOGGER.error(
                    "event_channel.listener.failed",
                    extra={
                        "event": "event_channel.listener.failed",
                        "event_name": event_name,
                        "listener": getattr(listener, "__qualname__", repr(listener)),
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                    exc_info=True,
                )
        return len(listeners)

    def listener_count(self, event_name: str) -> int:
        """Return how many listeners are registered for ``event_name``."""
        return len(self._subscribers.get(event_name, ()))

    def snapshot(self) -> dict[str, int]:
        """Return event name -> listener count, for debugging."""
        return {name: len(listeners) for name, listeners in self._subscribers.items()}

    def clear(self, event_name: str | None = None) -> None:
        """Clear subscribers.

        Args:
            event_name: Specific event to clear, or None for all
        """
        if event_name:
            self._subscribers.pop(event_name, None)
        else:
            self._subscribers.clear()
