"""Tests for the named-topic event channel."""

from __future__ import annotations

import unittest

from expiring_cache.events import EventChannel
from expiring_cache.exceptions import InvalidArgumentError


class SubscribeTests(unittest.TestCase):
    """Validate registration, validation and unsubscribe handles."""

    def test_subscribe_rejects_empty_event_name(self) -> None:
        channel = EventChannel()
        with self.assertRaises(InvalidArgumentError):
            channel.subscribe("", lambda: None)
        with self.assertRaises(InvalidArgumentError):
            channel.subscribe("   ", lambda: None)

    def test_subscribe_rejects_non_callable(self) -> None:
        channel = EventChannel()
        with self.assertRaises(InvalidArgumentError):
            channel.subscribe("cache:set", "not-callable")  # type: ignore[arg-type]

    def test_invalid_argument_is_also_value_error(self) -> None:
        channel = EventChannel()
        with self.assertRaises(ValueError):
            channel.subscribe("", lambda: None)

    def test_handle_removes_only_its_callback(self) -> None:
        channel = EventChannel()
        calls: list[str] = []

        def first(*_: object) -> None:
            calls.append("first")

        def second(*_: object) -> None:
            calls.append("second")

        remove_first = channel.subscribe("topic", first)
        channel.subscribe("topic", second)
        channel.subscribe("other", first)

        remove_first()
        channel.publish("topic")
        channel.publish("other")

        self.assertEqual(calls, ["second", "first"])
        remove_first()  # second call is harmless
        self.assertEqual(channel.snapshot(), {"topic": 1, "other": 1})

    def test_same_callback_registers_once_per_event(self) -> None:
        channel = EventChannel()
        calls: list[int] = []

        def listener(value: int) -> None:
            calls.append(value)

        channel.subscribe("topic", listener)
        channel.subscribe("topic", listener)
        channel.publish("topic", 1)

        self.assertEqual(calls, [1])
        self.assertEqual(channel.listener_count("topic"), 1)

    def test_unsubscribe_absent_callback_is_noop(self) -> None:
        channel = EventChannel()
        channel.unsubscribe("missing", print)
        channel.subscribe("topic", print)
        channel.unsubscribe("topic", len)
        self.assertEqual(channel.snapshot(), {"topic": 1})

    def test_unsubscribe_prunes_empty_events(self) -> None:
        channel = EventChannel()
        remove = channel.subscribe("topic", print)
        remove()
        self.assertEqual(channel.snapshot(), {})


class PublishTests(unittest.TestCase):
    """Validate delivery order, payload forwarding and failure isolation."""

    def test_publish_requires_string_event_name(self) -> None:
        channel = EventChannel()
        with self.assertRaises(InvalidArgumentError):
            channel.publish(42)  # type: ignore[arg-type]

    def test_publish_without_listeners_returns_zero(self) -> None:
        self.assertEqual(EventChannel().publish("nobody"), 0)

    def test_listeners_run_in_subscription_order_with_payload(self) -> None:
        channel = EventChannel()
        seen: list[tuple[str, tuple[object, ...]]] = []
        channel.subscribe("cache:set", lambda *p: seen.append(("a", p)))
        channel.subscribe("cache:set", lambda *p: seen.append(("b", p)))

        invoked = channel.publish("cache:set", "k", "v", 100)

        self.assertEqual(invoked, 2)
        self.assertEqual(seen, [("a", ("k", "v", 100)), ("b", ("k", "v", 100))])

    def test_failing_listener_is_logged_and_does_not_stop_others(self) -> None:
        channel = EventChannel()
        calls: list[str] = []

        def broken(*_: object) -> None:
            raise RuntimeError("boom")

        channel.subscribe("topic", broken)
        channel.subscribe("topic", lambda *_: calls.append("after"))

        with self.assertLogs("expiring_cache.events.bus", level="ERROR") as logs:
            channel.publish("topic", 1)

        self.assertEqual(calls, ["after"])
        self.assertTrue(
            any("event_channel.listener.failed" in line for line in logs.output)
        )

    def test_listener_may_unsubscribe_during_publish(self) -> None:
        channel = EventChannel()
        calls: list[str] = []
        handles: dict[str, object] = {}

        def first() -> None:
            calls.append("first")
            handles["second"]()  # type: ignore[operator]

        def second() -> None:
            calls.append("second")

        channel.subscribe("topic", first)
        handles["second"] = channel.subscribe("topic", second)

        channel.publish("topic")
        channel.publish("topic")

        # The snapshot taken for the first publish still includes ``second``.
        self.assertEqual(calls, ["first", "second", "first"])


class SubscribeOnceTests(unittest.TestCase):
    """Validate single-delivery subscriptions."""

    def test_once_fires_a_single_time(self) -> None:
        channel = EventChannel()
        calls: list[object] = []
        channel.subscribe_once("topic", calls.append)

        channel.publish("topic", 1)
        channel.publish("topic", 2)

        self.assertEqual(calls, [1])
        self.assertEqual(channel.snapshot(), {})

    def test_once_unsubscribes_even_when_callback_raises(self) -> None:
        channel = EventChannel()
        attempts: list[int] = []

        def broken(value: int) -> None:
            attempts.append(value)
            raise ValueError("first delivery fails")

        channel.subscribe_once("topic", broken)
        with self.assertLogs("expiring_cache.events.bus", level="ERROR"):
            channel.publish("topic", 1)
        channel.publish("topic", 2)

        self.assertEqual(attempts, [1])
        self.assertEqual(channel.listener_count("topic"), 0)

    def test_once_handle_cancels_before_delivery(self) -> None:
        channel = EventChannel()
        calls: list[object] = []
        cancel = channel.subscribe_once("topic", calls.append)
        cancel()
        channel.publish("topic", 1)
        self.assertEqual(calls, [])

    def test_once_validates_arguments(self) -> None:
        channel = EventChannel()
        with self.assertRaises(InvalidArgumentError):
            channel.subscribe_once("", print)
        with self.assertRaises(InvalidArgumentError):
            channel.subscribe_once("topic", None)  # type: ignore[arg-type]


class ClearTests(unittest.TestCase):
    """Validate bulk removal."""

    def test_clear_all(self) -> None:
        channel = EventChannel()
        channel.subscribe("a", print)
        channel.subscribe("b", print)
        channel.clear()
        self.assertEqual(channel.snapshot(), {})

    def test_clear_single_event(self) -> None:
        channel = EventChannel()
        channel.subscribe("a", print)
        channel.subscribe("b", print)
        channel.clear("a")
        self.assertEqual(channel.snapshot(), {"b": 1})


if __name__ == "__main__":
    unittest.main()
