"""Tests for the millisecond clocks."""

from __future__ import annotations

import unittest

from expiring_cache.clock import ManualClock, MonotonicClock


class ClockTests(unittest.TestCase):
    """Validate clock monotonicity and manual stepping."""

    def test_monotonic_clock_never_goes_backwards(self) -> None:
        clock = MonotonicClock()
        first = clock.now()
        second = clock.now()
        self.assertGreaterEqual(second, first)

    def test_manual_clock_advances_only_on_request(self) -> None:
        clock = ManualClock(start=100)
        self.assertEqual(clock.now(), 100)
        self.assertEqual(clock.advance(50), 150)
        self.assertEqual(clock.now(), 150)

    def test_manual_clock_rejects_negative_steps(self) -> None:
        with self.assertRaises(ValueError):
            ManualClock().advance(-1)


if __name__ == "__main__":
    unittest.main()
