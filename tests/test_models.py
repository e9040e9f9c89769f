"""Tests for BackoffConfig and duration helpers."""

import dataclasses
import unittest
from datetime import timedelta

from backo.errors import InvalidConfiguration
from backo.models import MAX_DURATION_MS, BackoffConfig, to_millis


class TestBackoffConfig(unittest.TestCase):
    """Verify BackoffConfig defaults, validation and immutability."""

    def test_defaults(self):
        """Defaults are 100ms base, factor 2, no jitter, unbounded cap."""
        config = BackoffConfig()
        self.assertEqual(config.base, 100)
        self.assertEqual(config.factor, 2)
        self.assertEqual(config.jitter, 0)
        self.assertEqual(config.cap, MAX_DURATION_MS)

    def test_max_duration_is_signed_64_bit_limit(self):
        """The unbounded cap matches the largest signed 64-bit value."""
        self.assertEqual(MAX_DURATION_MS, 9_223_372_036_854_775_807)

    def test_cap_below_base_raises(self):
        """cap < base is rejected at construction."""
        with self.assertRaises(InvalidConfiguration) as ctx:
            BackoffConfig(base=1000, cap=500)
        self.assertIn("cannot be more than maximum", str(ctx.exception))

    def test_invalid_configuration_is_value_error(self):
        """Configuration errors can be caught as ValueError."""
        with self.assertRaises(ValueError):
            BackoffConfig(base=2, cap=1)

    def test_cap_equal_to_base_is_allowed(self):
        """A cap equal to base is valid."""
        config = BackoffConfig(base=500, cap=500)
        self.assertEqual(config.cap, 500)

    def test_config_is_immutable(self):
        """Frozen dataclass should raise on attribute assignment."""
        config = BackoffConfig()
        with self.assertRaises(AttributeError):
            config.base = 5

    def test_replace_is_validated(self):
        """dataclasses.replace re-runs the cap/base check."""
        config = BackoffConfig(base=100, cap=1000)
        with self.assertRaises(InvalidConfiguration):
            dataclasses.replace(config, base=2000)

    def test_timedelta_durations_are_normalised(self):
        """timedelta base and cap are stored as milliseconds."""
        config = BackoffConfig(base=timedelta(seconds=1), cap=timedelta(minutes=1))
        self.assertEqual(config.base, 1000)
        self.assertEqual(config.cap, 60_000)


class TestToMillis(unittest.TestCase):
    """Verify conversion of durations to whole milliseconds."""

    def test_int_passthrough(self):
        """Integers are already milliseconds."""
        self.assertEqual(to_millis(250), 250)

    def test_timedelta_conversion(self):
        """timedeltas are converted and truncated to whole milliseconds."""
        self.assertEqual(to_millis(timedelta(days=1)), 86_400_000)
        self.assertEqual(to_millis(timedelta(seconds=2, microseconds=1500)), 2001)
        self.assertEqual(to_millis(timedelta(microseconds=999)), 0)

    def test_negative_timedelta_truncates_toward_zero(self):
        """Negative sub-millisecond parts are dropped, not floored."""
        self.assertEqual(to_millis(timedelta(microseconds=-1)), 0)
        self.assertEqual(to_millis(timedelta(microseconds=-1500)), -1)
        self.assertEqual(to_millis(timedelta(seconds=-2)), -2000)

    def test_large_timedelta_is_exact(self):
        """Conversion does not lose precision on very long durations."""
        self.assertEqual(to_millis(timedelta(days=999_999_999, milliseconds=7)), 999_999_999 * 86_400_000 + 7)


if __name__ == "__main__":
    unittest.main()
