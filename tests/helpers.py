"""Timestamp helpers for tests."""

from datetime import datetime, timezone


def utc_millis(year: int, month: int, day: int, hour: int = 12) -> int:
    """Epoch milliseconds for a UTC wall-clock time."""
    return int(datetime(year, month, day, hour, tzinfo=timezone.utc).timestamp() * 1000)


# 10000-01-01T00:00:00Z, one millisecond past datetime's range.
YEAR_10000_MILLIS = 253_402_300_800_000

# 0000-12-31T00:00:00Z, the day before datetime's earliest date.
YEAR_ZERO_MILLIS = -62_135_683_200_000
