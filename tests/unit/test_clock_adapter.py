from datetime import UTC, datetime, timedelta

from firmsite.adapters.clock import FixedClock, SystemClock


def test_system_clock_is_utc_aware():
    now = SystemClock().now_utc()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)


def test_fixed_clock_advances():
    clock = FixedClock(datetime(2025, 1, 1, 0, 0))
    assert clock.now_utc() == datetime(2025, 1, 1, tzinfo=UTC)
    clock.advance(hours=24, minutes=1)
    assert clock.now_utc() == datetime(2025, 1, 2, 0, 1, tzinfo=UTC)
