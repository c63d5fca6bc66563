from datetime import datetime

import pytest

from restaurant_pos.utils.dates import local_day_range, parse_day


def test_utc_day_without_offset():
    start, end = local_day_range("2026-03-10")
    assert start == datetime(2026, 3, 10, 0, 0)
    assert end == datetime(2026, 3, 11, 0, 0)


def test_zone_behind_utc():
    # UTC-5: local midnight is 05:00 UTC
    start, end = local_day_range("2026-03-10", 300)
    assert start == datetime(2026, 3, 10, 5, 0)
    assert end == datetime(2026, 3, 11, 5, 0)


def test_zone_ahead_of_utc():
    # UTC+2: local midnight is 22:00 UTC the day before
    start, end = local_day_range("2026-03-10", -120)
    assert start == datetime(2026, 3, 9, 22, 0)
    assert end == datetime(2026, 3, 10, 22, 0)


@pytest.mark.parametrize("value", ["", "10/03/2026", "2026-3-10", "yesterday"])
def test_bad_day_format(value):
    with pytest.raises(ValueError):
        parse_day(value)
