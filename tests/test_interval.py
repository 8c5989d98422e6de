"""Tests for interval conversions."""

from datetime import datetime, timedelta, timezone

import pytest

from klines.errors import InvalidIntervalError
from klines.interval import (
    EIGHT_HOUR,
    FIFTEEN_DAY,
    FIFTEEN_MIN,
    FIFTEEN_SECOND,
    FIVE_MIN,
    FOUR_HOUR,
    ONE_DAY,
    ONE_HOUR,
    ONE_MIN,
    ONE_MONTH,
    ONE_WEEK,
    ONE_YEAR,
    SIX_HOUR,
    SUPPORTED_INTERVALS,
    TEN_MIN,
    THIRTY_MIN,
    THREE_DAY,
    THREE_MIN,
    TWELVE_HOUR,
    TWO_HOUR,
    TWO_WEEK,
    Interval,
    as_utc,
    duration_to_word,
    format_duration,
)

CANONICAL = [
    (FIFTEEN_SECOND, "fifteensecond", "15s"),
    (ONE_MIN, "onemin", "1m"),
    (THREE_MIN, "threemin", "3m"),
    (FIVE_MIN, "fivemin", "5m"),
    (TEN_MIN, "tenmin", "10m"),
    (FIFTEEN_MIN, "fifteenmin", "15m"),
    (THIRTY_MIN, "thirtymin", "30m"),
    (ONE_HOUR, "onehour", "1h"),
    (TWO_HOUR, "twohour", "2h"),
    (FOUR_HOUR, "fourhour", "4h"),
    (SIX_HOUR, "sixhour", "6h"),
    (ONE_HOUR * 8, "eighthour", "8h"),
    (TWELVE_HOUR, "twelvehour", "12h"),
    (ONE_DAY, "oneday", "24h"),
    (THREE_DAY, "threeday", "72h"),
    (FIFTEEN_DAY, "fifteenday", "360h"),
    (ONE_WEEK, "oneweek", "168h"),
    (TWO_WEEK, "twoweek", "336h"),
    (ONE_MONTH, "onemonth", "720h"),
    (ONE_YEAR, "oneyear", "8760h"),
]


class TestInterval:
    def test_duration(self):
        assert ONE_DAY.duration == timedelta(hours=24)
        assert ONE_MONTH.duration == timedelta(days=30)
        assert ONE_YEAR.duration == timedelta(days=365)

    def test_word_and_short(self):
        assert ONE_DAY.word() == "oneday"
        assert ONE_DAY.short() == "24h"
        assert str(ONE_DAY) == "24h"

    @pytest.mark.parametrize("interval,word,short", CANONICAL)
    def test_canonical_table(self, interval, word, short):
        assert duration_to_word(interval) == word
        assert interval.word() == word
        assert interval.short() == short

    def test_unrecognized_falls_back_to_duration_string(self):
        odd = Interval(timedelta(hours=1337))
        assert odd.word() == "1337h0m0s"
        assert odd.short() == "1337h"
        assert Interval(timedelta(minutes=90)).word() == "1h30m0s"
        assert Interval(timedelta(minutes=90)).short() == "1h30m"

    def test_twenty_supported(self):
        assert len(SUPPORTED_INTERVALS) == 20
        assert EIGHT_HOUR in SUPPORTED_INTERVALS

    def test_multiply(self):
        assert ONE_HOUR * 8 == EIGHT_HOUR
        assert 3 * ONE_MIN == THREE_MIN

    def test_seconds_roundtrip(self):
        assert ONE_DAY.seconds == 86400
        assert Interval.from_seconds(86400) == ONE_DAY

    def test_parse(self):
        assert Interval.parse("oneday") == ONE_DAY
        assert Interval.parse("24h") == ONE_DAY
        assert Interval.parse(" 1M ") == ONE_MIN
        assert Interval.parse("FifteenSecond") == FIFTEEN_SECOND
        with pytest.raises(InvalidIntervalError):
            Interval.parse("fortnightly")

    def test_truncate_aligns_to_epoch(self):
        ts = datetime(2024, 1, 15, 9, 31, 42, tzinfo=timezone.utc)
        assert FIVE_MIN.truncate(ts) == datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)
        assert ONE_DAY.truncate(ts) == datetime(2024, 1, 15, tzinfo=timezone.utc)

    def test_truncate_zero_interval(self):
        with pytest.raises(InvalidIntervalError):
            Interval(timedelta(0)).truncate(datetime(2024, 1, 15, tzinfo=timezone.utc))

    def test_multiply_rejects_bool(self):
        with pytest.raises(TypeError):
            ONE_MIN * True

    def test_hashable(self):
        assert len({ONE_MIN, Interval(timedelta(seconds=60))}) == 1


class TestFormatDuration:
    def test_values(self):
        assert format_duration(timedelta(0)) == "0s"
        assert format_duration(timedelta(seconds=15)) == "15s"
        assert format_duration(timedelta(seconds=1.5)) == "1.5s"
        assert format_duration(timedelta(milliseconds=500)) == "500ms"
        assert format_duration(timedelta(microseconds=1500)) == "1.5ms"
        assert format_duration(timedelta(microseconds=7)) == "7µs"
        assert format_duration(timedelta(hours=-2)) == "-2h0m0s"


def test_as_utc_naive_is_utc():
    naive = datetime(2024, 1, 1, 12, 0)
    assert as_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
