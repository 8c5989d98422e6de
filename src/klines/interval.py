"""Candle intervals: canonical granularities and their string forms.

Month and year intervals are fixed 30-day and 365-day buckets, not
calendar-aware periods.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from klines.errors import InvalidIntervalError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_SECOND = timedelta(seconds=1)
_MICROSECOND = timedelta(microseconds=1)


def as_utc(ts: datetime) -> datetime:
    """Return ``ts`` as an aware UTC datetime (naive input is taken as UTC)."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


@dataclass(frozen=True, order=True)
class Interval:
    """Fixed duration of one candle bucket."""

    duration: timedelta

    def __mul__(self, factor: int) -> Interval:
        if not isinstance(factor, int) or isinstance(factor, bool):
            return NotImplemented
        return Interval(self.duration * factor)

    __rmul__ = __mul__

    def __str__(self) -> str:
        return self.short()

    @property
    def seconds(self) -> int:
        """Whole seconds in the interval, as stored in candle rows."""
        return self.duration // _SECOND

    def truncate(self, ts: datetime) -> datetime:
        """Start of the epoch-aligned bucket containing ``ts``."""
        if self.duration <= timedelta(0):
            raise InvalidIntervalError(
                f"Cannot truncate to non-positive interval {self.short()}", interval=self,
            )
        offset = as_utc(ts) - EPOCH
        return EPOCH + (offset // self.duration) * self.duration

    def word(self) -> str:
        """Lower-case canonical name, e.g. ``"oneday"``."""
        return duration_to_word(self)

    def short(self) -> str:
        """Compact duration string, e.g. ``"24h"`` or ``"15m"``."""
        s = format_duration(self.duration)
        if s.endswith("m0s"):
            s = s[:-2]
        if s.endswith("h0m"):
            s = s[:-2]
        return s

    @classmethod
    def from_seconds(cls, seconds: int) -> Interval:
        return cls(timedelta(seconds=seconds))

    @classmethod
    def parse(cls, text: str) -> Interval:
        """Parse a canonical word (``"onemin"``) or short form (``"1m"``)."""
        key = text.strip().lower()
        for interval, word in _WORDS:
            if key == word or key == interval.short():
                return interval
        raise InvalidIntervalError(f"Unsupported interval: {text!r}")


def format_duration(td: timedelta) -> str:
    """Render a duration as hours/minutes/seconds, e.g. ``"1h30m0s"``.

    Sub-second values use ``ms`` / ``µs`` units; zero renders as ``"0s"``.
    """
    us = td // _MICROSECOND
    if us == 0:
        return "0s"
    sign = "-" if us < 0 else ""
    us = abs(us)

    if us < 1_000_000:
        if us < 1000:
            return f"{sign}{us}µs"
        return f"{sign}{_with_fraction(us, 1000)}ms"

    hours, rem = divmod(us, 3_600_000_000)
    minutes, rem = divmod(rem, 60_000_000)
    seconds = _with_fraction(rem, 1_000_000)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def _with_fraction(value: int, unit: int) -> str:
    whole, frac = divmod(value, unit)
    if not frac:
        return str(whole)
    width = len(str(unit)) - 1
    return f"{whole}.{frac:0{width}d}".rstrip("0")


FIFTEEN_SECOND = Interval(timedelta(seconds=15))
ONE_MIN = Interval(timedelta(minutes=1))
THREE_MIN = ONE_MIN * 3
FIVE_MIN = ONE_MIN * 5
TEN_MIN = ONE_MIN * 10
FIFTEEN_MIN = ONE_MIN * 15
THIRTY_MIN = ONE_MIN * 30
ONE_HOUR = Interval(timedelta(hours=1))
TWO_HOUR = ONE_HOUR * 2
FOUR_HOUR = ONE_HOUR * 4
SIX_HOUR = ONE_HOUR * 6
EIGHT_HOUR = ONE_HOUR * 8
TWELVE_HOUR = ONE_HOUR * 12
ONE_DAY = ONE_HOUR * 24
THREE_DAY = ONE_DAY * 3
FIFTEEN_DAY = ONE_DAY * 15
ONE_WEEK = ONE_DAY * 7
TWO_WEEK = ONE_WEEK * 2
ONE_MONTH = ONE_DAY * 30
ONE_YEAR = ONE_DAY * 365

# Checked in order by exact equality.
_WORDS: tuple[tuple[Interval, str], ...] = (
    (FIFTEEN_SECOND, "fifteensecond"),
    (ONE_MIN, "onemin"),
    (THREE_MIN, "threemin"),
    (FIVE_MIN, "fivemin"),
    (TEN_MIN, "tenmin"),
    (FIFTEEN_MIN, "fifteenmin"),
    (THIRTY_MIN, "thirtymin"),
    (ONE_HOUR, "onehour"),
    (TWO_HOUR, "twohour"),
    (FOUR_HOUR, "fourhour"),
    (SIX_HOUR, "sixhour"),
    (EIGHT_HOUR, "eighthour"),
    (TWELVE_HOUR, "twelvehour"),
    (ONE_DAY, "oneday"),
    (THREE_DAY, "threeday"),
    (FIFTEEN_DAY, "fifteenday"),
    (ONE_WEEK, "oneweek"),
    (TWO_WEEK, "twoweek"),
    (ONE_MONTH, "onemonth"),
    (ONE_YEAR, "oneyear"),
)

SUPPORTED_INTERVALS: tuple[Interval, ...] = tuple(interval for interval, _ in _WORDS)


def duration_to_word(interval: Interval | timedelta) -> str:
    """Map an interval to its canonical word, or its raw duration string."""
    duration = interval.duration if isinstance(interval, Interval) else interval
    for candidate, word in _WORDS:
        if candidate.duration == duration:
            return word
    return format_duration(duration)
