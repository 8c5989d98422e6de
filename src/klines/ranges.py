"""Candle counts and request-size-limited date windows."""

from __future__ import annotations

from datetime import datetime, timedelta

from klines.errors import InvalidIntervalError, KlineError, KlineErrorCode
from klines.interval import Interval, as_utc
from klines.models.date_range import DateRange


def total_candles_per_interval(start: datetime, end: datetime, interval: Interval) -> int:
    """Number of ``interval`` candles needed to cover ``[start, end)``.

    Computed as ``ceil((end - start) / interval)`` with integer microsecond
    arithmetic. Returns 0 when ``end <= start``.
    """
    if interval.duration <= timedelta(0):
        raise InvalidIntervalError(
            f"Invalid interval {interval.short()}", interval=interval,
        )
    span = as_utc(end) - as_utc(start)
    if span <= timedelta(0):
        return 0
    return -(-span // interval.duration)


def calc_date_ranges(
    start: datetime,
    end: datetime,
    interval: Interval,
    limit: int,
) -> list[DateRange]:
    """Split ``[start, end]`` into windows of at most ``limit`` candles.

    Exchanges cap the candles returned per historical request; callers
    issue one request per window and concatenate the results. Windows are
    contiguous (each ``start`` equals the previous ``end``) and the last
    window ends exactly at ``end``.
    """
    start, end = as_utc(start), as_utc(end)
    if limit <= 0:
        raise KlineError(
            f"Request limit must be positive, got {limit}",
            code=KlineErrorCode.INVALID_ARGUMENT,
            interval=interval,
        )
    if end < start:
        raise KlineError(
            f"Range end {end} is before start {start}",
            code=KlineErrorCode.INVALID_ARGUMENT,
            interval=interval,
        )

    if total_candles_per_interval(start, end, interval) <= limit:
        return [DateRange(start=start, end=end)]

    step = interval.duration * limit
    out: list[DateRange] = []
    current = start
    while current < end:
        window_end = min(current + step, end)
        out.append(DateRange(start=current, end=window_end))
        current = window_end
    return out
