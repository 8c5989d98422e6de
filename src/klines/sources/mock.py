"""Mock candle source for testing and CI, no exchange access required."""

from __future__ import annotations

from datetime import datetime

from klines.interval import Interval, as_utc
from klines.models.candle import Candle
from klines.models.date_range import DateRange
from klines.models.pair import Asset, Pair
from klines.sources.base import BaseKlineSource


class MockSource(BaseKlineSource):
    """In-memory source returning preloaded or synthetic candles.

    Responses are truncated to ``max_candles_per_request`` the way a real
    exchange caps a page, and every requested window is recorded in
    ``requests``.
    """

    def __init__(self, name: str = "mock", max_candles_per_request: int | None = 500) -> None:
        self.name = name
        self.max_candles_per_request = max_candles_per_request
        self.requests: list[DateRange] = []
        self._candles: dict[tuple[Pair, Asset, Interval], list[Candle]] = {}

    def set_candles(self, pair: Pair, asset: Asset, interval: Interval, candles: list[Candle]) -> None:
        self._candles[(pair, asset, interval)] = sorted(candles, key=lambda c: c.timestamp)

    def get_candles(
        self,
        pair: Pair,
        asset: Asset,
        interval: Interval,
        start: datetime,
        end: datetime,
    ) -> list[Candle]:
        self.requests.append(DateRange(start=start, end=end))
        start, end = as_utc(start), as_utc(end)

        key = (pair, asset, interval)
        if key in self._candles:
            out = [c for c in self._candles[key] if start <= as_utc(c.timestamp) <= end]
        else:
            out = self._generate_candles(interval, start, end)

        if self.max_candles_per_request is not None:
            out = out[: self.max_candles_per_request]
        return out

    @staticmethod
    def _generate_candles(interval: Interval, start: datetime, end: datetime) -> list[Candle]:
        """One synthetic candle per aligned bucket in ``[start, end]``."""
        candles: list[Candle] = []
        ts = interval.truncate(start)
        if ts < start:
            ts += interval.duration
        i = 0
        while ts <= end:
            o = 100.0 + (i % 10) * 0.5
            candles.append(Candle(
                timestamp=ts,
                open=o,
                high=o + 1.0,
                low=o - 1.0,
                close=o + 0.25,
                volume=10.0 + i % 7,
            ))
            ts += interval.duration
            i += 1
        return candles
