"""Kline item: the candles for one exchange/pair/asset/interval."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Iterable

import pandas as pd

from klines.errors import InvalidIntervalError
from klines.interval import Interval
from klines.models.candle import Candle
from klines.models.pair import Asset, Pair


@dataclass
class Item:
    """Ordered candle series for one market at one interval.

    The item owns ``candles``. It is mutated only through
    ``sort_candles_by_timestamp`` and ``append_candles``; duplicate
    timestamps from overlapping fetches are not removed here.
    """

    exchange: str
    pair: Pair
    asset: Asset
    interval: Interval
    candles: list[Candle] = field(default_factory=list)

    def sort_candles_by_timestamp(self, descending: bool = False) -> None:
        """Stable in-place sort by candle timestamp."""
        self.candles.sort(key=lambda c: c.timestamp, reverse=descending)

    def append_candles(self, candles: Iterable[Candle]) -> None:
        self.candles.extend(candles)

    def convert_to_interval(self, new_interval: Interval) -> Item:
        """Resample into a larger interval that is a whole multiple of this one.

        Returns a new item; this item's candles are left untouched.
        """
        current = self.interval.duration
        target = new_interval.duration
        if current <= timedelta(0) or target <= current or target % current:
            raise InvalidIntervalError(
                f"Cannot convert {self.interval} candles to {new_interval}",
                interval=new_interval,
                pair=self.pair,
            )

        out: list[Candle] = []
        bucket = None
        o = h = l = c = v = 0.0
        for candle in sorted(self.candles, key=lambda x: x.timestamp):
            start = new_interval.truncate(candle.timestamp)
            if start != bucket:
                if bucket is not None:
                    out.append(Candle(bucket, o, h, l, c, v))
                bucket = start
                o, h, l, c, v = candle.open, candle.high, candle.low, candle.close, 0.0
            h = max(h, candle.high)
            l = min(l, candle.low)
            c = candle.close
            v += candle.volume
        if bucket is not None:
            out.append(Candle(bucket, o, h, l, c, v))

        return Item(
            exchange=self.exchange,
            pair=self.pair,
            asset=self.asset,
            interval=new_interval,
            candles=out,
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Candles as a DataFrame with OHLCV columns."""
        columns = ["timestamp", "open", "high", "low", "close", "volume"]
        if not self.candles:
            return pd.DataFrame(columns=columns)
        records = [
            {
                "timestamp": c.timestamp,
                "open": c.open,
                "high": c.high,
                "low": c.low,
                "close": c.close,
                "volume": c.volume,
            }
            for c in self.candles
        ]
        return pd.DataFrame(records, columns=columns)
