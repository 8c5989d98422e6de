"""Build OHLCV candles from raw trades."""

from __future__ import annotations

import logging
from datetime import timedelta

from klines.errors import InvalidIntervalError
from klines.interval import Interval, as_utc
from klines.models.candle import Candle
from klines.models.item import Item
from klines.models.pair import Asset, Pair
from klines.models.trade import Trade
from klines.quality import validate_trades

logger = logging.getLogger(__name__)


def create_kline(
    trades: list[Trade] | None,
    interval: Interval,
    pair: Pair,
    asset: Asset,
    exchange: str,
    copy: bool = False,
) -> Item:
    """Aggregate trades into epoch-aligned candles of ``interval``.

    Trades are validated and sorted first (in place unless ``copy`` is
    set, see ``validate_trades``). Buckets without trades produce no
    candle.

    Raises:
        InvalidIntervalError: ``interval`` is zero or negative.
        EmptyInputError, ValidationError: from trade validation.
    """
    if interval.duration <= timedelta(0):
        raise InvalidIntervalError(
            f"Invalid interval {interval.short()} for {pair}",
            interval=interval,
            pair=pair,
        )

    trades = validate_trades(trades, copy=copy)

    candles: list[Candle] = []
    bucket = None
    o = h = l = c = v = 0.0
    for t in trades:
        start = interval.truncate(as_utc(t.timestamp))  # type: ignore[arg-type]
        if start != bucket:
            if bucket is not None:
                candles.append(Candle(bucket, o, h, l, c, v))
            bucket = start
            o = h = l = c = t.price
            v = 0.0
        else:
            h = max(h, t.price)
            l = min(l, t.price)
            c = t.price
        v += t.amount
    candles.append(Candle(bucket, o, h, l, c, v))  # type: ignore[arg-type]

    logger.debug(
        "Aggregated %d trades into %d %s candles for %s %s %s",
        len(trades), len(candles), interval.short(), exchange, pair, asset.value,
    )
    return Item(
        exchange=exchange,
        pair=pair,
        asset=asset,
        interval=interval,
        candles=candles,
    )
