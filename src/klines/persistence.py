"""Map kline items to and from a storage backend's row format."""

from __future__ import annotations

import logging
from datetime import datetime

from klines.errors import EmptyInputError, KlineError, StorageError, UnresolvedExchangeError, ValidationError
from klines.interval import Interval
from klines.models.candle import Candle
from klines.models.item import Item
from klines.models.pair import Asset, Pair
from klines.quality import validate_candles
from klines.storage import CandleRow, CandleStorage

logger = logging.getLogger(__name__)


def store_in_database(item: Item, storage: CandleStorage, validate: bool = False) -> int:
    """Upsert every candle of ``item`` in one batch; return rows written.

    Atomicity is the storage backend's: on failure no partial write is
    promised to be visible.

    Raises:
        EmptyInputError: The item has no candles.
        ValidationError: ``validate`` is set and the candles fail quality checks.
        UnresolvedExchangeError: The exchange is not registered in storage.
        StorageError: The backend failed.
    """
    if not item.candles:
        raise EmptyInputError(
            f"No candles to store for {item.exchange} {item.pair}",
            interval=item.interval,
            pair=item.pair,
        )

    if validate:
        result = validate_candles(item.candles)
        if not result.passed:
            msgs = "; ".join(c.message for c in result.failed_checks)
            logger.warning("Refusing to store %s %s: %s", item.exchange, item.pair, msgs)
            raise ValidationError(
                f"Validation failed: {msgs}", interval=item.interval, pair=item.pair,
            )

    try:
        exchange_id = storage.resolve_exchange_id(item.exchange)
        if exchange_id is None:
            raise UnresolvedExchangeError(item.exchange, interval=item.interval, pair=item.pair)

        rows = [
            CandleRow(
                exchange_id=exchange_id,
                base=item.pair.base,
                quote=item.pair.quote,
                asset=item.asset.value,
                interval_seconds=item.interval.seconds,
                timestamp=c.timestamp,
                open=c.open,
                high=c.high,
                low=c.low,
                close=c.close,
                volume=c.volume,
            )
            for c in item.candles
        ]
        written = storage.insert_candles(rows)
    except KlineError:
        raise
    except Exception as exc:
        raise StorageError(
            f"Storing candles for {item.exchange} {item.pair} failed: {exc}",
            interval=item.interval,
            pair=item.pair,
        ) from exc

    logger.info(
        "Stored %d %s candles for %s %s %s",
        written, item.interval.short(), item.exchange, item.pair, item.asset.value,
    )
    return written


def load_from_database(
    storage: CandleStorage,
    exchange: str,
    pair: Pair,
    asset: Asset,
    interval: Interval,
    start: datetime,
    end: datetime,
) -> Item:
    """Load candles within ``[start, end]`` (inclusive), ascending.

    An empty result is not an error; an unknown exchange is.
    """
    try:
        exchange_id = storage.resolve_exchange_id(exchange)
        if exchange_id is None:
            raise UnresolvedExchangeError(exchange, interval=interval, pair=pair)
        rows = storage.query_candles(
            exchange_id, pair.base, pair.quote, asset.value, interval.seconds, start, end,
        )
    except KlineError:
        raise
    except Exception as exc:
        raise StorageError(
            f"Loading candles for {exchange} {pair} failed: {exc}",
            interval=interval,
            pair=pair,
        ) from exc

    item = Item(
        exchange=exchange,
        pair=pair,
        asset=asset,
        interval=interval,
        candles=[
            Candle(
                timestamp=r.timestamp,
                open=r.open,
                high=r.high,
                low=r.low,
                close=r.close,
                volume=r.volume,
            )
            for r in rows
        ],
    )
    item.sort_candles_by_timestamp()
    logger.debug("Loaded %d candles for %s %s %s", len(item.candles), exchange, pair, interval.short())
    return item
