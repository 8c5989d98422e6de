"""KlineManager: central orchestrator with storage + paginated source fetch."""

from __future__ import annotations

import logging
from datetime import datetime

from klines.aggregate import create_kline
from klines.config import KlineConfig
from klines.errors import KlineError, KlineErrorCode, UnresolvedExchangeError
from klines.interval import Interval, as_utc
from klines.models.candle import Candle
from klines.models.item import Item
from klines.models.pair import Asset, Pair
from klines.models.trade import Trade
from klines.persistence import load_from_database, store_in_database
from klines.ranges import calc_date_ranges, total_candles_per_interval
from klines.sources.base import BaseKlineSource
from klines.storage import CandleStorage, create_storage

logger = logging.getLogger(__name__)


class KlineManager:
    """Central orchestrator: storage -> paginated source fetch -> merge -> validate -> store.

    Usage::

        mgr = KlineManager(KlineConfig(storage_backend="sqlite"), sources=[binance])
        item = mgr.get_klines("binance", Pair("BTC", "USDT"), Asset.SPOT,
                              ONE_HOUR, start, end)
    """

    def __init__(
        self,
        config: KlineConfig,
        sources: list[BaseKlineSource] | None = None,
        storage: CandleStorage | None = None,
    ) -> None:
        self.config = config
        self.sources: dict[str, BaseKlineSource] = {}
        for source in sources or []:
            self.add_source(source)
        self.storage = storage if storage is not None else create_storage(config)

    def add_source(self, source: BaseKlineSource) -> None:
        self.sources[source.name.lower()] = source

    # -------------------------------------------------------------- candles

    def get_klines(
        self,
        exchange: str,
        pair: Pair,
        asset: Asset,
        interval: Interval,
        start: datetime,
        end: datetime,
    ) -> Item:
        """Get candles for ``[start, end]``: storage, else one fetch per window.

        Storage counts as a hit only when it already holds every candle
        the range needs. Fetched windows are concatenated, sorted, and
        stripped of duplicate boundary candles before being stored.
        """
        start, end = as_utc(start), as_utc(end)
        expected = total_candles_per_interval(start, end, interval)

        # 1. Storage hit?
        if self.storage is not None and expected > 0:
            try:
                stored = load_from_database(self.storage, exchange, pair, asset, interval, start, end)
            except UnresolvedExchangeError:
                stored = None
            if stored is not None and len(stored.candles) >= expected:
                logger.debug("Storage hit for %s %s %s", exchange, pair, interval.short())
                return stored

        # 2. Paginated fetch
        source = self._source(exchange)
        if not source.supports_interval(interval):
            raise KlineError(
                f"{source.name} does not support {interval.short()} candles",
                code=KlineErrorCode.NOT_SUPPORTED,
                interval=interval,
                pair=pair,
            )
        limit = source.max_candles_per_request or self.config.default_request_limit
        windows = calc_date_ranges(start, end, interval, limit)
        logger.info(
            "Fetching %s %s %s from %s in %d request(s)",
            pair, asset.value, interval.short(), source.name, len(windows),
        )

        fetched = Item(exchange=exchange, pair=pair, asset=asset, interval=interval)
        for window in windows:
            fetched.append_candles(
                source.get_candles(pair, asset, interval, window.start, window.end)
            )
        fetched.sort_candles_by_timestamp()

        item = Item(
            exchange=exchange,
            pair=pair,
            asset=asset,
            interval=interval,
            candles=_drop_duplicate_timestamps(fetched.candles),
        )

        # 3. Validate and store
        if self.storage is not None and item.candles:
            self.storage.add_exchange(exchange)
            store_in_database(item, self.storage, validate=self.config.validate)
        return item

    def build_from_trades(
        self,
        exchange: str,
        pair: Pair,
        asset: Asset,
        interval: Interval,
        trades: list[Trade],
        store: bool = True,
        copy: bool = False,
    ) -> Item:
        """Aggregate trades into candles and optionally store them."""
        item = create_kline(trades, interval, pair, asset, exchange, copy=copy)
        if store and self.storage is not None:
            self.storage.add_exchange(exchange)
            store_in_database(item, self.storage, validate=self.config.validate)
        return item

    # ------------------------------------------------------------ internal

    def _source(self, exchange: str) -> BaseKlineSource:
        try:
            return self.sources[exchange.lower()]
        except KeyError:
            raise KlineError(
                f"No candle source registered for {exchange!r}",
                code=KlineErrorCode.NOT_SUPPORTED,
            ) from None


def _drop_duplicate_timestamps(candles: list[Candle]) -> list[Candle]:
    """Keep the first candle of each timestamp in an ascending series."""
    out: list[Candle] = []
    for c in candles:
        if out and out[-1].timestamp == c.timestamp:
            continue
        out.append(c)
    return out
