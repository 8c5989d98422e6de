"""Abstract base class for exchange candle sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from klines.interval import SUPPORTED_INTERVALS, Interval
from klines.models.candle import Candle
from klines.models.pair import Asset, Pair


class BaseKlineSource(ABC):
    """Abstract base for exchange adapters that serve historical candles.

    Subclasses implement ``get_candles`` for a single request window.
    ``max_candles_per_request`` is the exchange's cap on candles returned
    per call; ``None`` defers to the manager's configured default.
    """

    name: str = ""
    max_candles_per_request: int | None = None

    @abstractmethod
    def get_candles(
        self,
        pair: Pair,
        asset: Asset,
        interval: Interval,
        start: datetime,
        end: datetime,
    ) -> list[Candle]:
        """Fetch candles for one request window.

        Args:
            pair: Currency pair.
            asset: Asset class.
            interval: Candle interval.
            start: Window start (inclusive).
            end: Window end (inclusive).

        Returns:
            At most ``max_candles_per_request`` candles, ordered by timestamp.
        """
        ...

    def supports_interval(self, interval: Interval) -> bool:
        return interval in SUPPORTED_INTERVALS
