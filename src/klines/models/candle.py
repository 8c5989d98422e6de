"""Candle (OHLCV) data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Candle:
    """Single OHLCV candle.

    Attributes:
        timestamp: Bucket start (UTC).
        open: First trade price in the bucket.
        high: Highest trade price.
        low: Lowest trade price.
        close: Last trade price.
        volume: Sum of traded amounts.
    """

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float
