"""Exchange candle sources."""

from __future__ import annotations

from klines.sources.base import BaseKlineSource
from klines.sources.mock import MockSource

__all__ = ["BaseKlineSource", "MockSource"]
