"""Kline data models."""

from klines.models.candle import Candle
from klines.models.date_range import DateRange
from klines.models.item import Item
from klines.models.pair import Asset, Pair
from klines.models.trade import Trade

__all__ = [
    "Asset",
    "Candle",
    "DateRange",
    "Item",
    "Pair",
    "Trade",
]
