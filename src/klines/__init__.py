"""klines: trade-to-candle aggregation and kline storage.

Builds fixed-interval OHLCV candles from raw exchange trades, splits
historical ranges into request-sized windows, and persists candles
through pluggable storage backends.

Quick start::

    from klines import ONE_MIN, Asset, Pair, create_kline
    item = create_kline(trades, ONE_MIN, Pair("BTC", "USDT"), Asset.SPOT, "binance")
"""

from __future__ import annotations

import logging
import os

from klines.aggregate import create_kline
from klines.config import KlineConfig
from klines.csv_import import load_from_csv, load_item_from_csv
from klines.errors import (
    EmptyInputError,
    FormatError,
    InvalidIntervalError,
    KlineError,
    KlineErrorCode,
    StorageError,
    UnresolvedExchangeError,
    ValidationError,
)
from klines.interval import (
    EIGHT_HOUR,
    FIFTEEN_DAY,
    FIFTEEN_MIN,
    FIFTEEN_SECOND,
    FIVE_MIN,
    FOUR_HOUR,
    ONE_DAY,
    ONE_HOUR,
    ONE_MIN,
    ONE_MONTH,
    ONE_WEEK,
    ONE_YEAR,
    SIX_HOUR,
    SUPPORTED_INTERVALS,
    TEN_MIN,
    THIRTY_MIN,
    THREE_DAY,
    THREE_MIN,
    TWELVE_HOUR,
    TWO_HOUR,
    TWO_WEEK,
    Interval,
    duration_to_word,
)
from klines.manager import KlineManager
from klines.models import Asset, Candle, DateRange, Item, Pair, Trade
from klines.persistence import load_from_database, store_in_database
from klines.quality import validate_candles, validate_trades
from klines.ranges import calc_date_ranges, total_candles_per_interval
from klines.storage import CandleRow, CandleStorage, MemoryStorage, ParquetStorage, SQLiteStorage

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Manager
    "KlineManager",
    "create_manager_from_env",
    # Config
    "KlineConfig",
    # Errors
    "KlineError",
    "KlineErrorCode",
    "EmptyInputError",
    "ValidationError",
    "InvalidIntervalError",
    "UnresolvedExchangeError",
    "StorageError",
    "FormatError",
    # Intervals
    "Interval",
    "SUPPORTED_INTERVALS",
    "duration_to_word",
    "FIFTEEN_SECOND",
    "ONE_MIN",
    "THREE_MIN",
    "FIVE_MIN",
    "TEN_MIN",
    "FIFTEEN_MIN",
    "THIRTY_MIN",
    "ONE_HOUR",
    "TWO_HOUR",
    "FOUR_HOUR",
    "SIX_HOUR",
    "EIGHT_HOUR",
    "TWELVE_HOUR",
    "ONE_DAY",
    "THREE_DAY",
    "FIFTEEN_DAY",
    "ONE_WEEK",
    "TWO_WEEK",
    "ONE_MONTH",
    "ONE_YEAR",
    # Models
    "Asset",
    "Candle",
    "DateRange",
    "Item",
    "Pair",
    "Trade",
    # Operations
    "validate_trades",
    "validate_candles",
    "create_kline",
    "total_candles_per_interval",
    "calc_date_ranges",
    "store_in_database",
    "load_from_database",
    "load_from_csv",
    "load_item_from_csv",
    # Storage
    "CandleRow",
    "CandleStorage",
    "MemoryStorage",
    "SQLiteStorage",
    "ParquetStorage",
]


def create_manager_from_env() -> KlineManager:
    """Zero-config factory that reads storage settings from env vars.

    Sources are registered afterwards with ``KlineManager.add_source``.

    Environment variables:
        KLINES_STORAGE: Storage backend, one of "memory", "sqlite", "parquet", "none" (default: "memory").
        KLINES_STORAGE_PATH: Directory for sqlite/parquet files (default: "data/klines").
        KLINES_VALIDATE: Run quality checks before storing (default: "true").
        KLINES_REQUEST_LIMIT: Default max candles per request (default: 1000).
    """
    config = KlineConfig(
        storage_backend=os.getenv("KLINES_STORAGE", "memory"),
        storage_path=os.getenv("KLINES_STORAGE_PATH", "data/klines"),
        validate=os.getenv("KLINES_VALIDATE", "true").strip().lower() in ("1", "true", "yes"),
        default_request_limit=int(os.getenv("KLINES_REQUEST_LIMIT", "1000")),
    )
    return KlineManager(config)
