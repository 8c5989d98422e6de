"""Shared fixtures for klines tests."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure src/ is on the path for editable-style imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from klines.interval import ONE_DAY
from klines.models.candle import Candle
from klines.models.item import Item
from klines.models.pair import Asset, Pair
from klines.models.trade import Trade
from klines.storage import MemoryStorage


@pytest.fixture
def btc_usdt() -> Pair:
    return Pair("BTC", "USDT")


@pytest.fixture
def sample_trades() -> list[Trade]:
    """3 trades out of timestamp order, within one minute bucket each."""
    base = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)
    return [
        Trade(timestamp=base + timedelta(minutes=2), trade_id="2", amount=1.0, price=1000.0),
        Trade(timestamp=base + timedelta(minutes=1), trade_id="1", amount=1.0, price=1001.0),
        Trade(timestamp=base + timedelta(minutes=3), trade_id="3", amount=1.0, price=1001.5),
    ]


@pytest.fixture
def daily_item(btc_usdt) -> Item:
    """365 flat daily candles for 2019."""
    start = datetime(2019, 1, 1, tzinfo=timezone.utc)
    candles = [
        Candle(
            timestamp=start + timedelta(days=x),
            open=1000.0, high=1000.0, low=1000.0, close=1000.0, volume=1000.0,
        )
        for x in range(365)
    ]
    return Item(
        exchange="one",
        pair=btc_usdt,
        asset=Asset.SPOT,
        interval=ONE_DAY,
        candles=candles,
    )


@pytest.fixture
def memory_storage() -> MemoryStorage:
    storage = MemoryStorage()
    storage.add_exchange("one")
    return storage
