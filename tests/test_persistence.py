"""Tests for storing and loading kline items."""

from datetime import datetime, timedelta, timezone

import pytest

from klines.errors import (
    EmptyInputError,
    KlineErrorCode,
    StorageError,
    UnresolvedExchangeError,
    ValidationError,
)
from klines.interval import ONE_DAY, ONE_HOUR, ONE_WEEK, Interval
from klines.models.candle import Candle
from klines.models.item import Item
from klines.models.pair import Asset, Pair
from klines.persistence import load_from_database, store_in_database
from klines.storage import MemoryStorage, ParquetStorage, SQLiteStorage

START = datetime(2019, 1, 1, tzinfo=timezone.utc)
END = datetime(2020, 1, 1, tzinfo=timezone.utc)


class _BrokenStorage(MemoryStorage):
    def insert_candles(self, rows):
        raise OSError("disk full")


@pytest.fixture(params=["memory", "sqlite", "parquet"])
def seeded_storage(request, tmp_path):
    if request.param == "memory":
        storage = MemoryStorage()
    elif request.param == "sqlite":
        storage = SQLiteStorage(tmp_path / "klines.db")
    else:
        storage = ParquetStorage(tmp_path / "parquet")
    storage.add_exchange("one")
    return storage


class TestStoreInDatabase:
    def test_store(self, seeded_storage, daily_item):
        assert store_in_database(daily_item, seeded_storage) == 365

    def test_store_twice_upserts(self, seeded_storage, daily_item):
        store_in_database(daily_item, seeded_storage)
        store_in_database(daily_item, seeded_storage)
        loaded = load_from_database(
            seeded_storage, "one", daily_item.pair, Asset.SPOT, ONE_DAY, START, END,
        )
        assert len(loaded.candles) == 365

    def test_unknown_exchange(self, daily_item):
        with pytest.raises(UnresolvedExchangeError) as exc:
            store_in_database(daily_item, MemoryStorage())
        assert exc.value.pair == daily_item.pair
        assert exc.value.interval == ONE_DAY

    def test_empty_item(self, memory_storage, btc_usdt):
        item = Item(exchange="one", pair=btc_usdt, asset=Asset.SPOT, interval=ONE_DAY)
        with pytest.raises(EmptyInputError):
            store_in_database(item, memory_storage)

    def test_storage_failure_wrapped(self, daily_item):
        storage = _BrokenStorage()
        storage.add_exchange("one")
        with pytest.raises(StorageError) as exc:
            store_in_database(daily_item, storage)
        assert exc.value.code is KlineErrorCode.STORAGE_ERROR
        assert exc.value.retryable
        assert isinstance(exc.value.__cause__, OSError)

    def test_validation_gate(self, memory_storage, btc_usdt):
        item = Item(
            exchange="one", pair=btc_usdt, asset=Asset.SPOT, interval=ONE_DAY,
            candles=[Candle(START, open=10, high=5, low=20, close=10, volume=1)],
        )
        with pytest.raises(ValidationError):
            store_in_database(item, memory_storage, validate=True)
        assert store_in_database(item, memory_storage) == 1

    def test_validation_gate_accepts_week_aligned_candles(self, memory_storage, btc_usdt):
        monday = datetime(2019, 1, 7, tzinfo=timezone.utc)
        item = Item(
            exchange="one", pair=btc_usdt, asset=Asset.SPOT, interval=ONE_WEEK,
            candles=[
                Candle(monday + i * ONE_WEEK.duration, open=10, high=12, low=9, close=11, volume=1)
                for i in range(4)
            ],
        )
        assert store_in_database(item, memory_storage, validate=True) == 4

    def test_validation_gate_zero_interval(self, memory_storage, btc_usdt):
        item = Item(
            exchange="one", pair=btc_usdt, asset=Asset.SPOT, interval=Interval(timedelta(0)),
            candles=[Candle(START, open=10, high=12, low=9, close=11, volume=1)],
        )
        assert store_in_database(item, memory_storage, validate=True) == 1


class TestLoadFromDatabase:
    def test_round_trip(self, seeded_storage, daily_item):
        store_in_database(daily_item, seeded_storage)
        loaded = load_from_database(
            seeded_storage, "one", Pair.from_string("BTCUSDT"), Asset.SPOT, ONE_DAY, START, END,
        )
        assert loaded.exchange == "one"
        assert loaded.interval == ONE_DAY
        assert len(loaded.candles) == len(daily_item.candles)
        for got, want in zip(loaded.candles, daily_item.candles):
            assert got.timestamp == want.timestamp
            assert (got.open, got.high, got.low, got.close, got.volume) == (
                want.open, want.high, want.low, want.close, want.volume,
            )

    def test_sorted_ascending(self, seeded_storage, daily_item):
        daily_item.sort_candles_by_timestamp(descending=True)
        store_in_database(daily_item, seeded_storage)
        loaded = load_from_database(
            seeded_storage, "one", daily_item.pair, Asset.SPOT, ONE_DAY, START, END,
        )
        assert loaded.candles[0].timestamp == START
        assert all(a.timestamp < b.timestamp for a, b in zip(loaded.candles, loaded.candles[1:]))

    def test_other_interval_is_empty(self, seeded_storage, daily_item):
        store_in_database(daily_item, seeded_storage)
        loaded = load_from_database(
            seeded_storage, "one", daily_item.pair, Asset.SPOT, ONE_HOUR, START, END,
        )
        assert loaded.candles == []

    def test_unknown_exchange(self, seeded_storage, btc_usdt):
        with pytest.raises(UnresolvedExchangeError):
            load_from_database(seeded_storage, "two", btc_usdt, Asset.SPOT, ONE_DAY, START, END)
