"""Tests for MockSource."""

from datetime import datetime, timedelta, timezone

from klines.interval import FIFTEEN_DAY, ONE_HOUR, ONE_MIN
from klines.models.candle import Candle
from klines.models.pair import Asset, Pair
from klines.sources.mock import MockSource

START = datetime(2024, 1, 1, tzinfo=timezone.utc)
PAIR = Pair("ETH", "USDT")


class TestMockSource:
    def test_synthetic_candles_aligned(self):
        source = MockSource(max_candles_per_request=None)
        candles = source.get_candles(
            PAIR, Asset.SPOT, ONE_HOUR, START + timedelta(minutes=10), START + timedelta(hours=3),
        )
        assert [c.timestamp for c in candles] == [START + timedelta(hours=h) for h in (1, 2, 3)]

    def test_truncated_to_limit(self):
        source = MockSource(max_candles_per_request=5)
        candles = source.get_candles(PAIR, Asset.SPOT, ONE_MIN, START, START + timedelta(hours=1))
        assert len(candles) == 5
        assert candles[0].timestamp == START

    def test_preloaded(self):
        source = MockSource()
        preset = [
            Candle(START + timedelta(hours=h), open=1, high=2, low=0.5, close=1.5, volume=3)
            for h in (5, 1, 3)
        ]
        source.set_candles(PAIR, Asset.SPOT, ONE_HOUR, preset)
        candles = source.get_candles(PAIR, Asset.SPOT, ONE_HOUR, START, START + timedelta(hours=3))
        assert [c.timestamp.hour for c in candles] == [1, 3]

    def test_records_requests(self):
        source = MockSource()
        source.get_candles(PAIR, Asset.SPOT, ONE_MIN, START, START + timedelta(minutes=1))
        assert source.requests[0].start == START

    def test_supports_canonical_intervals_only(self):
        source = MockSource()
        assert source.supports_interval(FIFTEEN_DAY)
        assert not source.supports_interval(ONE_MIN * 7)
