"""Data quality validation for trades and candles."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import timedelta

from klines.errors import EmptyInputError, ValidationError
from klines.interval import Interval, as_utc
from klines.models.candle import Candle
from klines.models.trade import Trade


def validate_trades(trades: list[Trade] | None, copy: bool = False) -> list[Trade]:
    """Check a trade batch and sort it ascending by timestamp.

    The sort is stable and happens **in place**: the call takes exclusive
    mutation rights over ``trades`` for its duration and returns the same
    list. Callers sharing the batch with other threads should pass
    ``copy=True``, which sorts and returns a new list instead.

    Raises:
        EmptyInputError: ``trades`` is ``None`` or empty.
        ValidationError: A trade has no timestamp, or a non-positive
            amount or price. ``index`` and ``trade`` identify it.
    """
    if not trades:
        raise EmptyInputError("No trade data supplied")

    for i, t in enumerate(trades):
        if t.timestamp is None:
            problem = "missing timestamp"
        elif not t.amount > 0:
            problem = f"invalid amount {t.amount}"
        elif not t.price > 0:
            problem = f"invalid price {t.price}"
        else:
            continue
        raise ValidationError(
            f"Trade {i} (id={t.trade_id!r}): {problem}", index=i, trade=t,
        )

    if copy:
        trades = list(trades)
    trades.sort(key=lambda t: as_utc(t.timestamp))  # type: ignore[arg-type]
    return trades


@dataclass
class ValidationCheck:
    """Single validation check result."""

    name: str
    passed: bool
    message: str = ""


@dataclass
class ValidationResult:
    """Aggregate validation result."""

    checks: list[ValidationCheck] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(c.passed for c in self.checks)

    @property
    def failed_checks(self) -> list[ValidationCheck]:
        return [c for c in self.checks if not c.passed]


def validate_candles(candles: list[Candle], interval: Interval | None = None) -> ValidationResult:
    """Run quality checks on a candle series.

    Checks:
        1. Not empty
        2. No NaN/Inf OHLCV
        3. Volume sanity (non-negative)
        4. Timestamp ordering (strictly ascending)
        5. OHLC consistency (low <= open/close <= high)
        6. Interval alignment (only when ``interval`` is given)
    """
    result = ValidationResult()

    if not candles:
        result.checks.append(ValidationCheck("not_empty", False, "No candles provided"))
        return result
    result.checks.append(ValidationCheck("not_empty", True, f"{len(candles)} candles"))

    nan_count = 0
    for c in candles:
        for val in (c.open, c.high, c.low, c.close, c.volume):
            if math.isnan(val) or math.isinf(val):
                nan_count += 1
    if nan_count:
        result.checks.append(ValidationCheck("no_nulls", False, f"{nan_count} NaN/Inf values"))
    else:
        result.checks.append(ValidationCheck("no_nulls", True))

    neg_vol = sum(1 for c in candles if c.volume < 0)
    if neg_vol:
        result.checks.append(
            ValidationCheck("volume_sanity", False, f"{neg_vol} candles with negative volume")
        )
    else:
        result.checks.append(ValidationCheck("volume_sanity", True))

    out_of_order = 0
    for i in range(1, len(candles)):
        if candles[i].timestamp <= candles[i - 1].timestamp:
            out_of_order += 1
    if out_of_order:
        result.checks.append(
            ValidationCheck("timestamp_order", False, f"{out_of_order} out of order")
        )
    else:
        result.checks.append(ValidationCheck("timestamp_order", True))

    inconsistent = 0
    for c in candles:
        if c.high < c.low:
            inconsistent += 1
        elif c.high < c.open or c.high < c.close:
            inconsistent += 1
        elif c.low > c.open or c.low > c.close:
            inconsistent += 1
    if inconsistent:
        result.checks.append(
            ValidationCheck("ohlc_consistency", False, f"{inconsistent} candles with H<L or H<O/C")
        )
    else:
        result.checks.append(ValidationCheck("ohlc_consistency", True))

    if interval is not None and interval.duration <= timedelta(0):
        result.checks.append(
            ValidationCheck("interval_alignment", False, f"Non-positive interval {interval.short()}")
        )
    elif interval is not None:
        misaligned = sum(1 for c in candles if interval.truncate(c.timestamp) != as_utc(c.timestamp))
        if misaligned:
            result.checks.append(
                ValidationCheck(
                    "interval_alignment", False,
                    f"{misaligned} candles not aligned to {interval.short()}",
                )
            )
        else:
            result.checks.append(ValidationCheck("interval_alignment", True))

    return result
