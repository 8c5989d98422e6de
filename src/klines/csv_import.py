"""Import pre-aggregated candles from CSV exports.

Expected layout: one header row (ignored), then
``unix_timestamp,open,high,low,close,volume`` per line.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from klines.errors import FormatError
from klines.interval import Interval
from klines.models.candle import Candle
from klines.models.item import Item
from klines.models.pair import Asset, Pair

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["timestamp", "open", "high", "low", "close", "volume"]


def load_from_csv(path: Path | str) -> list[Candle]:
    """Parse a candle CSV file in file order.

    Raises:
        FormatError: Missing or empty file, wrong column count, or a
            non-numeric field. ``line`` is the 1-based line number when
            known.
    """
    path = Path(path)
    try:
        raw = pd.read_csv(
            path,
            header=None,
            skiprows=1,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
        )
    except FileNotFoundError as exc:
        raise FormatError(f"CSV file not found: {path}") from exc
    except pd.errors.EmptyDataError as exc:
        raise FormatError(f"No candle rows in {path}") from exc
    except pd.errors.ParserError as exc:
        raise FormatError(f"Cannot parse {path}: {exc}") from exc

    if len(raw.columns) != len(CSV_COLUMNS):
        raise FormatError(
            f"{path}: expected {len(CSV_COLUMNS)} columns, found {len(raw.columns)}",
            line=2,
        )
    raw.columns = CSV_COLUMNS

    numeric = raw.apply(pd.to_numeric, errors="coerce")
    bad = numeric.isna().any(axis=1)
    if bad.any():
        idx = int(bad.to_numpy().nonzero()[0][0])
        line = idx + 2
        if raw.iloc[idx].isna().any():
            reason = f"expected {len(CSV_COLUMNS)} columns"
        else:
            reason = f"non-numeric field in {list(raw.iloc[idx])}"
        raise FormatError(f"{path}:{line}: {reason}", line=line)

    candles = []
    for i, row in enumerate(numeric.itertuples(index=False)):
        try:
            ts = datetime.fromtimestamp(float(row.timestamp), tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as exc:
            raise FormatError(
                f"{path}:{i + 2}: timestamp {row.timestamp} out of range", line=i + 2,
            ) from exc
        candles.append(Candle(
            timestamp=ts,
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        ))
    logger.debug("Read %d candles from %s", len(candles), path)
    return candles


def load_item_from_csv(
    path: Path | str,
    exchange: str,
    pair: Pair,
    asset: Asset,
    interval: Interval,
) -> Item:
    """Wrap the candles of a CSV export in an ``Item``."""
    return Item(
        exchange=exchange,
        pair=pair,
        asset=asset,
        interval=interval,
        candles=load_from_csv(path),
    )
