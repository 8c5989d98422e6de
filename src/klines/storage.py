"""Candle storage backends: Memory, SQLite and Parquet.

Every backend keys candle rows on
``(exchange_id, base, quote, asset, interval_seconds, timestamp)`` and
upserts on conflict (last write wins).
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import pandas as pd

from klines.config import KlineConfig
from klines.interval import as_utc

logger = logging.getLogger(__name__)

RowKey = tuple[str, str, str, str, int, datetime]


@dataclass(frozen=True)
class CandleRow:
    """Storage representation of one candle."""

    exchange_id: str
    base: str
    quote: str
    asset: str
    interval_seconds: int
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float

    @property
    def key(self) -> RowKey:
        return (
            self.exchange_id, self.base, self.quote, self.asset,
            self.interval_seconds, as_utc(self.timestamp),
        )


def _normalize_name(name: str) -> str:
    return name.strip().lower()


class CandleStorage(ABC):
    """Abstract storage interface consumed by the persistence adapter."""

    @abstractmethod
    def resolve_exchange_id(self, name: str) -> str | None:
        """Return the stored id for an exchange name, or None on miss."""
        ...

    @abstractmethod
    def add_exchange(self, name: str) -> str:
        """Register an exchange (idempotent) and return its id."""
        ...

    @abstractmethod
    def insert_candles(self, rows: list[CandleRow]) -> int:
        """Upsert rows in one unit of work and return the number written."""
        ...

    @abstractmethod
    def query_candles(
        self,
        exchange_id: str,
        base: str,
        quote: str,
        asset: str,
        interval_seconds: int,
        start: datetime,
        end: datetime,
    ) -> list[CandleRow]:
        """Return rows with ``start <= timestamp <= end``, ascending."""
        ...


class MemoryStorage(CandleStorage):
    """In-process storage guarded by a lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._exchanges: dict[str, str] = {}
        self._rows: dict[RowKey, CandleRow] = {}

    def resolve_exchange_id(self, name: str) -> str | None:
        with self._lock:
            return self._exchanges.get(_normalize_name(name))

    def add_exchange(self, name: str) -> str:
        with self._lock:
            return self._exchanges.setdefault(_normalize_name(name), str(uuid.uuid4()))

    def insert_candles(self, rows: list[CandleRow]) -> int:
        with self._lock:
            self._rows.update((row.key, row) for row in rows)
        return len(rows)

    def query_candles(self, exchange_id, base, quote, asset, interval_seconds, start, end):  # type: ignore[override]
        start, end = as_utc(start), as_utc(end)
        prefix = (exchange_id, base, quote, asset, interval_seconds)
        with self._lock:
            rows = [
                row for key, row in self._rows.items()
                if key[:5] == prefix and start <= key[5] <= end
            ]
        return sorted(rows, key=lambda r: as_utc(r.timestamp))


class SQLiteStorage(CandleStorage):
    """SQLite-backed storage; every call runs in its own transaction."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        conn = self._get_connection()
        try:
            with conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS exchange (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL UNIQUE
                    )
                """)
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS candle (
                        exchange_id TEXT NOT NULL REFERENCES exchange(id),
                        base TEXT NOT NULL,
                        quote TEXT NOT NULL,
                        asset TEXT NOT NULL,
                        interval_seconds INTEGER NOT NULL,
                        timestamp TEXT NOT NULL,
                        open REAL NOT NULL,
                        high REAL NOT NULL,
                        low REAL NOT NULL,
                        close REAL NOT NULL,
                        volume REAL NOT NULL,
                        UNIQUE(exchange_id, base, quote, asset, interval_seconds, timestamp)
                    )
                """)
        finally:
            conn.close()

    @staticmethod
    def _ts(value: datetime) -> str:
        # Fixed-width UTC text sorts chronologically.
        return as_utc(value).isoformat(timespec="microseconds")

    def resolve_exchange_id(self, name: str) -> str | None:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT id FROM exchange WHERE name = ?", (_normalize_name(name),),
            ).fetchone()
        finally:
            conn.close()
        return row["id"] if row else None

    def add_exchange(self, name: str) -> str:
        conn = self._get_connection()
        try:
            with conn:
                conn.execute(
                    "INSERT OR IGNORE INTO exchange (id, name) VALUES (?, ?)",
                    (str(uuid.uuid4()), _normalize_name(name)),
                )
                row = conn.execute(
                    "SELECT id FROM exchange WHERE name = ?", (_normalize_name(name),),
                ).fetchone()
        finally:
            conn.close()
        return row["id"]

    def insert_candles(self, rows: list[CandleRow]) -> int:
        conn = self._get_connection()
        try:
            with conn:
                conn.executemany(
                    """
                    INSERT INTO candle
                        (exchange_id, base, quote, asset, interval_seconds, timestamp,
                         open, high, low, close, volume)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(exchange_id, base, quote, asset, interval_seconds, timestamp)
                    DO UPDATE SET
                        open = excluded.open,
                        high = excluded.high,
                        low = excluded.low,
                        close = excluded.close,
                        volume = excluded.volume
                    """,
                    [
                        (
                            r.exchange_id, r.base, r.quote, r.asset, r.interval_seconds,
                            self._ts(r.timestamp), r.open, r.high, r.low, r.close, r.volume,
                        )
                        for r in rows
                    ],
                )
        finally:
            conn.close()
        return len(rows)

    def query_candles(self, exchange_id, base, quote, asset, interval_seconds, start, end):  # type: ignore[override]
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """
                SELECT * FROM candle
                WHERE exchange_id = ? AND base = ? AND quote = ? AND asset = ?
                  AND interval_seconds = ? AND timestamp >= ? AND timestamp <= ?
                ORDER BY timestamp ASC
                """,
                (
                    exchange_id, base, quote, asset, interval_seconds,
                    self._ts(start), self._ts(end),
                ),
            )
            return [
                CandleRow(
                    exchange_id=row["exchange_id"],
                    base=row["base"],
                    quote=row["quote"],
                    asset=row["asset"],
                    interval_seconds=row["interval_seconds"],
                    timestamp=datetime.fromisoformat(row["timestamp"]),
                    open=row["open"],
                    high=row["high"],
                    low=row["low"],
                    close=row["close"],
                    volume=row["volume"],
                )
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()


class ParquetStorage(CandleStorage):
    """Disk storage using Parquet files with Snappy compression.

    Layout: ``{base_path}/{exchange_id}/{BASE}_{QUOTE}_{asset}_{interval}.parquet``
    plus ``{base_path}/exchanges.json`` for the exchange registry. Each
    file is rewritten through a temp file and ``os.replace``.
    """

    _COLUMNS = ["timestamp", "open", "high", "low", "close", "volume"]

    def __init__(self, base_path: Path | str) -> None:
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def _registry_path(self) -> Path:
        return self.base_path / "exchanges.json"

    def _read_registry(self) -> dict[str, str]:
        if not self._registry_path.exists():
            return {}
        return json.loads(self._registry_path.read_text())

    def _file_path(
        self, exchange_id: str, base: str, quote: str, asset: str, interval_seconds: int,
    ) -> Path:
        return self.base_path / exchange_id / f"{base}_{quote}_{asset}_{interval_seconds}.parquet"

    def resolve_exchange_id(self, name: str) -> str | None:
        with self._lock:
            return self._read_registry().get(_normalize_name(name))

    def add_exchange(self, name: str) -> str:
        key = _normalize_name(name)
        with self._lock:
            registry = self._read_registry()
            if key not in registry:
                registry[key] = str(uuid.uuid4())
                tmp = self._registry_path.with_suffix(".json.tmp")
                tmp.write_text(json.dumps(registry, indent=2))
                os.replace(tmp, self._registry_path)
            return registry[key]

    def insert_candles(self, rows: list[CandleRow]) -> int:
        groups: dict[Path, list[CandleRow]] = {}
        for r in rows:
            fp = self._file_path(r.exchange_id, r.base, r.quote, r.asset, r.interval_seconds)
            groups.setdefault(fp, []).append(r)

        with self._lock:
            staged: list[tuple[Path, Path]] = []
            try:
                for fp, group in groups.items():
                    df = self._rows_to_df(group)
                    if fp.exists():
                        df = pd.concat([pd.read_parquet(fp), df], ignore_index=True)
                    df = (
                        df.drop_duplicates(subset="timestamp", keep="last")
                        .sort_values("timestamp")
                        .reset_index(drop=True)
                    )
                    fp.parent.mkdir(parents=True, exist_ok=True)
                    tmp = fp.with_suffix(".parquet.tmp")
                    df.to_parquet(tmp, compression="snappy", index=False)
                    staged.append((tmp, fp))
            except Exception:
                for tmp, _ in staged:
                    tmp.unlink(missing_ok=True)
                raise
            for tmp, fp in staged:
                os.replace(tmp, fp)

        logger.debug("Wrote %d candle rows across %d parquet files", len(rows), len(groups))
        return len(rows)

    def query_candles(self, exchange_id, base, quote, asset, interval_seconds, start, end):  # type: ignore[override]
        fp = self._file_path(exchange_id, base, quote, asset, interval_seconds)
        with self._lock:
            if not fp.exists():
                return []
            df = pd.read_parquet(fp)

        ts = pd.to_datetime(df["timestamp"], utc=True)
        df = df[(ts >= pd.Timestamp(as_utc(start))) & (ts <= pd.Timestamp(as_utc(end)))]
        return [
            CandleRow(
                exchange_id=exchange_id,
                base=base,
                quote=quote,
                asset=asset,
                interval_seconds=interval_seconds,
                timestamp=pd.Timestamp(row["timestamp"]).to_pydatetime(),
                open=float(row["open"]),
                high=float(row["high"]),
                low=float(row["low"]),
                close=float(row["close"]),
                volume=float(row["volume"]),
            )
            for _, row in df.sort_values("timestamp").iterrows()
        ]

    @classmethod
    def _rows_to_df(cls, rows: list[CandleRow]) -> pd.DataFrame:
        records = [
            {
                "timestamp": as_utc(r.timestamp),
                "open": r.open,
                "high": r.high,
                "low": r.low,
                "close": r.close,
                "volume": r.volume,
            }
            for r in rows
        ]
        df = pd.DataFrame(records, columns=cls._COLUMNS)
        df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
        return df


def create_storage(config: KlineConfig) -> CandleStorage | None:
    """Build the storage backend named by ``config.storage_backend``."""
    backend = config.storage_backend
    if backend == "memory":
        return MemoryStorage()
    if backend == "sqlite":
        return SQLiteStorage(Path(config.storage_path) / "klines.db")
    if backend == "parquet":
        return ParquetStorage(config.storage_path)
    if backend == "none":
        return None
    raise ValueError(f"Unknown storage backend: {backend!r}")
