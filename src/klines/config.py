"""Kline configuration."""

from __future__ import annotations

from dataclasses import dataclass

STORAGE_BACKENDS = ("memory", "sqlite", "parquet", "none")


@dataclass
class KlineConfig:
    """Configuration for KlineManager.

    Attributes:
        storage_backend: Storage type: "memory", "sqlite", "parquet", or "none".
        storage_path: Directory for sqlite/parquet files.
        validate: Whether to run quality checks before storing candles.
        default_request_limit: Max candles per request for sources that
            don't declare their own limit.
    """

    storage_backend: str = "memory"
    storage_path: str = "data/klines"
    validate: bool = True
    default_request_limit: int = 1000

    def __post_init__(self) -> None:
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown storage backend {self.storage_backend!r}. "
                f"Valid: {list(STORAGE_BACKENDS)}"
            )
        if self.default_request_limit <= 0:
            raise ValueError("default_request_limit must be positive")
