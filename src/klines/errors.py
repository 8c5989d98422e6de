"""Kline error types."""

from __future__ import annotations

from enum import Enum
from typing import Any


class KlineErrorCode(Enum):
    """Error classification codes."""

    EMPTY_INPUT = "empty_input"
    VALIDATION_FAILED = "validation_failed"
    INVALID_INTERVAL = "invalid_interval"
    INVALID_ARGUMENT = "invalid_argument"
    UNRESOLVED_EXCHANGE = "unresolved_exchange"
    STORAGE_ERROR = "storage_error"
    FORMAT_ERROR = "format_error"
    NOT_SUPPORTED = "not_supported"


class KlineError(Exception):
    """Kline exception with error code, retryable flag and call context.

    Attributes:
        message: Human-readable error description.
        code: Structured error code for programmatic handling.
        retryable: Whether the caller may retry the same call.
        interval: Interval involved in the failing call, if any.
        pair: Currency pair involved in the failing call, if any.

    The underlying failure, when there is one, is chained as ``__cause__``.
    """

    default_code = KlineErrorCode.INVALID_ARGUMENT

    def __init__(
        self,
        message: str,
        code: KlineErrorCode | None = None,
        retryable: bool = False,
        *,
        interval: Any = None,
        pair: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.retryable = retryable
        self.interval = interval
        self.pair = pair


class EmptyInputError(KlineError):
    """A trade or candle batch was ``None`` or empty."""

    default_code = KlineErrorCode.EMPTY_INPUT


class ValidationError(KlineError):
    """A record failed validation; ``index`` and ``trade`` locate it."""

    default_code = KlineErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, *, index: int | None = None, trade: Any = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.index = index
        self.trade = trade


class InvalidIntervalError(KlineError):
    default_code = KlineErrorCode.INVALID_INTERVAL


class UnresolvedExchangeError(KlineError):
    """Exchange name has no record in storage."""

    default_code = KlineErrorCode.UNRESOLVED_EXCHANGE

    def __init__(self, exchange: str, **kwargs: Any) -> None:
        super().__init__(f"Exchange {exchange!r} not found in storage", **kwargs)
        self.exchange = exchange


class StorageError(KlineError):
    """Wraps a failure raised by the storage collaborator."""

    default_code = KlineErrorCode.STORAGE_ERROR

    def __init__(self, message: str, retryable: bool = True, **kwargs: Any) -> None:
        super().__init__(message, retryable=retryable, **kwargs)


class FormatError(KlineError):
    """CSV input could not be parsed; ``line`` is 1-based when known."""

    default_code = KlineErrorCode.FORMAT_ERROR

    def __init__(self, message: str, *, line: int | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.line = line
