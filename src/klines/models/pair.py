"""Currency pair and asset-class identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Quote currencies tried, longest first, when a symbol has no delimiter.
KNOWN_QUOTES: tuple[str, ...] = (
    "USDT", "USDC", "BUSD", "TUSD", "DAI",
    "USD", "EUR", "GBP", "AUD", "JPY", "KRW",
    "BTC", "ETH", "BNB",
)

_DELIMITERS = ("-", "_", "/")


class Asset(Enum):
    """Asset class of a traded pair."""

    SPOT = "spot"
    MARGIN = "margin"
    FUTURES = "futures"
    PERPETUAL_SWAP = "perpetual_swap"
    INDEX = "index"
    OPTIONS = "options"


@dataclass(frozen=True)
class Pair:
    """Base/quote currency pair, e.g. ``BTC-USDT``."""

    base: str
    quote: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "base", self.base.upper())
        object.__setattr__(self, "quote", self.quote.upper())

    def __str__(self) -> str:
        return f"{self.base}-{self.quote}"

    @classmethod
    def from_string(cls, symbol: str) -> Pair:
        """Parse ``"BTC-USDT"``, ``"BTC_USDT"``, ``"BTC/USDT"`` or ``"BTCUSDT"``."""
        text = symbol.strip().upper()
        for delim in _DELIMITERS:
            if delim in text:
                base, _, quote = text.partition(delim)
                if base and quote:
                    return cls(base, quote)
                raise ValueError(f"Invalid currency pair: {symbol!r}")

        for quote in sorted(KNOWN_QUOTES, key=len, reverse=True):
            if text.endswith(quote) and len(text) > len(quote):
                return cls(text[: -len(quote)], quote)
        raise ValueError(f"Cannot split currency pair: {symbol!r}")
