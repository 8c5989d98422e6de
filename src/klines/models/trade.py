"""Trade (executed trade record) data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Trade:
    """Single executed trade as reported by an exchange.

    Attributes:
        timestamp: Execution time; ``None`` marks a missing timestamp.
        trade_id: Exchange-assigned trade identifier.
        amount: Traded base-currency quantity.
        price: Execution price.
    """

    timestamp: datetime | None = None
    trade_id: str = ""
    amount: float = 0.0
    price: float = 0.0
