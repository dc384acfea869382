# barbot/strategy/models.py
"""Data models shared between the engine and strategies."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Action(Enum):
    """Action a strategy can propose."""

    HOLD = "HOLD"
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class MarketView:
    """Everything a strategy gets to see for one bar.

    Attributes:
        timestamp: Bar close time.
        close: Close price.
        sma: Simple moving average, or the close during warm-up.
        position_qty: Current position quantity.
    """

    timestamp: datetime
    close: float
    sma: float
    position_qty: int


@dataclass(frozen=True)
class TradeIntent:
    """A strategy's proposed action before risk approval."""

    action: Action
    qty: int = 0
    reason: str = ""
