# barbot/market_data/models.py
"""Data models for market data."""
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Bar:
    """A single price bar reduced to what the decision pipeline needs.

    Attributes:
        symbol: Stock symbol.
        timestamp: Bar close time (UTC).
        close: Close price.
    """

    symbol: str
    timestamp: datetime
    close: float
