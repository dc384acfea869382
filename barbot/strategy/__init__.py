"""Strategy contract: market view in, trade intent out."""

from .base import HoldStrategy, Strategy, load_strategy
from .models import Action, MarketView, TradeIntent

__all__ = [
    "Action",
    "HoldStrategy",
    "MarketView",
    "Strategy",
    "TradeIntent",
    "load_strategy",
]
