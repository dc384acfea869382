# barbot/execution/__init__.py
"""Execution module: broker contract and the Alpaca implementation."""

from .alpaca_client import AlpacaBroker
from .broker import Broker, BrokerError, PositionNotFoundError
from .models import (
    AccountSummary,
    BrokerPosition,
    OrderRef,
    OrderRequest,
    OrderSide,
    OrderType,
    TimeInForce,
)

__all__ = [
    "AccountSummary",
    "AlpacaBroker",
    "Broker",
    "BrokerError",
    "BrokerPosition",
    "OrderRef",
    "OrderRequest",
    "OrderSide",
    "OrderType",
    "PositionNotFoundError",
    "TimeInForce",
]
