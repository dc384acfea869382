# barbot/execution/models.py
"""Data models for the execution system."""
from dataclasses import dataclass
from enum import Enum


class OrderSide(str, Enum):
    """Order side."""

    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    """Supported order types."""

    MARKET = "market"
    LIMIT = "limit"


class TimeInForce(str, Enum):
    """Supported time-in-force values."""

    DAY = "day"


@dataclass(frozen=True)
class OrderRequest:
    """An order ready to be sent to the broker.

    Attributes:
        symbol: Stock symbol.
        qty: Number of shares.
        side: Buy or sell.
        order_type: Market or limit.
        time_in_force: Time in force.
        client_order_id: Locally generated, unique per run.
        extended_hours: Allow execution outside regular hours.
        limit_price: Limit price, only set for limit orders.
    """

    symbol: str
    qty: int
    side: OrderSide
    order_type: OrderType
    time_in_force: TimeInForce
    client_order_id: str
    extended_hours: bool = False
    limit_price: float | None = None


@dataclass(frozen=True)
class OrderRef:
    """Broker acknowledgement of an order."""

    id: str
    client_order_id: str
    status: str


@dataclass(frozen=True)
class BrokerPosition:
    """Position as reported by the broker."""

    symbol: str
    qty: int
    avg_entry: float


@dataclass(frozen=True)
class AccountSummary:
    """Account balances as reported by the broker."""

    equity: float
    buying_power: float
