# barbot/state/models.py
"""Data models for the bot's believed world state."""
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Position:
    """Position in the traded symbol.

    Attributes:
        qty: Shares held. Positive is long; zero is flat.
        avg_entry: Average entry price.
    """

    qty: int = 0
    avg_entry: float = 0.0


@dataclass(frozen=True)
class OpenOrder:
    """An order the broker has not finished with yet."""

    client_order_id: str
    order_id: str
    status: str


@dataclass
class Snapshot:
    """Complete persisted state.

    Attributes:
        position: Current position.
        open_orders: Open orders keyed by client order ID. Never None.
        last_trade_time: When the last order was submitted, if ever.
        last_bar_time: Close time of the last bar seen, if any.
    """

    position: Position = field(default_factory=Position)
    open_orders: dict[str, OpenOrder] = field(default_factory=dict)
    last_trade_time: datetime | None = None
    last_bar_time: datetime | None = None

    def copy(self) -> "Snapshot":
        """Return a copy whose open-orders mapping is independent."""
        return Snapshot(
            position=self.position,
            open_orders=dict(self.open_orders),
            last_trade_time=self.last_trade_time,
            last_bar_time=self.last_bar_time,
        )
