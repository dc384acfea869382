# barbot/execution/broker.py
"""Broker contract consumed by the decision engine and reconciler."""

from typing import Protocol

from barbot.execution.models import AccountSummary, BrokerPosition, OrderRef, OrderRequest


class BrokerError(Exception):
    """Raised when a broker call fails."""


class PositionNotFoundError(BrokerError):
    """Raised when the broker holds no position in the requested symbol."""


class Broker(Protocol):
    """Everything the pipeline needs from a broker.

    All methods are coroutines; cancelling the awaiting task abandons the call.
    """

    async def place_order(self, request: OrderRequest) -> OrderRef:
        ...

    async def open_orders(self) -> list[OrderRef]:
        ...

    async def position(self, symbol: str) -> BrokerPosition:
        ...

    async def account(self) -> AccountSummary:
        ...
