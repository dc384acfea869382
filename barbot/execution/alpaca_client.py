# barbot/execution/alpaca_client.py
"""Alpaca trading client implementing the Broker contract."""

import asyncio
import logging
from typing import Optional

from alpaca.common.exceptions import APIError
from alpaca.trading.client import TradingClient
from alpaca.trading.enums import OrderSide as AlpacaOrderSide
from alpaca.trading.enums import QueryOrderStatus
from alpaca.trading.enums import TimeInForce as AlpacaTimeInForce
from alpaca.trading.requests import GetOrdersRequest, LimitOrderRequest, MarketOrderRequest

from barbot.execution.broker import BrokerError, PositionNotFoundError
from barbot.execution.models import (
    AccountSummary,
    BrokerPosition,
    OrderRef,
    OrderRequest,
    OrderSide,
    OrderType,
)


logger = logging.getLogger(__name__)


def _enum_value(value) -> str:
    """Return the raw string of an Alpaca enum (or the value itself)."""
    return str(getattr(value, "value", value))


class AlpacaBroker:
    """Broker backed by the Alpaca Trading API.

    The SDK is synchronous, so every call runs in a worker thread. Cancelling
    the awaiting task stops waiting for the result.

    Attributes:
        PAPER_URL: URL for paper trading API.
    """

    PAPER_URL = "https://paper-api.alpaca.markets"

    def __init__(
        self,
        api_key: str,
        secret_key: str,
        base_url: str = PAPER_URL,
        trading_client: Optional[TradingClient] = None,
    ):
        """Initialize AlpacaBroker.

        Args:
            api_key: Alpaca API key.
            secret_key: Alpaca secret key.
            base_url: Trading API base URL. Defaults to paper trading.
            trading_client: Pre-built client, mainly for tests.
        """
        self._base_url = base_url
        self._client = trading_client or TradingClient(
            api_key=api_key,
            secret_key=secret_key,
            paper=base_url == self.PAPER_URL,
            url_override=None if base_url == self.PAPER_URL else base_url,
        )

    @property
    def base_url(self) -> str:
        """Return the base API URL being used."""
        return self._base_url

    async def place_order(self, request: OrderRequest) -> OrderRef:
        """Submit an order.

        Args:
            request: The order to place.

        Returns:
            OrderRef with broker ID, client order ID and status.

        Raises:
            BrokerError: If Alpaca rejects the order.
        """
        side = AlpacaOrderSide.BUY if request.side == OrderSide.BUY else AlpacaOrderSide.SELL
        params = dict(
            symbol=request.symbol,
            qty=request.qty,
            side=side,
            time_in_force=AlpacaTimeInForce(request.time_in_force.value),
            client_order_id=request.client_order_id,
            extended_hours=request.extended_hours,
        )
        if request.order_type == OrderType.LIMIT:
            order_request = LimitOrderRequest(limit_price=request.limit_price, **params)
        else:
            order_request = MarketOrderRequest(**params)

        try:
            order = await asyncio.to_thread(self._client.submit_order, order_request)
        except APIError as e:
            raise BrokerError(f"submit order failed: {e}") from e
        return self._order_to_ref(order)

    async def open_orders(self) -> list[OrderRef]:
        """List all open orders.

        Raises:
            BrokerError: If the request fails.
        """
        query = GetOrdersRequest(status=QueryOrderStatus.OPEN)
        try:
            orders = await asyncio.to_thread(self._client.get_orders, filter=query)
        except APIError as e:
            raise BrokerError(f"list open orders failed: {e}") from e
        return [self._order_to_ref(order) for order in orders]

    async def position(self, symbol: str) -> BrokerPosition:
        """Get the position for a symbol.

        Raises:
            PositionNotFoundError: If there is no position in the symbol.
            BrokerError: For any other failure.
        """
        try:
            position = await asyncio.to_thread(self._client.get_open_position, symbol)
        except APIError as e:
            if e.status_code == 404:
                raise PositionNotFoundError(f"no position in {symbol}") from e
            raise BrokerError(f"get position failed: {e}") from e

        try:
            return BrokerPosition(
                symbol=position.symbol,
                qty=int(float(position.qty)),
                avg_entry=float(position.avg_entry_price),
            )
        except (TypeError, ValueError) as e:
            raise BrokerError(f"unparseable position for {symbol}: {e}") from e

    async def account(self) -> AccountSummary:
        """Get account equity and buying power.

        Raises:
            BrokerError: If the request fails or the values cannot be parsed.
        """
        try:
            account = await asyncio.to_thread(self._client.get_account)
        except APIError as e:
            raise BrokerError(f"get account failed: {e}") from e

        try:
            return AccountSummary(
                equity=float(account.equity),
                buying_power=float(account.buying_power),
            )
        except (TypeError, ValueError) as e:
            raise BrokerError(f"unparseable account balances: {e}") from e

    def _order_to_ref(self, order) -> OrderRef:
        """Convert Alpaca order object to an OrderRef."""
        return OrderRef(
            id=str(order.id),
            client_order_id=order.client_order_id,
            status=_enum_value(order.status),
        )
