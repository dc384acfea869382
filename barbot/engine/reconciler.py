# barbot/engine/reconciler.py
"""Periodic resynchronization of local state with the broker."""

import asyncio
import logging

from barbot.execution.broker import Broker, PositionNotFoundError
from barbot.state.models import OpenOrder, Position
from barbot.state.state_store import StateStore


logger = logging.getLogger(__name__)


class ReconciliationLoop:
    """Overwrites local position and open orders with the broker's view.

    Open orders are replaced wholesale on every tick, unlike the single-entry
    merge done after an order submission.
    """

    def __init__(
        self,
        broker: Broker,
        state_store: StateStore,
        symbol: str,
        interval_seconds: float,
    ):
        """Initialize ReconciliationLoop.

        Args:
            broker: Source of truth for orders, position and account.
            state_store: Store to overwrite.
            symbol: Symbol whose position is tracked.
            interval_seconds: Time between ticks.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._broker = broker
        self._state = state_store
        self._symbol = symbol
        self._interval = interval_seconds

    async def run(self, stop_event: asyncio.Event) -> None:
        """Reconcile every interval until ``stop_event`` is set.

        Ticks run at a fixed rate measured from the start of the loop. A pass
        that overruns one or more ticks skips them.
        """
        logger.info(f"Reconciliation loop started (every {self._interval}s)")
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._interval
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(
                    stop_event.wait(),
                    timeout=max(0.0, next_tick - loop.time()),
                )
            except asyncio.TimeoutError:
                await self.reconcile_once()
                next_tick = self._next_tick(next_tick, loop.time())
        logger.info("Reconciliation loop stopped")

    def _next_tick(self, previous: float, now: float) -> float:
        """Return the first tick after ``now`` on the ``previous`` grid."""
        missed = int((now - previous) // self._interval)
        return previous + (max(missed, 0) + 1) * self._interval

    async def reconcile_once(self) -> None:
        """Run one pass. Each of the three fetches fails independently."""
        await self._sync_open_orders()
        await self._sync_position()
        await self._log_account()

    async def _sync_open_orders(self) -> None:
        try:
            orders = await self._broker.open_orders()
        except Exception as e:
            logger.error(f"Reconcile open orders failed: {e}")
            return

        self._state.set_open_orders(
            {
                order.client_order_id: OpenOrder(
                    client_order_id=order.client_order_id,
                    order_id=order.id,
                    status=order.status,
                )
                for order in orders
            }
        )

    async def _sync_position(self) -> None:
        try:
            position = await self._broker.position(self._symbol)
        except PositionNotFoundError:
            self._state.update_position(Position(qty=0, avg_entry=0.0))
            return
        except Exception as e:
            logger.error(f"Reconcile position failed: {e}")
            return

        self._state.update_position(Position(qty=position.qty, avg_entry=position.avg_entry))

    async def _log_account(self) -> None:
        try:
            account = await self._broker.account()
        except Exception as e:
            logger.error(f"Reconcile account failed: {e}")
            return

        logger.info(
            f"Account equity={account.equity:.2f} buying_power={account.buying_power:.2f}"
        )
