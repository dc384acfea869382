# barbot/engine/decision_engine.py
"""Per-bar decision pipeline: stats, strategy, risk, order, audit."""

import asyncio
import inspect
import logging
from datetime import datetime, timezone
from typing import Callable

from barbot.config.settings import RunMode, TradingSettings
from barbot.engine.client_order_ids import ClientOrderIdGenerator
from barbot.execution.broker import Broker
from barbot.execution.models import OrderRequest, OrderSide, OrderType, TimeInForce
from barbot.journal.decision_log import DecisionLog
from barbot.journal.models import DecisionRecord, DecisionResult
from barbot.market_data.models import Bar
from barbot.market_data.rolling_stats import InsufficientDataError, RollingStats
from barbot.risk.models import RiskContext
from barbot.risk.risk_gate import RiskGate
from barbot.state.models import OpenOrder
from barbot.state.state_store import StateStore
from barbot.strategy.base import Strategy
from barbot.strategy.models import Action, MarketView, TradeIntent


logger = logging.getLogger(__name__)


class OrderBuildError(Exception):
    """Raised when configuration cannot be turned into a valid order."""


def parse_order_type(value: str) -> OrderType:
    """Parse a configured order type.

    Raises:
        OrderBuildError: If the value is not "market" or "limit".
    """
    try:
        return OrderType(value)
    except ValueError:
        raise OrderBuildError(f"unsupported order type: {value}") from None


def parse_time_in_force(value: str) -> TimeInForce:
    """Parse a configured time in force.

    Raises:
        OrderBuildError: If the value is not "day".
    """
    try:
        return TimeInForce(value)
    except ValueError:
        raise OrderBuildError(f"unsupported time in force: {value}") from None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DecisionEngine:
    """Turns each bar into exactly one decision record.

    Steps per bar:
    1. Record the close and the bar time
    2. Compute the SMA, falling back to the close during warm-up
    3. Ask the strategy for an intent
    4. Evaluate the intent through the risk gate
    5. In paper mode, build and submit an order for approved BUY/SELL intents
    6. Append the decision record

    Bars must be handled one at a time.
    """

    def __init__(
        self,
        settings: TradingSettings,
        strategy: Strategy,
        risk_gate: RiskGate,
        broker: Broker | None,
        state_store: StateStore,
        decision_log: DecisionLog,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize DecisionEngine.

        Args:
            settings: Trading settings (windows, limits, order shape, mode).
            strategy: Strategy producing trade intents.
            risk_gate: Gate evaluating intents.
            broker: Broker for order placement. May be None in stream mode.
            state_store: Shared state store.
            decision_log: Open decision log; its run ID prefixes order IDs.
            clock: Source of the current UTC time.

        Raises:
            ValueError: If paper mode is configured without a broker.
        """
        if settings.mode == RunMode.PAPER and broker is None:
            raise ValueError("paper mode requires a broker")

        self._settings = settings
        self._strategy = strategy
        self._gate = risk_gate
        self._broker = broker
        self._state = state_store
        self._decisions = decision_log
        self._clock = clock
        self._stats = RollingStats(settings.bars_window)
        self._order_ids = ClientOrderIdGenerator(decision_log.run_id)

    @property
    def run_id(self) -> str:
        """Return the run identifier."""
        return self._decisions.run_id

    @property
    def stats(self) -> RollingStats:
        """Return the rolling close-price window."""
        return self._stats

    async def on_bar(self, bar: Bar) -> DecisionRecord:
        """Handle one bar end to end.

        Args:
            bar: The latest bar.

        Returns:
            The decision record that was appended to the log.
        """
        self._stats.add(bar.close)
        self._state.set_last_bar_time(bar.timestamp)

        try:
            sma = self._stats.simple_moving_average(self._settings.sma_window)
        except InsufficientDataError:
            sma = bar.close
            logger.info(
                f"bar={bar.timestamp.isoformat()} close={bar.close:.2f} "
                f"sma=na (using close as fallback)"
            )

        snapshot = self._state.snapshot()
        intent = await self._decide(
            MarketView(
                timestamp=bar.timestamp,
                close=bar.close,
                sma=sma,
                position_qty=snapshot.position.qty,
            )
        )

        context = RiskContext(
            now=self._clock(),
            price=bar.close,
            position_qty=snapshot.position.qty,
            open_order_count=len(snapshot.open_orders),
            last_trade_time=snapshot.last_trade_time,
            max_qty=self._settings.max_qty,
            max_notional=self._settings.max_notional,
            cooldown=self._settings.cooldown,
            kill_switch=self._settings.kill_switch,
            extended_hours=self._settings.extended_hours,
            order_type=self._settings.order_type,
            time_in_force=self._settings.time_in_force,
        )
        risk_result = self._gate.evaluate(intent, context)

        def record(result: DecisionResult, **details) -> DecisionRecord:
            return DecisionRecord(
                run_id=self.run_id,
                timestamp=self._clock(),
                bar_time=bar.timestamp,
                symbol=bar.symbol,
                close=bar.close,
                sma=sma,
                intent=intent.action,
                intent_qty=intent.qty,
                reason=intent.reason,
                result=result,
                **details,
            )

        if not risk_result.approved:
            return await self._emit(
                record(
                    DecisionResult.REJECTED,
                    reject_reason=risk_result.rejection_reason.value,
                )
            )

        approved = risk_result.approved_intent
        if intent.action == Action.HOLD:
            return await self._emit(
                record(DecisionResult.HOLD, approval_reason=approved.reason)
            )

        if self._settings.mode == RunMode.STREAM:
            return await self._emit(
                record(DecisionResult.DRY_RUN, approval_reason=approved.reason)
            )

        try:
            order_request = self.build_order(bar.symbol, bar.close, approved.intent)
        except OrderBuildError as e:
            return await self._emit(
                record(DecisionResult.ORDER_BUILD_FAILED, reject_reason=str(e))
            )

        try:
            order_ref = await self._broker.place_order(order_request)
        except asyncio.CancelledError:
            await self._emit(
                record(DecisionResult.ORDER_FAILED, reject_reason="cancelled")
            )
            raise
        except Exception as e:
            return await self._emit(
                record(DecisionResult.ORDER_FAILED, reject_reason=str(e))
            )

        self._state.set_last_trade_time(self._clock())
        # Merge into the live mapping; reconciliation may have replaced it
        # since the snapshot above was taken.
        self._state.merge_open_order(
            OpenOrder(
                client_order_id=order_ref.client_order_id,
                order_id=order_ref.id,
                status=order_ref.status,
            )
        )
        return await self._emit(
            record(
                DecisionResult.ORDER_SUBMITTED,
                approval_reason=approved.reason,
                order_id=order_ref.id,
                client_order_id=order_ref.client_order_id,
            )
        )

    def build_order(self, symbol: str, price: float, intent: TradeIntent) -> OrderRequest:
        """Build an order request for an approved intent.

        Args:
            symbol: Symbol to trade.
            price: Last close, used as limit price for limit orders.
            intent: Approved BUY or SELL intent.

        Returns:
            OrderRequest with a fresh client order ID.

        Raises:
            OrderBuildError: If order type or time in force is unsupported.
        """
        order_type = parse_order_type(self._settings.order_type)
        time_in_force = parse_time_in_force(self._settings.time_in_force)
        side = OrderSide.SELL if intent.action == Action.SELL else OrderSide.BUY

        return OrderRequest(
            symbol=symbol,
            qty=intent.qty,
            side=side,
            order_type=order_type,
            time_in_force=time_in_force,
            client_order_id=self._order_ids.next_id(),
            extended_hours=self._settings.extended_hours,
            limit_price=price if order_type == OrderType.LIMIT else None,
        )

    async def _decide(self, view: MarketView) -> TradeIntent:
        """Ask the strategy for an intent; any failure becomes a HOLD."""
        try:
            intent = self._strategy.decide(view)
            if inspect.isawaitable(intent):
                intent = await intent
        except Exception as e:
            logger.error(f"Strategy error: {e}")
            return TradeIntent(action=Action.HOLD, reason=f"strategy_error: {e}")
        return intent

    async def _emit(self, record: DecisionRecord) -> DecisionRecord:
        """Append the record to the decision log and log a summary line."""
        await self._decisions.append(record)

        summary = (
            f"bar={record.bar_time.isoformat()} close={record.close:.2f} "
            f"sma={record.sma:.2f} intent={record.intent.value} "
            f"result={record.result.value}"
        )
        if record.reject_reason:
            summary += f" reason={record.reject_reason}"
        if record.client_order_id:
            summary += (
                f" order_id={record.order_id} client_order_id={record.client_order_id}"
            )

        if record.result in (DecisionResult.ORDER_FAILED, DecisionResult.ORDER_BUILD_FAILED):
            logger.warning(summary)
        else:
            logger.info(summary)
        return record
