# barbot/risk/models.py
"""Data models for risk evaluation."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from barbot.strategy.models import TradeIntent


class RejectionReason(str, Enum):
    """Stable tags naming why the gate refused an intent."""

    KILL_SWITCH_ENABLED = "kill_switch_enabled"
    OPEN_ORDER_EXISTS = "open_order_exists"
    COOLDOWN_ACTIVE = "cooldown_active"
    INVALID_QUANTITY = "invalid_quantity"
    MAX_POSITION_EXCEEDED = "max_position_exceeded"
    NO_POSITION_TO_SELL = "no_position_to_sell"
    MAX_NOTIONAL_EXCEEDED = "max_notional_exceeded"
    EXTENDED_HOURS_REQUIRES_LIMIT_DAY = "extended_hours_requires_limit_day"


@dataclass(frozen=True)
class RiskContext:
    """Inputs to one risk evaluation, built fresh for every bar.

    Attributes:
        now: Evaluation time.
        price: Last close price.
        position_qty: Current position quantity.
        open_order_count: Number of tracked open orders.
        last_trade_time: When the last order was submitted, or None.
        max_qty: Maximum position size.
        max_notional: Maximum dollar value per order.
        cooldown: Minimum time between two trades.
        kill_switch: If True, nothing but HOLD is approved.
        extended_hours: Whether orders may execute outside regular hours.
        order_type: Configured order type ("market" or "limit").
        time_in_force: Configured time in force ("day").
    """

    now: datetime
    price: float
    position_qty: int
    open_order_count: int
    last_trade_time: datetime | None
    max_qty: int
    max_notional: float
    cooldown: timedelta
    kill_switch: bool = False
    extended_hours: bool = False
    order_type: str = "market"
    time_in_force: str = "day"


@dataclass(frozen=True)
class ApprovedIntent:
    """An intent that passed the gate.

    Attributes:
        intent: The trade intent as proposed.
        reason: "hold" for HOLD intents, "approved" otherwise.
    """

    intent: TradeIntent
    reason: str


@dataclass(frozen=True)
class RiskCheckResult:
    """Outcome of a risk evaluation.

    Exactly one of approved_intent and rejection_reason is set.
    """

    approved: bool
    approved_intent: ApprovedIntent | None = None
    rejection_reason: RejectionReason | None = None
