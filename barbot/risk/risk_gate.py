# barbot/risk/risk_gate.py
"""Rule-based gate that every trade intent must pass."""

import logging

from barbot.risk.models import ApprovedIntent, RejectionReason, RiskCheckResult, RiskContext
from barbot.strategy.models import Action, TradeIntent


logger = logging.getLogger(__name__)


class RiskGate:
    """Stateless evaluator of trade intents against position and order limits.

    Rules run in a fixed order and the first failing rule decides the
    outcome, so the same inputs always produce the same result.
    """

    def evaluate(self, intent: TradeIntent, context: RiskContext) -> RiskCheckResult:
        """Validate an intent against risk rules.

        Performs the following checks in order:
        1. HOLD is approved immediately with reason "hold"
        2. Kill switch
        3. An open order is already tracked
        4. Cooldown since the last trade has not elapsed
        5. Quantity is not positive
        6. BUY would push the position past max_qty
        7. SELL with no position
        8. Notional exceeds max_notional
        9. Extended hours without a limit/day order

        Args:
            intent: The proposed trade.
            context: Current position, limits and configuration.

        Returns:
            RiskCheckResult with either the approved intent or the reason
            for rejection.
        """
        if intent.action == Action.HOLD:
            return RiskCheckResult(
                approved=True,
                approved_intent=ApprovedIntent(intent=intent, reason="hold"),
            )

        notional = context.price * intent.qty
        logger.info(
            f"Risk evaluation: intent={intent.action.value} qty={intent.qty} "
            f"position={context.position_qty} price={context.price:.2f} "
            f"notional={notional:.2f}"
        )

        reason = self._first_violation(intent, context, notional)
        if reason is not None:
            logger.info(f"Risk rejected: {reason.value}")
            return RiskCheckResult(approved=False, rejection_reason=reason)

        logger.info(
            f"Risk approved: intent={intent.action.value} qty={intent.qty} "
            f"reason={intent.reason}"
        )
        return RiskCheckResult(
            approved=True,
            approved_intent=ApprovedIntent(intent=intent, reason="approved"),
        )

    def _first_violation(
        self,
        intent: TradeIntent,
        context: RiskContext,
        notional: float,
    ) -> RejectionReason | None:
        if context.kill_switch:
            return RejectionReason.KILL_SWITCH_ENABLED

        if context.open_order_count > 0:
            return RejectionReason.OPEN_ORDER_EXISTS

        if context.last_trade_time is not None:
            elapsed = context.now - context.last_trade_time
            if elapsed < context.cooldown:
                logger.debug(f"Cooldown remaining: {context.cooldown - elapsed}")
                return RejectionReason.COOLDOWN_ACTIVE

        if intent.qty <= 0:
            return RejectionReason.INVALID_QUANTITY

        if intent.action == Action.BUY and intent.qty + context.position_qty > context.max_qty:
            return RejectionReason.MAX_POSITION_EXCEEDED

        if intent.action == Action.SELL and context.position_qty <= 0:
            return RejectionReason.NO_POSITION_TO_SELL

        if notional > context.max_notional:
            return RejectionReason.MAX_NOTIONAL_EXCEEDED

        if context.extended_hours and (
            context.order_type != "limit" or context.time_in_force != "day"
        ):
            return RejectionReason.EXTENDED_HOURS_REQUIRES_LIMIT_DAY

        return None
