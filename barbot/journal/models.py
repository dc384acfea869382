# barbot/journal/models.py
"""Data models for the decision audit trail."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from barbot.strategy.models import Action


class DecisionResult(str, Enum):
    """Outcome of handling one bar."""

    REJECTED = "rejected"
    HOLD = "hold"
    DRY_RUN = "dry_run"
    ORDER_BUILD_FAILED = "order_build_failed"
    ORDER_FAILED = "order_failed"
    ORDER_SUBMITTED = "order_submitted"


@dataclass(frozen=True)
class DecisionRecord:
    """One line of the decision log. Exactly one is written per bar."""

    run_id: str
    timestamp: datetime
    bar_time: datetime
    symbol: str
    close: float
    sma: float
    intent: Action
    intent_qty: int
    reason: str
    result: DecisionResult

    # Optional outcome details
    approval_reason: str | None = None
    reject_reason: str | None = None
    order_id: str | None = None
    client_order_id: str | None = None

    def to_dict(self) -> dict:
        """Convert to a JSON-ready dictionary, omitting unset optional fields."""
        data = {
            "run_id": self.run_id,
            "timestamp": self.timestamp.isoformat(),
            "bar_time": self.bar_time.isoformat(),
            "symbol": self.symbol,
            "close": self.close,
            "sma": self.sma,
            "intent": self.intent.value,
            "intent_qty": self.intent_qty,
            "reason": self.reason,
            "result": self.result.value,
        }
        optional = {
            "approval_reason": self.approval_reason,
            "reject_reason": self.reject_reason,
            "order_id": self.order_id,
            "client_order_id": self.client_order_id,
        }
        data.update({key: value for key, value in optional.items() if value})
        return data
