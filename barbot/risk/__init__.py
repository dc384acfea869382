"""Risk module: the gate every trade intent passes through."""

from .models import ApprovedIntent, RejectionReason, RiskCheckResult, RiskContext
from .risk_gate import RiskGate

__all__ = [
    "ApprovedIntent",
    "RejectionReason",
    "RiskCheckResult",
    "RiskContext",
    "RiskGate",
]
