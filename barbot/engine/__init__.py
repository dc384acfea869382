# barbot/engine/__init__.py
"""Engine module: per-bar decisions and broker reconciliation."""

from .client_order_ids import ClientOrderIdGenerator
from .decision_engine import DecisionEngine, OrderBuildError
from .reconciler import ReconciliationLoop

__all__ = [
    "ClientOrderIdGenerator",
    "DecisionEngine",
    "OrderBuildError",
    "ReconciliationLoop",
]
