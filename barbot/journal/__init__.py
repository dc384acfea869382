# barbot/journal/__init__.py
"""Journal module for the decision audit trail."""

from .decision_log import DecisionLog
from .models import DecisionRecord, DecisionResult

__all__ = ["DecisionLog", "DecisionRecord", "DecisionResult"]
