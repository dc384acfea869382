# barbot/orchestrator/__init__.py
"""Orchestrator module for running the bot."""

from .models import OrchestratorState
from .trading_orchestrator import TradingOrchestrator, generate_run_id

__all__ = ["OrchestratorState", "TradingOrchestrator", "generate_run_id"]
