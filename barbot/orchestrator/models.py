# barbot/orchestrator/models.py
"""Data models for the trading orchestrator."""

from enum import Enum


class OrchestratorState(Enum):
    """State of the trading orchestrator."""

    STOPPED = "stopped"
    RUNNING = "running"
    STOPPING = "stopping"
