"""State module for the bot's believed position and open orders."""

from .models import OpenOrder, Position, Snapshot
from .state_store import ReadWriteLock, StateStore

__all__ = ["OpenOrder", "Position", "ReadWriteLock", "Snapshot", "StateStore"]
