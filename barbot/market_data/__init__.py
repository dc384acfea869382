"""Market data module: bars, rolling statistics and the live feed."""

from .bar_stream import AlpacaBarStream, BarHandler
from .models import Bar
from .rolling_stats import (
    InsufficientDataError,
    InvalidWindowError,
    RollingStats,
    RollingStatsError,
)

__all__ = [
    "AlpacaBarStream",
    "Bar",
    "BarHandler",
    "InsufficientDataError",
    "InvalidWindowError",
    "RollingStats",
    "RollingStatsError",
]
