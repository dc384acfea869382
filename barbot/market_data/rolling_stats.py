# barbot/market_data/rolling_stats.py
"""Fixed-capacity rolling window of close prices."""


class RollingStatsError(Exception):
    """Base error for rolling window statistics."""


class InvalidWindowError(RollingStatsError):
    """Raised when a window length is not positive."""


class InsufficientDataError(RollingStatsError):
    """Raised when fewer values than the window have been recorded."""


class RollingStats:
    """Circular buffer of recent close prices.

    Once the buffer reaches capacity each new value overwrites the oldest one.
    Not thread-safe; the decision engine handles bars one at a time.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._values: list[float] = [0.0] * capacity
        self._capacity = capacity
        self._index = 0
        self._filled = False

    @property
    def capacity(self) -> int:
        """Return the maximum number of values kept."""
        return self._capacity

    def __len__(self) -> int:
        if self._filled:
            return self._capacity
        return self._index

    def add(self, price: float) -> None:
        """Record one close price."""
        self._values[self._index] = price
        self._index = (self._index + 1) % self._capacity
        if self._index == 0:
            self._filled = True

    def values(self) -> list[float]:
        """Return stored values, oldest first."""
        if self._filled:
            return self._values[self._index:] + self._values[: self._index]
        return self._values[: self._index]

    def simple_moving_average(self, window: int) -> float:
        """Mean of the most recent ``window`` values.

        Args:
            window: Number of trailing values to average.

        Returns:
            The arithmetic mean.

        Raises:
            InvalidWindowError: If window is not positive.
            InsufficientDataError: If fewer than window values were recorded.
        """
        if window <= 0:
            raise InvalidWindowError(f"window must be positive, got {window}")
        values = self.values()
        if len(values) < window:
            raise InsufficientDataError(
                f"not enough data for SMA: have {len(values)}, need {window}"
            )
        return sum(values[-window:]) / window
