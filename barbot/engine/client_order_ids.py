# barbot/engine/client_order_ids.py
"""Client order ID generation."""

import threading


class ClientOrderIdGenerator:
    """Issues ``{run_id}-{sequence}`` IDs with a strictly increasing sequence.

    The counter is incremented under a lock, so concurrent callers never
    receive the same ID.
    """

    def __init__(self, run_id: str, start: int = 0) -> None:
        self._run_id = run_id
        self._sequence = start
        self._lock = threading.Lock()

    @property
    def run_id(self) -> str:
        """Return the run identifier used as the ID prefix."""
        return self._run_id

    @property
    def last_sequence(self) -> int:
        """Return the most recently issued sequence number (0 if none)."""
        with self._lock:
            return self._sequence

    def next_id(self) -> str:
        """Return the next client order ID."""
        with self._lock:
            self._sequence += 1
            sequence = self._sequence
        return f"{self._run_id}-{sequence}"
