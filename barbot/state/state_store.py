# barbot/state/state_store.py
"""Concurrency-safe store for position, open orders and timestamps."""

import json
import logging
import os
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

from barbot.state.models import OpenOrder, Position, Snapshot


logger = logging.getLogger(__name__)


class ReadWriteLock:
    """Shared/exclusive lock: many readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        """Hold the lock in shared mode."""
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Hold the lock in exclusive mode."""
        with self._cond:
            while self._writing or self._readers > 0:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


def _time_to_str(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _str_to_time(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def snapshot_to_dict(snapshot: Snapshot) -> dict:
    """Convert a Snapshot to a dictionary for JSON storage."""
    return {
        "position": {
            "qty": snapshot.position.qty,
            "avg_entry": snapshot.position.avg_entry,
        },
        "open_orders": {
            key: {
                "client_order_id": order.client_order_id,
                "order_id": order.order_id,
                "status": order.status,
            }
            for key, order in snapshot.open_orders.items()
        },
        "last_trade_time": _time_to_str(snapshot.last_trade_time),
        "last_bar_time": _time_to_str(snapshot.last_bar_time),
    }


def dict_to_snapshot(data: dict) -> Snapshot:
    """Convert a dictionary from JSON to a Snapshot.

    A missing or null ``open_orders`` becomes an empty mapping.

    Raises:
        ValueError: If the data does not describe a snapshot.
    """
    if not isinstance(data, dict):
        raise ValueError("snapshot must be a JSON object")
    try:
        position_data = data.get("position") or {}
        position = Position(
            qty=int(position_data.get("qty", 0)),
            avg_entry=float(position_data.get("avg_entry", 0.0)),
        )
        open_orders = {
            key: OpenOrder(
                client_order_id=order["client_order_id"],
                order_id=order["order_id"],
                status=order["status"],
            )
            for key, order in (data.get("open_orders") or {}).items()
        }
        return Snapshot(
            position=position,
            open_orders=open_orders,
            last_trade_time=_str_to_time(data.get("last_trade_time")),
            last_bar_time=_str_to_time(data.get("last_bar_time")),
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"malformed snapshot: {e}") from e


class StateStore:
    """Holds the bot's believed world state.

    Shared by the bar-handling path and the reconciliation path. Reads take
    the lock in shared mode; every mutation is exclusive. Each mutator
    updates a single field group.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._snapshot = Snapshot()

    def snapshot(self) -> Snapshot:
        """Return a deep copy of the current state."""
        with self._lock.read():
            return self._snapshot.copy()

    def update_position(self, position: Position) -> None:
        """Replace the current position."""
        with self._lock.write():
            old_qty = self._snapshot.position.qty
            self._snapshot.position = position
        if old_qty != position.qty:
            logger.info(
                f"Position updated: qty {old_qty} -> {position.qty} "
                f"(avg_entry={position.avg_entry:.2f})"
            )

    def set_open_orders(self, orders: dict[str, OpenOrder]) -> None:
        """Replace the entire open-orders mapping."""
        orders = dict(orders)
        with self._lock.write():
            old_count = len(self._snapshot.open_orders)
            self._snapshot.open_orders = orders
        if old_count != len(orders):
            logger.info(f"Open orders updated: {old_count} -> {len(orders)}")

    def merge_open_order(self, order: OpenOrder) -> None:
        """Insert or overwrite a single open order, keeping all others."""
        with self._lock.write():
            self._snapshot.open_orders[order.client_order_id] = order
            count = len(self._snapshot.open_orders)
        logger.info(f"Open order tracked: {order.client_order_id} ({count} open)")

    def set_last_trade_time(self, value: datetime) -> None:
        """Record when the last order was submitted."""
        with self._lock.write():
            self._snapshot.last_trade_time = value

    def set_last_bar_time(self, value: datetime) -> None:
        """Record the close time of the latest bar."""
        with self._lock.write():
            self._snapshot.last_bar_time = value

    def save(self, path: str | Path) -> None:
        """Write the current state to ``path``, replacing any prior file.

        Raises:
            OSError: If the file cannot be written.
        """
        path = Path(path)
        snapshot = self.snapshot()
        payload = json.dumps(snapshot_to_dict(snapshot), indent=2)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            tmp_path.write_text(payload)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"State save failed ({path}): {e}")
            raise
        logger.info(
            f"State saved to {path} (position_qty={snapshot.position.qty}, "
            f"open_orders={len(snapshot.open_orders)})"
        )

    def load(self, path: str | Path) -> None:
        """Replace in-memory state with the snapshot stored at ``path``.

        The store is left untouched if reading or parsing fails.

        Raises:
            FileNotFoundError: If there is no snapshot file.
            OSError: If the file cannot be read.
            ValueError: If the file is not a valid snapshot.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text())
            snapshot = dict_to_snapshot(data)
        except (OSError, ValueError) as e:
            logger.error(f"State load failed ({path}): {e}")
            raise

        with self._lock.write():
            self._snapshot = snapshot
        logger.info(
            f"State loaded from {path} (position_qty={snapshot.position.qty}, "
            f"open_orders={len(snapshot.open_orders)}, "
            f"last_trade={_time_to_str(snapshot.last_trade_time)})"
        )
