# tests/state/test_state_store.py
"""Tests for StateStore."""
import json
import threading
from datetime import datetime, timezone

import pytest

from barbot.state.models import OpenOrder, Position, Snapshot
from barbot.state.state_store import ReadWriteLock, StateStore


def make_order(client_order_id: str = "run-1", order_id: str = "abc") -> OpenOrder:
    """Create an OpenOrder with sensible defaults."""
    return OpenOrder(client_order_id=client_order_id, order_id=order_id, status="new")


class TestStateStoreDefaults:
    """Tests for a freshly constructed store."""

    def test_fresh_snapshot(self):
        """A new store is flat with no orders and no timestamps."""
        snapshot = StateStore().snapshot()

        assert snapshot.position == Position(qty=0, avg_entry=0.0)
        assert snapshot.open_orders == {}
        assert snapshot.last_trade_time is None
        assert snapshot.last_bar_time is None

    def test_instances_are_independent(self):
        """Two stores never share state."""
        first, second = StateStore(), StateStore()
        first.update_position(Position(qty=3, avg_entry=10.0))

        assert second.snapshot().position.qty == 0


class TestStateStoreUpdates:
    """Tests for the single-field mutators."""

    @pytest.fixture
    def store(self):
        return StateStore()

    def test_update_position(self, store):
        store.update_position(Position(qty=2, avg_entry=101.5))

        assert store.snapshot().position == Position(qty=2, avg_entry=101.5)

    def test_set_open_orders_replaces_mapping(self, store):
        """set_open_orders drops entries not in the new mapping."""
        store.merge_open_order(make_order("run-1"))
        store.set_open_orders({"run-2": make_order("run-2")})

        assert list(store.snapshot().open_orders) == ["run-2"]

    def test_merge_open_order_keeps_existing(self, store):
        """merge_open_order only adds or overwrites one key."""
        store.set_open_orders({"run-1": make_order("run-1")})
        store.merge_open_order(make_order("run-2"))

        assert set(store.snapshot().open_orders) == {"run-1", "run-2"}

    def test_set_open_orders_copies_argument(self, store):
        """Mutating the caller's dict afterwards does not leak into the store."""
        orders = {"run-1": make_order("run-1")}
        store.set_open_orders(orders)
        orders["run-2"] = make_order("run-2")

        assert list(store.snapshot().open_orders) == ["run-1"]

    def test_timestamps(self, store):
        trade_time = datetime(2026, 1, 5, 15, 0, tzinfo=timezone.utc)
        bar_time = datetime(2026, 1, 5, 15, 1, tzinfo=timezone.utc)

        store.set_last_trade_time(trade_time)
        store.set_last_bar_time(bar_time)

        snapshot = store.snapshot()
        assert snapshot.last_trade_time == trade_time
        assert snapshot.last_bar_time == bar_time


class TestSnapshotIsolation:
    """Snapshots never observe later mutation."""

    def test_later_merge_does_not_change_old_snapshot(self):
        store = StateStore()
        store.merge_open_order(make_order("run-1"))
        before = store.snapshot()

        store.merge_open_order(make_order("run-2"))
        store.set_open_orders({})

        assert list(before.open_orders) == ["run-1"]

    def test_mutating_snapshot_does_not_change_store(self):
        store = StateStore()
        snapshot = store.snapshot()
        snapshot.open_orders["run-9"] = make_order("run-9")

        assert store.snapshot().open_orders == {}


class TestPersistence:
    """Tests for save/load."""

    def test_round_trip(self, tmp_path):
        """Saving then loading reproduces position, orders and timestamps."""
        path = tmp_path / "checkpoint.json"
        store = StateStore()
        store.update_position(Position(qty=1, avg_entry=101.25))
        store.set_open_orders({"run-1": make_order("run-1", "order-1")})
        store.set_last_trade_time(datetime(2026, 1, 5, 15, 0, tzinfo=timezone.utc))
        store.set_last_bar_time(datetime(2026, 1, 5, 15, 1, tzinfo=timezone.utc))
        store.save(path)

        restored = StateStore()
        restored.load(path)

        assert restored.snapshot() == store.snapshot()

    def test_save_overwrites(self, tmp_path):
        path = tmp_path / "checkpoint.json"
        path.write_text("stale")
        StateStore().save(path)

        data = json.loads(path.read_text())
        assert data["position"] == {"qty": 0, "avg_entry": 0.0}
        assert data["open_orders"] == {}

    def test_load_defaults_missing_open_orders(self, tmp_path):
        """A snapshot without open_orders loads as an empty mapping."""
        path = tmp_path / "checkpoint.json"
        path.write_text(json.dumps({"position": {"qty": 2, "avg_entry": 5.0}, "open_orders": None}))

        store = StateStore()
        store.load(path)

        snapshot = store.snapshot()
        assert snapshot.open_orders == {}
        assert snapshot.position == Position(qty=2, avg_entry=5.0)

    def test_load_missing_file_raises_and_keeps_state(self, tmp_path):
        store = StateStore()
        store.update_position(Position(qty=1, avg_entry=9.0))

        with pytest.raises(FileNotFoundError):
            store.load(tmp_path / "nope.json")

        assert store.snapshot().position.qty == 1

    @pytest.mark.parametrize("content", ["{not json", "[]", '{"open_orders": {"x": {}}}'])
    def test_load_malformed_file_raises_and_keeps_state(self, tmp_path, content):
        path = tmp_path / "checkpoint.json"
        path.write_text(content)
        store = StateStore()

        with pytest.raises(ValueError):
            store.load(path)

        assert store.snapshot() == Snapshot()

    def test_save_to_missing_directory_raises(self, tmp_path):
        with pytest.raises(OSError):
            StateStore().save(tmp_path / "missing" / "checkpoint.json")


class TestReadWriteLock:
    """Tests for the shared/exclusive lock."""

    def test_readers_do_not_block_each_other(self):
        """Two readers can hold the lock at the same time."""
        lock = ReadWriteLock()
        both_inside = threading.Barrier(2, timeout=2)
        errors: list[Exception] = []

        def reader():
            try:
                with lock.read():
                    both_inside.wait()
            except threading.BrokenBarrierError as e:
                errors.append(e)

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []

    def test_writer_excludes_readers(self):
        """A reader waits while a writer holds the lock."""
        lock = ReadWriteLock()
        events: list[str] = []
        writer_inside = threading.Event()
        release_writer = threading.Event()

        def writer():
            with lock.write():
                writer_inside.set()
                release_writer.wait(2)
                events.append("write")

        def reader():
            writer_inside.wait(2)
            with lock.read():
                events.append("read")

        w = threading.Thread(target=writer)
        r = threading.Thread(target=reader)
        w.start()
        r.start()
        writer_inside.wait(2)
        release_writer.set()
        w.join()
        r.join()

        assert events == ["write", "read"]

    def test_concurrent_merges_are_not_lost(self):
        """Merges from many threads all land in the mapping."""
        store = StateStore()

        def worker(prefix: int):
            for i in range(50):
                store.merge_open_order(make_order(f"{prefix}-{i}"))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store.snapshot().open_orders) == 200
