# tests/engine/test_client_order_ids.py
"""Tests for ClientOrderIdGenerator."""
import threading

from barbot.engine.client_order_ids import ClientOrderIdGenerator


class TestClientOrderIdGenerator:
    """Tests for client order ID generation."""

    def test_format(self):
        generator = ClientOrderIdGenerator("20260105T150000-abcd1234")

        assert generator.next_id() == "20260105T150000-abcd1234-1"
        assert generator.next_id() == "20260105T150000-abcd1234-2"
        assert generator.last_sequence == 2

    def test_start_offset(self):
        generator = ClientOrderIdGenerator("run", start=41)

        assert generator.next_id() == "run-42"

    def test_unique_across_threads(self):
        generator = ClientOrderIdGenerator("run")
        issued: list[str] = []
        lock = threading.Lock()

        def issue():
            ids = [generator.next_id() for _ in range(200)]
            with lock:
                issued.extend(ids)

        threads = [threading.Thread(target=issue) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(issued) == 1600
        assert len(set(issued)) == 1600
        assert generator.last_sequence == 1600

    def test_sequence_increases_per_thread(self):
        generator = ClientOrderIdGenerator("run")
        sequences: dict[int, list[int]] = {}

        def issue(worker):
            sequences[worker] = [
                int(generator.next_id().rsplit("-", 1)[1]) for _ in range(100)
            ]

        threads = [threading.Thread(target=issue, args=(i,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for values in sequences.values():
            assert values == sorted(values)
            assert len(set(values)) == len(values)
