# tests/market_data/test_bar_stream.py
"""Tests for AlpacaBarStream."""
import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from alpaca.data.enums import DataFeed

from barbot.market_data.bar_stream import AlpacaBarStream
from barbot.market_data.models import Bar


class FakeStream:
    """Stand-in for StockDataStream that replays a fixed list of bars."""

    def __init__(self, bars, error: Exception | None = None, hold_open: bool = True):
        self._bars = bars
        self._error = error
        self._hold_open = hold_open
        self._handler = None
        self.subscribed: tuple = ()
        self.stopped = False

    def subscribe_bars(self, handler, *symbols):
        self._handler = handler
        self.subscribed = symbols

    async def _run_forever(self):
        for bar in self._bars:
            await self._handler(bar)
        if self._error is not None:
            raise self._error
        if self._hold_open:
            await asyncio.Event().wait()

    async def stop_ws(self):
        self.stopped = True


def raw_bar(close: float, minute: int = 0) -> SimpleNamespace:
    return SimpleNamespace(
        symbol="FAKEPACA",
        timestamp=datetime(2026, 1, 5, 15, minute),
        close=close,
    )


class TestStreamCreation:
    """Tests for feed selection."""

    def test_test_feed_uses_sandbox_url(self):
        """The test feed points the client at the sandbox stream."""
        factory = MagicMock()
        stream = AlpacaBarStream("key", "secret", "FAKEPACA", feed="test", stream_factory=factory)

        stream._create_stream()

        factory.assert_called_once_with(
            "key", "secret", url_override=AlpacaBarStream.TEST_STREAM_URL
        )

    @pytest.mark.parametrize(
        "feed, expected",
        [("sip", DataFeed.SIP), ("iex", DataFeed.IEX), ("bogus", DataFeed.IEX)],
    )
    def test_feed_mapping(self, feed, expected):
        """Known feeds map to DataFeed values; unknown ones fall back to IEX."""
        factory = MagicMock()
        stream = AlpacaBarStream("key", "secret", "AAPL", feed=feed, stream_factory=factory)

        stream._create_stream()

        factory.assert_called_once_with("key", "secret", feed=expected)


class TestStreamRun:
    """Tests for AlpacaBarStream.run."""

    @pytest.mark.asyncio
    async def test_delivers_bars_until_stopped(self):
        """Bars are converted and pushed in order; stop ends the run."""
        fake = FakeStream([raw_bar(100.0, 0), raw_bar(101.5, 1)])
        stream = AlpacaBarStream(
            "key", "secret", "FAKEPACA", feed="test", stream_factory=lambda *a, **k: fake
        )
        stop_event = asyncio.Event()
        received: list[Bar] = []

        async def handler(bar: Bar) -> None:
            received.append(bar)
            if len(received) == 2:
                stop_event.set()

        await asyncio.wait_for(stream.run(handler, stop_event), timeout=2)

        assert [b.close for b in received] == [100.0, 101.5]
        assert received[0].timestamp.tzinfo == timezone.utc
        assert fake.subscribed == ("FAKEPACA",)
        assert fake.stopped is True

    @pytest.mark.asyncio
    async def test_stream_error_surfaces_after_end(self):
        """An error that ends the stream is raised from run()."""
        fake = FakeStream([raw_bar(100.0)], error=ConnectionError("socket closed"))
        stream = AlpacaBarStream(
            "key", "secret", "FAKEPACA", stream_factory=lambda *a, **k: fake
        )
        received: list[Bar] = []

        async def handler(bar: Bar) -> None:
            received.append(bar)

        with pytest.raises(ConnectionError, match="socket closed"):
            await asyncio.wait_for(stream.run(handler, asyncio.Event()), timeout=2)

        assert len(received) == 1
