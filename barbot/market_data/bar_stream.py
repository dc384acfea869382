# barbot/market_data/bar_stream.py
"""Live bar feed backed by the Alpaca market data websocket."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from alpaca.data.enums import DataFeed
from alpaca.data.live.stock import StockDataStream

from barbot.market_data.models import Bar


logger = logging.getLogger(__name__)

BarHandler = Callable[[Bar], Awaitable[object]]


def _to_utc(timestamp: datetime) -> datetime:
    """Normalize a stream timestamp to an aware UTC datetime."""
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


class AlpacaBarStream:
    """Pushes bars for one symbol to an async handler until stopped.

    Bars are delivered one at a time; the next bar is not dispatched until
    the handler for the previous one has returned.

    Attributes:
        TEST_STREAM_URL: Alpaca sandbox stream that publishes FAKEPACA bars.
    """

    TEST_STREAM_URL = "wss://stream.data.alpaca.markets/v2/test"

    def __init__(
        self,
        api_key: str,
        secret_key: str,
        symbol: str,
        feed: str = "iex",
        stream_factory: Callable[..., StockDataStream] = StockDataStream,
    ):
        """Initialize AlpacaBarStream.

        Args:
            api_key: Alpaca API key.
            secret_key: Alpaca secret key.
            symbol: Symbol to subscribe to.
            feed: "iex", "sip" or "test". Unknown values fall back to "iex".
            stream_factory: Callable building the underlying stream client.
        """
        self._api_key = api_key
        self._secret_key = secret_key
        self._symbol = symbol
        self._feed = feed.lower()
        self._stream_factory = stream_factory

    @property
    def symbol(self) -> str:
        """Return the subscribed symbol."""
        return self._symbol

    def _create_stream(self) -> StockDataStream:
        if self._feed == "test":
            return self._stream_factory(
                self._api_key,
                self._secret_key,
                url_override=self.TEST_STREAM_URL,
            )
        feed = DataFeed.SIP if self._feed == "sip" else DataFeed.IEX
        return self._stream_factory(self._api_key, self._secret_key, feed=feed)

    async def run(self, handler: BarHandler, stop_event: asyncio.Event) -> None:
        """Stream bars into ``handler`` until ``stop_event`` is set.

        Args:
            handler: Coroutine function called once per bar.
            stop_event: Shared shutdown signal.

        Raises:
            Exception: Whatever error ended the stream, once it has ended.
        """
        stream = self._create_stream()

        async def on_bar(raw) -> None:
            bar = Bar(
                symbol=raw.symbol,
                timestamp=_to_utc(raw.timestamp),
                close=float(raw.close),
            )
            logger.debug(f"Received bar symbol={bar.symbol} close={bar.close:.2f}")
            await handler(bar)

        stream.subscribe_bars(on_bar, self._symbol)
        logger.info(f"Subscribed to bars for {self._symbol} (feed={self._feed})")

        stream_task = asyncio.create_task(stream._run_forever())
        stop_task = asyncio.create_task(stop_event.wait())
        try:
            done, _ = await asyncio.wait(
                {stream_task, stop_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            stop_task.cancel()
            if not stream_task.done():
                await stream.stop_ws()
                stream_task.cancel()
                try:
                    await stream_task
                except asyncio.CancelledError:
                    pass

        if stream_task in done:
            # Re-raises the error that ended the stream, if any
            stream_task.result()
        logger.info(f"Bar stream for {self._symbol} stopped")
