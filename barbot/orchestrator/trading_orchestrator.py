# barbot/orchestrator/trading_orchestrator.py
"""Runs the bar stream and the reconciliation loop side by side."""

import asyncio
import logging
import secrets
from datetime import datetime, timezone
from pathlib import Path

from barbot.engine.decision_engine import DecisionEngine
from barbot.engine.reconciler import ReconciliationLoop
from barbot.journal.decision_log import DecisionLog
from barbot.market_data.bar_stream import AlpacaBarStream
from barbot.orchestrator.models import OrchestratorState
from barbot.state.state_store import StateStore


logger = logging.getLogger(__name__)


def generate_run_id() -> str:
    """Return a run identifier like ``20260119T143005-1a2b3c4d`` (UTC)."""
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    return f"{timestamp}-{secrets.token_hex(4)}"


class TradingOrchestrator:
    """Coordinates one run of the bot.

    The bar stream feeds the decision engine; in paper mode a reconciliation
    loop runs alongside it. Both observe the same stop event. On stop the
    decision log is closed and the state snapshot is saved.

    Attributes:
        SHUTDOWN_GRACE_SECONDS: How long stop() lets tasks finish before
            cancelling them.
    """

    SHUTDOWN_GRACE_SECONDS = 5.0

    def __init__(
        self,
        bar_stream: AlpacaBarStream,
        engine: DecisionEngine,
        state_store: StateStore,
        decision_log: DecisionLog,
        checkpoint_path: str | Path,
        reconciler: ReconciliationLoop | None = None,
        stop_event: asyncio.Event | None = None,
    ):
        self._stream = bar_stream
        self._engine = engine
        self._state_store = state_store
        self._decision_log = decision_log
        self._checkpoint_path = Path(checkpoint_path)
        self._reconciler = reconciler
        self._stop_event = stop_event or asyncio.Event()

        self._state = OrchestratorState.STOPPED
        self._stream_task: asyncio.Task | None = None
        self._reconcile_task: asyncio.Task | None = None

    @property
    def state(self) -> OrchestratorState:
        """Return the current orchestrator state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Return True if the orchestrator is in RUNNING state."""
        return self._state == OrchestratorState.RUNNING

    @property
    def stop_event(self) -> asyncio.Event:
        """Return the shared shutdown signal."""
        return self._stop_event

    async def start(self) -> None:
        """Open the decision log and start background tasks."""
        if self._state != OrchestratorState.STOPPED:
            raise RuntimeError("Orchestrator already running")

        await self._decision_log.open()
        self._state = OrchestratorState.RUNNING
        logger.info(f"Starting trading orchestrator (run_id={self._engine.run_id})")

        self._stream_task = asyncio.create_task(self._run_stream())
        if self._reconciler is not None:
            self._reconcile_task = asyncio.create_task(
                self._reconciler.run(self._stop_event)
            )

        logger.info("Trading orchestrator started")

    async def stop(self) -> None:
        """Stop background tasks, close the log and save the snapshot."""
        if self._state == OrchestratorState.STOPPED:
            return

        self._state = OrchestratorState.STOPPING
        logger.info("Stopping trading orchestrator")
        self._stop_event.set()

        tasks = [t for t in (self._stream_task, self._reconcile_task) if t is not None]
        if tasks:
            await asyncio.wait(tasks, timeout=self.SHUTDOWN_GRACE_SECONDS)
        for task in tasks:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error(f"Background task failed: {e}")

        try:
            await self._decision_log.close()
        except OSError as e:
            logger.error(f"Failed to close decision log: {e}")

        try:
            self._state_store.save(self._checkpoint_path)
        except OSError as e:
            logger.error(f"Failed to save checkpoint: {e}")

        self._state = OrchestratorState.STOPPED
        logger.info("Trading orchestrator stopped")

    async def run(self) -> None:
        """Start, wait for the stop event, then stop."""
        await self.start()
        try:
            await self._stop_event.wait()
        finally:
            await self.stop()

    async def _run_stream(self) -> None:
        """Feed bars to the engine; a stream that ends stops the run."""
        try:
            await self._stream.run(self._engine.on_bar, self._stop_event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Market data stream stopped: {e}")
        finally:
            self._stop_event.set()
