# main.py
"""Main entry point for the bar-driven trading bot."""
import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from barbot.config.settings import RunMode, Settings
from barbot.engine import DecisionEngine, ReconciliationLoop
from barbot.execution import AlpacaBroker
from barbot.journal import DecisionLog
from barbot.market_data import AlpacaBarStream
from barbot.orchestrator import TradingOrchestrator, generate_run_id
from barbot.risk import RiskGate
from barbot.state import StateStore
from barbot.strategy import load_strategy


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='[%(asctime)s] %(levelname)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags. Unset flags leave the config file value."""
    parser = argparse.ArgumentParser(description="Bar-driven trading bot")
    parser.add_argument("--config", type=Path, default=None, help="path to YAML config file")
    parser.add_argument("--mode", choices=[m.value for m in RunMode], help="run mode")
    parser.add_argument("--symbol", help="trading symbol")
    parser.add_argument("--feed", help="market data feed: iex, sip or test")
    parser.add_argument("--strategy", help="'hold' or 'module:attribute'")
    parser.add_argument("--max-qty", type=int, help="max position size")
    parser.add_argument("--max-notional", type=float, help="max notional per order")
    parser.add_argument("--cooldown", type=float, help="cooldown between trades (seconds)")
    parser.add_argument(
        "--kill-switch",
        action="store_true",
        default=None,
        help="never approve an order",
    )
    parser.add_argument("--decisions-path", help="path to decisions log")
    parser.add_argument("--checkpoint-path", help="path to checkpoint file")
    return parser.parse_args(argv)


def load_and_validate_config(args: argparse.Namespace) -> Settings:
    """Load and validate configuration.

    Returns:
        Settings object loaded from YAML, environment and flags.

    Raises:
        SystemExit: If an explicit config file is missing or settings are invalid.
    """
    load_dotenv()

    config_path = args.config
    if config_path is not None and not config_path.exists():
        logger.error(f"{config_path} not found")
        sys.exit(1)

    overrides = {
        "trading": {
            "mode": args.mode,
            "symbol": args.symbol,
            "feed": args.feed,
            "strategy": args.strategy,
            "max_qty": args.max_qty,
            "max_notional": args.max_notional,
            "cooldown_seconds": args.cooldown,
            "kill_switch": args.kill_switch,
        },
        "paths": {
            "decisions_path": args.decisions_path,
            "checkpoint_path": args.checkpoint_path,
        },
    }

    try:
        settings = Settings.from_yaml(config_path or DEFAULT_CONFIG_PATH, overrides)
    except (ValidationError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    return settings


def print_startup_banner(settings: Settings, run_id: str) -> None:
    """Print system startup banner."""
    logger.info("=" * 60)
    logger.info(f"Starting bot run_id={run_id}")
    logger.info(
        f"Mode: {settings.trading.mode.value} | Symbol: {settings.trading.symbol} "
        f"| Feed: {settings.trading.feed} | Strategy: {settings.trading.strategy}"
    )
    logger.info("=" * 60)


def restore_state(store: StateStore, checkpoint_path: str) -> None:
    """Load the checkpoint if there is one. A missing file means a fresh start."""
    try:
        store.load(checkpoint_path)
        logger.info(f"Loaded checkpoint from {checkpoint_path}")
    except FileNotFoundError:
        logger.info(f"No checkpoint at {checkpoint_path}, starting fresh")
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable checkpoint: {e}")


def build_orchestrator(settings: Settings, run_id: str) -> TradingOrchestrator:
    """Wire all components for one run."""
    trading = settings.trading

    try:
        strategy = load_strategy(trading.strategy, trading.max_qty)
    except (ImportError, ValueError) as e:
        logger.error(f"Failed to load strategy {trading.strategy!r}: {e}")
        sys.exit(1)

    store = StateStore()
    restore_state(store, settings.paths.checkpoint_path)

    decision_log = DecisionLog(settings.paths.decisions_path, run_id)

    broker = None
    reconciler = None
    if trading.mode == RunMode.PAPER:
        broker = AlpacaBroker(
            api_key=settings.alpaca.api_key_id,
            secret_key=settings.alpaca.api_secret_key,
            base_url=settings.alpaca.paper_base_url,
        )
        reconciler = ReconciliationLoop(
            broker=broker,
            state_store=store,
            symbol=trading.symbol,
            interval_seconds=trading.reconcile_interval_seconds,
        )

    engine = DecisionEngine(
        settings=trading,
        strategy=strategy,
        risk_gate=RiskGate(),
        broker=broker,
        state_store=store,
        decision_log=decision_log,
    )

    bar_stream = AlpacaBarStream(
        api_key=settings.alpaca.api_key_id,
        secret_key=settings.alpaca.api_secret_key,
        symbol=trading.symbol,
        feed=trading.feed,
    )

    return TradingOrchestrator(
        bar_stream=bar_stream,
        engine=engine,
        state_store=store,
        decision_log=decision_log,
        checkpoint_path=settings.paths.checkpoint_path,
        reconciler=reconciler,
    )


async def run(settings: Settings) -> None:
    """Run the bot until SIGINT/SIGTERM or the stream ends."""
    run_id = generate_run_id()
    print_startup_banner(settings, run_id)

    orchestrator = build_orchestrator(settings, run_id)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, orchestrator.stop_event.set)

    await orchestrator.run()
    logger.info("Bot shutdown complete")


def main(argv: list[str] | None = None) -> None:
    """Console entry point."""
    settings = load_and_validate_config(parse_args(argv))
    asyncio.run(run(settings))


if __name__ == "__main__":
    main()
