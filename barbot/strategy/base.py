# barbot/strategy/base.py
"""Strategy contract and loading."""

import importlib
from typing import Awaitable, Protocol, runtime_checkable

from barbot.strategy.models import Action, MarketView, TradeIntent


@runtime_checkable
class Strategy(Protocol):
    """Turns a market view into a trade intent.

    Implementations may return the intent directly or an awaitable that
    resolves to it.
    """

    def decide(self, view: MarketView) -> TradeIntent | Awaitable[TradeIntent]:
        ...


class HoldStrategy:
    """Never trades. Default when no strategy is configured."""

    def decide(self, view: MarketView) -> TradeIntent:
        return TradeIntent(action=Action.HOLD, reason="hold_strategy")


def load_strategy(path: str, max_qty: int) -> Strategy:
    """Build a strategy from a ``module:attribute`` path.

    The attribute is called with ``max_qty`` as its only argument, so it can
    be a class or a factory function. The name "hold" selects HoldStrategy.

    Args:
        path: Dotted module path and attribute name separated by a colon.
        max_qty: Maximum quantity the strategy should ask for.

    Returns:
        The strategy instance.

    Raises:
        ValueError: If the path is malformed or does not yield a strategy.
        ImportError: If the module cannot be imported.
    """
    if path == "hold":
        return HoldStrategy()

    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Strategy path must look like 'module:attribute', got {path!r}")

    module = importlib.import_module(module_name)
    try:
        factory = getattr(module, attr)
    except AttributeError as e:
        raise ValueError(f"Module {module_name!r} has no attribute {attr!r}") from e

    strategy = factory(max_qty)
    if not isinstance(strategy, Strategy):
        raise ValueError(f"{path!r} did not produce an object with a decide() method")
    return strategy
