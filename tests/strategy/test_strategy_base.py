# tests/strategy/test_strategy_base.py
"""Tests for the strategy contract and loader."""
from datetime import datetime, timezone

import pytest

from barbot.strategy.base import HoldStrategy, Strategy, load_strategy
from barbot.strategy.models import Action, MarketView, TradeIntent


class BuyBelowAverage:
    """Buys when the close dips under the SMA. Used as a loadable strategy."""

    def __init__(self, max_qty: int):
        self.max_qty = max_qty

    def decide(self, view: MarketView) -> TradeIntent:
        if view.close < view.sma and view.position_qty < self.max_qty:
            return TradeIntent(action=Action.BUY, qty=1, reason="close_below_sma")
        return TradeIntent(action=Action.HOLD, reason="no_signal")


def not_a_strategy(max_qty: int):
    return object()


@pytest.fixture
def view():
    return MarketView(
        timestamp=datetime(2026, 1, 5, 15, 0, tzinfo=timezone.utc),
        close=99.0,
        sma=100.0,
        position_qty=0,
    )


class TestHoldStrategy:
    """Tests for HoldStrategy."""

    def test_always_holds(self, view):
        intent = HoldStrategy().decide(view)

        assert intent.action == Action.HOLD
        assert intent.qty == 0
        assert intent.reason == "hold_strategy"

    def test_satisfies_protocol(self):
        assert isinstance(HoldStrategy(), Strategy)


class TestLoadStrategy:
    """Tests for load_strategy()."""

    def test_hold_name(self):
        assert isinstance(load_strategy("hold", max_qty=1), HoldStrategy)

    def test_module_attribute_path(self, view):
        strategy = load_strategy(f"{__name__}:BuyBelowAverage", max_qty=3)

        assert isinstance(strategy, BuyBelowAverage)
        assert strategy.max_qty == 3
        assert strategy.decide(view).action == Action.BUY

    @pytest.mark.parametrize("path", ["", "no_colon", ":Attr", "module:"])
    def test_malformed_path(self, path):
        with pytest.raises(ValueError):
            load_strategy(path, max_qty=1)

    def test_missing_module(self):
        with pytest.raises(ImportError):
            load_strategy("barbot.no_such_module:Thing", max_qty=1)

    def test_missing_attribute(self):
        with pytest.raises(ValueError, match="has no attribute"):
            load_strategy(f"{__name__}:Missing", max_qty=1)

    def test_factory_must_produce_strategy(self):
        with pytest.raises(ValueError, match="decide"):
            load_strategy(f"{__name__}:not_a_strategy", max_qty=1)
