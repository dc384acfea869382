# barbot/config/settings.py
"""Configuration for the trading bot."""
from datetime import timedelta
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RunMode(str, Enum):
    """How the bot runs.

    STREAM consumes bars and logs decisions without touching the broker.
    PAPER places orders on the Alpaca paper account.
    """

    STREAM = "stream"
    PAPER = "paper"


class TradingSettings(BaseModel):
    """Settings for the decision pipeline."""

    mode: RunMode = RunMode.STREAM
    symbol: str = ""
    feed: str = ""
    strategy: str = "hold"

    bars_window: int = Field(default=50, gt=0)
    sma_window: int = Field(default=20, gt=1)

    # Risk bounds
    max_qty: int = Field(default=1, gt=0)
    max_notional: float = Field(default=200.0, gt=0)
    cooldown_seconds: float = Field(default=120.0, ge=0)
    kill_switch: bool = False
    extended_hours: bool = False

    # Order shape
    order_type: str = "market"
    time_in_force: str = "day"

    reconcile_interval_seconds: float = Field(default=10.0, gt=0)

    @property
    def cooldown(self) -> timedelta:
        """Return the cooldown as a timedelta."""
        return timedelta(seconds=self.cooldown_seconds)

    @model_validator(mode="after")
    def apply_mode_defaults(self) -> "TradingSettings":
        """Fill symbol/feed from the mode and check window sizes."""
        if self.bars_window < self.sma_window:
            raise ValueError("bars_window must be >= sma_window")

        if self.mode == RunMode.STREAM:
            self.symbol = self.symbol or "FAKEPACA"
            self.feed = self.feed or "test"
        else:
            self.symbol = self.symbol or "AAPL"
            self.feed = self.feed or "iex"
        return self


class PathsSettings(BaseModel):
    """File locations for run artifacts."""

    decisions_path: str = "decisions.ndjson"
    checkpoint_path: str = "checkpoint.json"


class AlpacaConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="APCA_")

    api_key_id: str = ""
    api_secret_key: str = ""
    paper_base_url: str = "https://paper-api.alpaca.markets"


class Settings(BaseModel):
    trading: TradingSettings = Field(default_factory=TradingSettings)
    paths: PathsSettings = Field(default_factory=PathsSettings)
    alpaca: AlpacaConfig = Field(default_factory=AlpacaConfig)

    @model_validator(mode="after")
    def check_credentials(self) -> "Settings":
        """Paper mode cannot run without API credentials."""
        if self.trading.mode == RunMode.PAPER and (
            not self.alpaca.api_key_id or not self.alpaca.api_secret_key
        ):
            raise ValueError(
                "APCA_API_KEY_ID and APCA_API_SECRET_KEY are required in paper mode"
            )
        return self

    @classmethod
    def from_yaml(cls, path: Path | None, overrides: dict | None = None) -> "Settings":
        """Load settings from YAML file with env var and CLI overrides.

        Args:
            path: YAML file. None or a missing file means defaults only.
            overrides: Values for the ``trading`` and ``paths`` sections that
                take precedence over the file (e.g. from command-line flags).
        """
        data: dict = {}
        if path is not None and Path(path).exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

        for section, values in (overrides or {}).items():
            merged = dict(data.get(section) or {})
            merged.update({k: v for k, v in values.items() if v is not None})
            data[section] = merged

        alpaca = AlpacaConfig()

        return cls(
            **{k: v for k, v in data.items() if k != "alpaca"},
            alpaca=alpaca,
        )
