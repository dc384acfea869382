# barbot/config/__init__.py
"""Configuration module."""

from .settings import AlpacaConfig, PathsSettings, RunMode, Settings, TradingSettings

__all__ = ["AlpacaConfig", "PathsSettings", "RunMode", "Settings", "TradingSettings"]
