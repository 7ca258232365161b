"""Configuration schemas, loading and hashing."""

from .schema import (
    BacktestConfig,
    ConfirmationType,
    MonteCarloConfig,
    PositionSizing,
    TradeConfig,
)
from .loader import (
    deep_merge,
    load_config,
    resolved_config_hash,
    save_config,
)

__all__ = [
    "BacktestConfig",
    "TradeConfig",
    "MonteCarloConfig",
    "ConfirmationType",
    "PositionSizing",
    "load_config",
    "resolved_config_hash",
    "save_config",
    "deep_merge",
]
