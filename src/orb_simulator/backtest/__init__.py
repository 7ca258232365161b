"""Backtest engine."""

from .engine import (
    BacktestEngine,
    BacktestResult,
    BacktestTrade,
    DailyResult,
    EquityPoint,
    run_backtest,
)

__all__ = [
    "BacktestEngine",
    "BacktestResult",
    "BacktestTrade",
    "DailyResult",
    "EquityPoint",
    "run_backtest",
]
