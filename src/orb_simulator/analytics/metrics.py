"""Performance metrics calculation.

Computes trade statistics, drawdowns and risk-adjusted returns from a
backtest's net trades, equity curve and daily returns.
"""

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence

import numpy as np
import pandas as pd

TRADING_DAYS_PER_YEAR = 252

EQUITY_COLUMNS = [
    "day",
    "date",
    "equity",
    "pnl",
    "drawdown",
    "drawdown_pct",
    "trade_count",
]


@dataclass
class PerformanceMetrics:
    """Performance metrics summary.

    Attributes:
        total_trades: Total number of trades
        winners: Trades with positive net P&L
        losers: Trades with net P&L <= 0
        win_rate: Win rate (percent)
        total_pnl: Sum of net P&L
        gross_profit: Sum of winning net P&L
        gross_loss: Absolute sum of losing net P&L
        profit_factor: gross_profit / gross_loss (inf without losses)
        expectancy: Net P&L per trade
        avg_win: Average winning trade
        avg_loss: Average losing trade (absolute)
        largest_win: Best trade
        largest_loss: Worst trade (negative or zero)
        max_drawdown: Largest peak-to-trough equity drop ($)
        max_drawdown_pct: Largest drop as percent of the running peak
        longest_drawdown_days: Longest peak-to-recovery span (trading days)
        sharpe_ratio: Annualized Sharpe of daily returns
        sortino_ratio: Annualized Sortino of daily returns
        annualized_return: Mean daily return x 252 (percent)
        max_consecutive_wins: Longest winning streak
        max_consecutive_losses: Longest losing streak
        avg_duration_minutes: Average holding time
        long_trades: Long trade count
        short_trades: Short trade count
        long_win_rate: Long win rate (percent)
        short_win_rate: Short win rate (percent)
        avg_win_loss_ratio: avg_win / avg_loss
        final_equity: Last equity on the curve
        total_return_pct: Final equity vs starting capital (percent)
    """

    total_trades: int = 0
    winners: int = 0
    losers: int = 0
    win_rate: float = 0.0

    total_pnl: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    profit_factor: float = 0.0
    expectancy: float = 0.0

    avg_win: float = 0.0
    avg_loss: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0

    max_drawdown: float = 0.0
    max_drawdown_pct: float = 0.0
    longest_drawdown_days: int = 0

    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    annualized_return: float = 0.0

    max_consecutive_wins: int = 0
    max_consecutive_losses: int = 0
    avg_duration_minutes: float = 0.0

    long_trades: int = 0
    short_trades: int = 0
    long_win_rate: float = 0.0
    short_win_rate: float = 0.0
    avg_win_loss_ratio: float = 0.0

    final_equity: float = 0.0
    total_return_pct: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dict."""
        return asdict(self)


def _win_rate(pnls: Sequence[float]) -> float:
    if not pnls:
        return 0.0
    return round(sum(1 for p in pnls if p > 0) / len(pnls) * 100, 1)


def _max_consecutive(pnls: Sequence[float], winners: bool = True) -> int:
    """Longest run of winners (net > 0) or losers (net <= 0)."""
    max_streak = 0
    current_streak = 0

    for pnl in pnls:
        if (pnl > 0) == winners:
            current_streak += 1
            max_streak = max(max_streak, current_streak)
        else:
            current_streak = 0

    return max_streak


def compute_drawdown_stats(equity_curve: Sequence[Any], starting_capital: float) -> Dict[str, float]:
    """Max drawdown and longest drawdown span over an equity curve.

    The running peak starts at ``starting_capital``. A drawdown's length is
    the number of days between consecutive peaks, so back-to-back new highs
    count as 1. A drawdown still open on the last point is not counted.

    Args:
        equity_curve: Points with ``day`` and ``equity`` attributes.
        starting_capital: Initial peak.

    Returns:
        Dict with max_drawdown, max_drawdown_pct, longest_drawdown_days.
    """
    max_dd = 0.0
    max_dd_pct = 0.0
    longest = 0
    peak = starting_capital
    peak_day = equity_curve[0].day if equity_curve else 0

    for point in equity_curve:
        if point.equity >= peak:
            longest = max(longest, point.day - peak_day)
            peak = point.equity
            peak_day = point.day

        drawdown = peak - point.equity
        drawdown_pct = drawdown / peak * 100 if peak > 0 else 0.0
        max_dd = max(max_dd, drawdown)
        max_dd_pct = max(max_dd_pct, drawdown_pct)

    return {
        "max_drawdown": round(max_dd, 2),
        "max_drawdown_pct": round(max_dd_pct, 2),
        "longest_drawdown_days": int(longest),
    }


def compute_risk_ratios(daily_returns: Sequence[float]) -> Dict[str, float]:
    """Annualized return, Sharpe and Sortino from daily percent returns.

    Sharpe uses the sample standard deviation (0 with fewer than two days).
    Sortino uses the root mean square of the negative returns and needs at
    least two of them.
    """
    returns = np.asarray(daily_returns, dtype=float)
    if returns.size == 0:
        return {"annualized_return": 0.0, "sharpe_ratio": 0.0, "sortino_ratio": 0.0}

    mean_return = float(returns.mean())
    std_return = float(returns.std(ddof=1)) if returns.size > 1 else 0.0

    downside = returns[returns < 0]
    downside_dev = float(np.sqrt(np.mean(downside ** 2))) if downside.size > 1 else 0.0

    annualized_return = mean_return * TRADING_DAYS_PER_YEAR
    annualized_std = std_return * math.sqrt(TRADING_DAYS_PER_YEAR)
    annualized_downside = downside_dev * math.sqrt(TRADING_DAYS_PER_YEAR)

    sharpe = annualized_return / annualized_std if annualized_std > 0 else 0.0
    sortino = annualized_return / annualized_downside if annualized_downside > 0 else 0.0

    return {
        "annualized_return": round(annualized_return, 2),
        "sharpe_ratio": round(sharpe, 2),
        "sortino_ratio": round(sortino, 2),
    }


def compute_metrics(
    trades: Sequence[Any],
    equity_curve: Sequence[Any],
    daily_returns: Sequence[float],
    starting_capital: float,
) -> PerformanceMetrics:
    """Compute comprehensive performance metrics.

    Args:
        trades: Net trades with ``net_pnl``, ``direction`` and
            ``duration_minutes``.
        equity_curve: Equity points with ``day`` and ``equity``.
        daily_returns: Daily percent returns.
        starting_capital: Starting equity.

    Returns:
        PerformanceMetrics with all statistics.

    Examples:
        >>> metrics = compute_metrics(result.trades, result.equity_curve,
        ...                           result.daily_returns, 100_000)
        >>> print(f"Win rate: {metrics.win_rate:.1f}%")
        >>> print(f"Sharpe: {metrics.sharpe_ratio:.2f}")
    """
    pnls = [t.net_pnl for t in trades]
    winners = [p for p in pnls if p > 0]
    losers = [p for p in pnls if p <= 0]

    total_pnl = sum(pnls)
    gross_profit = sum(winners)
    gross_loss = abs(sum(losers))

    if gross_loss > 0:
        profit_factor = gross_profit / gross_loss
    elif gross_profit > 0:
        profit_factor = float("inf")
    else:
        profit_factor = 0.0

    avg_win = gross_profit / len(winners) if winners else 0.0
    avg_loss = gross_loss / len(losers) if losers else 0.0

    durations = [t.duration_minutes for t in trades if t.duration_minutes is not None]
    long_pnls = [t.net_pnl for t in trades if t.direction.value == "LONG"]
    short_pnls = [t.net_pnl for t in trades if t.direction.value == "SHORT"]

    final_equity = equity_curve[-1].equity if equity_curve else 0.0
    total_return_pct = (
        (final_equity - starting_capital) / starting_capital * 100
        if equity_curve and starting_capital > 0
        else 0.0
    )

    return PerformanceMetrics(
        total_trades=len(pnls),
        winners=len(winners),
        losers=len(losers),
        win_rate=_win_rate(pnls),
        total_pnl=round(total_pnl, 2),
        gross_profit=round(gross_profit, 2),
        gross_loss=round(gross_loss, 2),
        profit_factor=round(profit_factor, 2),
        expectancy=round(total_pnl / len(pnls), 2) if pnls else 0.0,
        avg_win=round(avg_win, 2),
        avg_loss=round(avg_loss, 2),
        largest_win=round(max(winners), 2) if winners else 0.0,
        largest_loss=round(min(losers), 2) if losers else 0.0,
        max_consecutive_wins=_max_consecutive(pnls, winners=True),
        max_consecutive_losses=_max_consecutive(pnls, winners=False),
        avg_duration_minutes=round(float(np.mean(durations)), 0) if durations else 0.0,
        long_trades=len(long_pnls),
        short_trades=len(short_pnls),
        long_win_rate=_win_rate(long_pnls),
        short_win_rate=_win_rate(short_pnls),
        avg_win_loss_ratio=round(avg_win / avg_loss, 2) if avg_loss > 0 else 0.0,
        final_equity=final_equity,
        total_return_pct=round(total_return_pct, 2),
        **compute_drawdown_stats(equity_curve, starting_capital),
        **compute_risk_ratios(daily_returns),
    )


def equity_curve_frame(equity_curve: Sequence[Any]) -> pd.DataFrame:
    """Convert equity points to a DataFrame.

    Args:
        equity_curve: EquityPoint objects (day 0 first).

    Returns:
        DataFrame with EQUITY_COLUMNS plus flattened opening-range columns.
    """
    if not equity_curve:
        return pd.DataFrame(columns=EQUITY_COLUMNS)

    records: List[Dict[str, Any]] = [point.to_dict() for point in equity_curve]
    df = pd.DataFrame(records)
    df["running_peak"] = df["equity"].cummax()
    return df
