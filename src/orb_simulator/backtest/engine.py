"""Multi-day backtest engine.

Generates a synthetic historical series, runs the ORB strategy day by day
against the running equity, applies trading costs, and computes performance
metrics and an optional Monte Carlo resampling of the trades.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from loguru import logger

from ..analytics.metrics import PerformanceMetrics, compute_metrics
from ..analytics.monte_carlo import MonteCarloResult, run_monte_carlo
from ..config import BacktestConfig, TradeConfig, deep_merge, resolved_config_hash
from ..data.synthetic_provider import DayData, generate_historical_series
from ..execution import ClosedTrade, Direction
from ..features import OpeningRange
from ..strategy import run_day


@dataclass(frozen=True)
class BacktestTrade:
    """Closed trade tagged with its day and trading costs."""

    trade: ClosedTrade
    day: int
    date: str
    ticker: str
    gross_pnl: float
    commission: float
    slippage: float
    net_pnl: float
    return_pct: float

    @property
    def direction(self) -> Direction:
        return self.trade.direction

    @property
    def shares(self) -> int:
        return self.trade.shares

    @property
    def duration_minutes(self) -> int:
        return self.trade.duration_minutes

    def to_dict(self) -> Dict[str, Any]:
        """Flatten trade and cost fields for export."""
        data = self.trade.to_dict()
        data.update(
            {
                "day": self.day,
                "date": self.date,
                "ticker": self.ticker,
                "gross_pnl": self.gross_pnl,
                "commission": self.commission,
                "slippage": self.slippage,
                "net_pnl": self.net_pnl,
                "return_pct": self.return_pct,
            }
        )
        return data


@dataclass(frozen=True)
class EquityPoint:
    """Account state at the end of a day (day 0 is the starting capital)."""

    day: int
    equity: float
    date: str
    pnl: float = 0.0
    drawdown: float = 0.0
    drawdown_pct: float = 0.0
    opening_range: Optional[Dict[str, float]] = None
    trade_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Flatten the point, spreading the opening range into or_* columns."""
        snapshot = self.opening_range or {}
        return {
            "day": self.day,
            "date": self.date,
            "equity": self.equity,
            "pnl": self.pnl,
            "drawdown": self.drawdown,
            "drawdown_pct": self.drawdown_pct,
            "trade_count": self.trade_count,
            "or_high": snapshot.get("high"),
            "or_low": snapshot.get("low"),
            "or_range_size": snapshot.get("range_size"),
        }


@dataclass(frozen=True)
class DailyResult:
    """Per-day activity record."""

    date: str
    trade_count: int
    pnl: float
    signal_count: int
    opening_range: Optional[OpeningRange]

    def to_dict(self) -> Dict[str, Any]:
        """Convert daily result to dict."""
        opening_range = self.opening_range
        return {
            "date": self.date,
            "trade_count": self.trade_count,
            "pnl": self.pnl,
            "signal_count": self.signal_count,
            "or_high": opening_range.high if opening_range else None,
            "or_low": opening_range.low if opening_range else None,
            "or_range_size": opening_range.range_size if opening_range else None,
            "or_avg_volume": opening_range.avg_volume if opening_range else None,
        }


@dataclass
class BacktestResult:
    """Backtest results container."""

    run_id: str
    config: BacktestConfig
    equity_curve: List[EquityPoint] = field(default_factory=list)
    trades: List[BacktestTrade] = field(default_factory=list)
    daily_results: List[DailyResult] = field(default_factory=list)
    daily_returns: List[float] = field(default_factory=list)
    metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    historical_days: List[DayData] = field(default_factory=list)
    monte_carlo: Optional[MonteCarloResult] = None

    @property
    def final_equity(self) -> float:
        """Equity after the last simulated day."""
        if not self.equity_curve:
            return self.config.starting_capital
        return self.equity_curve[-1].equity


class BacktestEngine:
    """Day-by-day ORB backtest over a synthetic history.

    Example:
        >>> config = BacktestConfig(ticker="AAPL", num_days=20)
        >>> result = BacktestEngine(config).run()
        >>> print(result.metrics.total_trades, result.final_equity)
    """

    def __init__(self, config: BacktestConfig) -> None:
        """Initialize backtest engine.

        Args:
            config: Backtest configuration.
        """
        self.config = config

    def run(self) -> BacktestResult:
        """Run the backtest.

        Returns:
            BacktestResult with trades, equity curve and metrics. An unknown
            ticker yields an empty result whose curve holds only day 0.
        """
        config = self.config
        run_id = resolved_config_hash(config)
        logger.info(
            f"Starting backtest run {run_id}: {config.ticker}, {config.num_days} days "
            f"from {config.start_date}"
        )

        result = BacktestResult(run_id=run_id, config=config)
        result.historical_days = list(
            generate_historical_series(
                config.ticker,
                config.start_date,
                config.num_days,
                base_seed=config.base_seed,
            )
        )

        equity = config.starting_capital
        peak_equity = equity
        result.equity_curve.append(
            EquityPoint(day=0, equity=equity, date=config.start_date.isoformat())
        )

        if not result.historical_days:
            logger.error(f"No historical data for {config.ticker}; returning empty result")

        for day_number, day_data in enumerate(result.historical_days, start=1):
            day_date = day_data.date.isoformat()
            day_result = run_day(day_data.candles, config.strategy, account_size=equity)

            day_pnl = 0.0
            for trade in day_result.trades:
                backtest_trade = self._apply_costs(trade, day_number, day_date, equity)
                result.trades.append(backtest_trade)
                day_pnl += backtest_trade.net_pnl

            prior_equity = equity
            equity += day_pnl
            peak_equity = max(peak_equity, equity)
            drawdown = peak_equity - equity
            drawdown_pct = drawdown / peak_equity * 100 if peak_equity > 0 else 0.0

            result.daily_returns.append(day_pnl / prior_equity * 100 if prior_equity != 0 else 0.0)

            opening_range = day_result.opening_range
            result.equity_curve.append(
                EquityPoint(
                    day=day_number,
                    equity=round(equity, 2),
                    date=day_date,
                    pnl=round(day_pnl, 2),
                    drawdown=round(drawdown, 2),
                    drawdown_pct=round(drawdown_pct, 2),
                    opening_range=opening_range.snapshot() if opening_range else None,
                    trade_count=len(day_result.trades),
                )
            )
            result.daily_results.append(
                DailyResult(
                    date=day_date,
                    trade_count=len(day_result.trades),
                    pnl=round(day_pnl, 2),
                    signal_count=len(day_result.signals),
                    opening_range=opening_range,
                )
            )

        result.metrics = compute_metrics(
            result.trades,
            result.equity_curve,
            result.daily_returns,
            config.starting_capital,
        )

        if config.monte_carlo.enabled:
            result.monte_carlo = run_monte_carlo(
                result.trades,
                config.starting_capital,
                num_simulations=config.monte_carlo.num_simulations,
                seed=config.monte_carlo.seed,
            )

        metrics = result.metrics
        logger.info(
            f"Backtest complete: {metrics.total_trades} trades, "
            f"win rate: {metrics.win_rate:.1f}%, "
            f"P&L: {metrics.total_pnl:,.2f}, "
            f"max DD: {metrics.max_drawdown_pct:.2f}%"
        )

        return result

    def _apply_costs(
        self,
        trade: ClosedTrade,
        day_number: int,
        day_date: str,
        equity_at_day_start: float,
    ) -> BacktestTrade:
        """Charge round-trip commission and slippage on a closed trade."""
        commission = trade.shares * self.config.commission * 2
        slippage = self.config.slippage * 2
        net_pnl = trade.total_pnl - commission - slippage

        return BacktestTrade(
            trade=trade,
            day=day_number,
            date=day_date,
            ticker=self.config.ticker,
            gross_pnl=trade.total_pnl,
            commission=round(commission, 2),
            slippage=round(slippage, 2),
            net_pnl=round(net_pnl, 2),
            return_pct=round(net_pnl / equity_at_day_start * 100, 4) if equity_at_day_start else 0.0,
        )


def run_backtest(config: Optional[BacktestConfig] = None, **overrides: Any) -> BacktestResult:
    """Run a backtest from a config plus keyword overrides.

    Args:
        config: Base configuration (defaults when None).
        **overrides: BacktestConfig fields, deep-merged onto ``config``.
            Nested sections (``strategy``, ``monte_carlo``) take partial
            mappings; ``strategy`` may also be a full TradeConfig.

    Returns:
        BacktestResult.

    Raises:
        pydantic.ValidationError: If the merged configuration is invalid.

    Examples:
        >>> result = run_backtest(ticker="TSLA", num_days=30, seed=7)
    """
    base = config or BacktestConfig()
    if isinstance(overrides.get("strategy"), TradeConfig):
        overrides["strategy"] = overrides["strategy"].model_dump()
    merged = deep_merge(base.model_dump(), overrides)
    return BacktestEngine(BacktestConfig.model_validate(merged)).run()

