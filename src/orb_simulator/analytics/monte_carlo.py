"""Monte Carlo resampling of realized trades.

Each simulation draws the same number of trades with replacement from the
realized trade list and compounds their net P&L onto the starting capital,
giving a distribution of outcomes for the same edge in a different order.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from loguru import logger

from ..data.prng import LCGStream

PERCENTILES = {
    "percentile_5": 0.05,
    "percentile_25": 0.25,
    "median": 0.50,
    "percentile_75": 0.75,
    "percentile_95": 0.95,
}


@dataclass(frozen=True)
class MonteCarloRecord:
    """Outcome of one resampled trade sequence."""

    final_equity: float
    total_return: float
    max_drawdown: float

    def to_dict(self) -> Dict[str, float]:
        """Convert record to dict."""
        return asdict(self)


@dataclass
class MonteCarloResult:
    """Distribution summary across all simulations.

    Attributes:
        num_simulations: Simulations run.
        num_trades: Trades drawn per simulation.
        median: Record at the 50th percentile of final equity.
        percentile_5: Record at the 5th percentile.
        percentile_25: Record at the 25th percentile.
        percentile_75: Record at the 75th percentile.
        percentile_95: Record at the 95th percentile.
        worst_case: Lowest final equity.
        best_case: Highest final equity.
        probability_of_profit: Share of simulations ending above start (percent).
        records: All records, sorted by final equity.
    """

    num_simulations: int
    num_trades: int
    median: MonteCarloRecord
    percentile_5: MonteCarloRecord
    percentile_25: MonteCarloRecord
    percentile_75: MonteCarloRecord
    percentile_95: MonteCarloRecord
    worst_case: MonteCarloRecord
    best_case: MonteCarloRecord
    probability_of_profit: float
    records: List[MonteCarloRecord]

    def to_dict(self, include_records: bool = False) -> Dict[str, Any]:
        """Convert summary to dict (records omitted unless requested)."""
        data: Dict[str, Any] = {
            "num_simulations": self.num_simulations,
            "num_trades": self.num_trades,
            "probability_of_profit": self.probability_of_profit,
            "worst_case": self.worst_case.to_dict(),
            "best_case": self.best_case.to_dict(),
        }
        for name in PERCENTILES:
            data[name] = getattr(self, name).to_dict()
        if include_records:
            data["records"] = [r.to_dict() for r in self.records]
        return data


def _net_pnl(trade: Union[float, Any]) -> float:
    if isinstance(trade, (int, float)):
        return float(trade)
    return float(trade.net_pnl)


def simulate_path(
    pnls: Sequence[float],
    starting_capital: float,
    stream: LCGStream,
) -> MonteCarloRecord:
    """Resample one trade sequence from ``stream``.

    Args:
        pnls: Net P&L per realized trade (non-empty).
        starting_capital: Starting equity.
        stream: Shared random stream, advanced ``len(pnls)`` times.

    Returns:
        MonteCarloRecord for the path.
    """
    n = len(pnls)
    equity = starting_capital
    peak = starting_capital
    max_dd = 0.0

    for _ in range(n):
        idx = min(int(stream.next() * n), n - 1)
        equity += pnls[idx]
        if equity > peak:
            peak = equity
        if peak > 0:
            max_dd = max(max_dd, (peak - equity) / peak * 100)

    return MonteCarloRecord(
        final_equity=round(equity, 2),
        total_return=round((equity - starting_capital) / starting_capital * 100, 2),
        max_drawdown=round(max_dd, 2),
    )


def run_monte_carlo(
    trades: Sequence[Union[float, Any]],
    starting_capital: float,
    num_simulations: int = 1000,
    seed: int = 42,
) -> Optional[MonteCarloResult]:
    """Resample realized trades to estimate the outcome distribution.

    Args:
        trades: Trades with ``net_pnl`` or plain net P&L floats.
        starting_capital: Starting equity.
        num_simulations: Number of simulations.
        seed: Seed of the stream shared by all simulations.

    Returns:
        MonteCarloResult, or None when there are no trades.

    Examples:
        >>> mc = run_monte_carlo(result.trades, 100_000, num_simulations=500)
        >>> print(mc.percentile_5.final_equity, mc.percentile_95.final_equity)
    """
    if not trades:
        logger.debug("No trades to resample, skipping Monte Carlo")
        return None
    if num_simulations < 1:
        raise ValueError(f"num_simulations must be >= 1, got {num_simulations}")

    pnls = [_net_pnl(t) for t in trades]
    stream = LCGStream(seed)

    records = [simulate_path(pnls, starting_capital, stream) for _ in range(num_simulations)]
    records.sort(key=lambda r: r.final_equity)

    picks = {name: records[int(num_simulations * p)] for name, p in PERCENTILES.items()}
    profitable = sum(1 for r in records if r.final_equity > starting_capital)

    result = MonteCarloResult(
        num_simulations=num_simulations,
        num_trades=len(pnls),
        worst_case=records[0],
        best_case=records[-1],
        probability_of_profit=round(profitable / num_simulations * 100, 1),
        records=records,
        **picks,
    )

    logger.info(
        f"Monte Carlo ({num_simulations} sims): median={result.median.final_equity:,.2f}, "
        f"5%={result.percentile_5.final_equity:,.2f}, 95%={result.percentile_95.final_equity:,.2f}"
    )

    return result
