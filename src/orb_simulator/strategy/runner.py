"""Single-day strategy runner.

Builds the opening range, then feeds every later candle through the
TradeManager, collecting closed trades and the signal log.
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence

from loguru import logger

from ..config import TradeConfig
from ..data.base import Candle
from ..execution import ActiveTrade, ClosedTrade, Signal, TradeManager
from ..features import OpeningRange, compute_opening_range


@dataclass(frozen=True)
class DaySummary:
    """Per-day roll-up of closed trades."""

    total_trades: int
    winners: int
    losers: int
    total_pnl: float
    range_size: float
    range_percent: float


@dataclass
class DayResult:
    """Everything one session produced.

    ``summary`` is None when no opening range could be formed.
    """

    trades: List[ClosedTrade] = field(default_factory=list)
    opening_range: Optional[OpeningRange] = None
    signals: List[Signal] = field(default_factory=list)
    summary: Optional[DaySummary] = None


def summarize_day(trades: Sequence[ClosedTrade], opening_range: OpeningRange) -> DaySummary:
    """Count winners/losers (P&L <= 0 is a loss) and total the day."""
    winners = sum(1 for t in trades if t.total_pnl > 0)
    return DaySummary(
        total_trades=len(trades),
        winners=winners,
        losers=len(trades) - winners,
        total_pnl=round(sum(t.total_pnl for t in trades), 2),
        range_size=opening_range.range_size,
        range_percent=opening_range.range_percent,
    )


def run_day(
    candles: Sequence[Candle],
    config: Optional[TradeConfig] = None,
    account_size: float = 100000.0,
    overrides: Optional[Mapping[str, Any]] = None,
) -> DayResult:
    """Run the ORB strategy over one session.

    Args:
        candles: Session candles, time-ascending.
        config: Trade configuration (defaults when None).
        account_size: Equity used for fixed-risk sizing.
        overrides: Field overrides merged onto ``config``.

    Returns:
        DayResult with closed trades, the opening range, signals and summary.

    Raises:
        pydantic.ValidationError: If the overrides produce an invalid config.

    Examples:
        >>> result = run_day(day.candles, overrides={"confirmation_type": "wick"})
        >>> print(result.summary.total_pnl)
    """
    config = (config or TradeConfig()).with_overrides(overrides)

    opening_range = compute_opening_range(candles, config.opening_range_minutes)
    if opening_range is None:
        return DayResult()

    manager = TradeManager(config)
    trades: List[ClosedTrade] = []
    signals: List[Signal] = []
    active: Optional[ActiveTrade] = None
    trades_today = 0

    start = config.opening_range_minutes + config.avoid_first_minutes

    for candle in candles[start:]:
        if active is not None:
            update = manager.update(active, candle, opening_range)
            signals.extend(update.signals)
            if update.closed:
                trades.append(update.closed_trade)
                active = None
            # No re-entry on the candle that managed or closed a trade
            continue

        entry = manager.evaluate_entry(candle, opening_range, account_size, trades_today)
        if entry is not None:
            active = entry.trade
            trades_today += 1
            signals.extend(entry.signals)

    if active is not None:
        update = manager.force_close(active, candles[-1])
        signals.extend(update.signals)
        trades.append(update.closed_trade)

    summary = summarize_day(trades, opening_range)
    logger.debug(
        f"Day complete: {summary.total_trades} trades, P&L={summary.total_pnl:.2f}, "
        f"range={summary.range_size:.2f}"
    )

    return DayResult(
        trades=trades,
        opening_range=opening_range,
        signals=signals,
        summary=summary,
    )
