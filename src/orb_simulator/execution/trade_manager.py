"""Trade manager: the per-day ORB trade state machine.

A day starts flat. Once the opening range is known, each candle is either
checked for a breakout entry (when flat and under the daily trade cap) or
used to manage the single open trade. Management runs in a fixed priority
order and the first exit that fires wins the candle:

1. stop-loss breach (exit at the working stop)
2. maximum holding time (exit at the candle close)
3. partial-profit targets (scale out, optional break-even stop)
4. trailing-stop ratchet (only when partial profits are disabled)

Whatever is still open at the last candle of the day is flattened at its
close.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from loguru import logger

from ..config import ConfirmationType, PositionSizing, TradeConfig
from ..data.base import Candle
from ..features.opening_range import OpeningRange
from .trade_state import (
    TERMINAL_TARGET,
    ActiveTrade,
    ClosedTrade,
    Direction,
    ExitReason,
    Signal,
    SignalType,
)

# Wick entries fill one cent through the range boundary
WICK_ENTRY_OFFSET = 0.01


class TradeEvent(str, Enum):
    """Trade event types."""

    ENTRY = "entry"
    PARTIAL_FILL = "partial_fill"
    BREAKEVEN_MOVE = "breakeven_move"
    TRAILING_STOP_MOVE = "trailing_stop_move"
    STOP_HIT = "stop_hit"
    MAX_TIME = "max_time"
    TARGETS_HIT = "targets_hit"
    END_OF_DAY = "end_of_day"


_EXIT_EVENTS = {
    ExitReason.STOP_LOSS: TradeEvent.STOP_HIT,
    ExitReason.MAX_TIME: TradeEvent.MAX_TIME,
    ExitReason.TARGETS_HIT: TradeEvent.TARGETS_HIT,
    ExitReason.END_OF_DAY: TradeEvent.END_OF_DAY,
}


@dataclass
class TradeUpdate:
    """Result of processing one candle.

    Attributes:
        trade: The trade after the candle (None when nothing was opened).
        events: Events that occurred, in order.
        signals: Signal log entries produced by the candle.
        closed_trade: Set when the trade was finalized on this candle.
    """

    trade: Optional[ActiveTrade]
    events: List[TradeEvent] = field(default_factory=list)
    signals: List[Signal] = field(default_factory=list)
    closed_trade: Optional[ClosedTrade] = None

    @property
    def closed(self) -> bool:
        """Whether the trade was closed."""
        return self.closed_trade is not None


def calculate_position_size(
    account_size: float,
    risk_fraction: float,
    entry_price: float,
    stop_price: float,
) -> int:
    """Shares that risk ``account_size * risk_fraction`` between entry and stop.

    Args:
        account_size: Current account equity.
        risk_fraction: Fraction of equity to risk.
        entry_price: Entry price.
        stop_price: Stop price.

    Returns:
        Whole shares (0 when the risk per share or the result is non-positive).
    """
    risk_amount = account_size * risk_fraction
    risk_per_share = abs(entry_price - stop_price)
    if risk_per_share <= 0:
        return 0
    return max(0, math.floor(risk_amount / risk_per_share))


class TradeManager:
    """Manages the single-position ORB trade lifecycle for one day.

    Example:
        >>> manager = TradeManager(TradeConfig())
        >>> update = manager.evaluate_entry(candle, opening_range, 100_000, 0)
        >>> trade = update.trade
        >>> for candle in later_candles:
        ...     update = manager.update(trade, candle, opening_range)
        ...     if update.closed:
        ...         print(update.closed_trade.exit_reason)
        ...         break
    """

    def __init__(self, config: TradeConfig) -> None:
        """Initialize trade manager.

        Args:
            config: Trade configuration.
        """
        self.config = config
        self._sizers: Dict[PositionSizing, Callable[[float, float, float], int]] = {
            PositionSizing.FIXED_RISK: self._size_fixed_risk,
            PositionSizing.FIXED_SHARES: self._size_fixed_shares,
        }

    # ------------------------------------------------------------------
    # Entry
    # ------------------------------------------------------------------

    def size_position(self, account_size: float, entry_price: float, stop_price: float) -> int:
        """Dispatch position sizing on the configured mode."""
        sizer = self._sizers[PositionSizing(self.config.position_sizing)]
        return sizer(account_size, entry_price, stop_price)

    def _size_fixed_risk(self, account_size: float, entry_price: float, stop_price: float) -> int:
        return calculate_position_size(
            account_size, self.config.risk_per_trade, entry_price, stop_price
        )

    def _size_fixed_shares(self, account_size: float, entry_price: float, stop_price: float) -> int:
        return self.config.fixed_shares

    def volume_confirmed(self, candle: Candle, opening_range: OpeningRange) -> bool:
        """Breakout volume gate (always passes when disabled)."""
        if not self.config.volume_confirmation:
            return True
        return candle.volume >= opening_range.avg_volume * self.config.volume_multiplier

    def detect_breakout(self, candle: Candle, opening_range: OpeningRange) -> Optional[Direction]:
        """Return the breakout direction of a candle, long checked first.

        Args:
            candle: Candidate candle.
            opening_range: Session opening range.

        Returns:
            Direction, or None if the candle stays inside the range.
        """
        if self.config.confirmation_type == ConfirmationType.CLOSE:
            long_break = candle.close > opening_range.high
            short_break = candle.close < opening_range.low
        else:
            long_break = candle.high > opening_range.high
            short_break = candle.low < opening_range.low

        if long_break:
            return Direction.LONG
        if short_break:
            return Direction.SHORT
        return None

    def evaluate_entry(
        self,
        candle: Candle,
        opening_range: OpeningRange,
        account_size: float,
        trades_today: int,
    ) -> Optional[TradeUpdate]:
        """Open a trade if the candle is a confirmed breakout.

        Args:
            candle: Candle to evaluate.
            opening_range: Session opening range.
            account_size: Equity used for fixed-risk sizing.
            trades_today: Entries already taken today.

        Returns:
            TradeUpdate holding the new trade and its ENTRY signal, or None.
        """
        if trades_today >= self.config.max_trades_per_day:
            return None

        if not self.volume_confirmed(candle, opening_range):
            return None

        direction = self.detect_breakout(candle, opening_range)
        if direction is None:
            return None

        use_close = self.config.confirmation_type == ConfirmationType.CLOSE
        if direction is Direction.LONG:
            entry_price = candle.close if use_close else opening_range.high + WICK_ENTRY_OFFSET
            stop_price = opening_range.low - self.config.stop_loss_buffer
            reason = f"Breakout above OR high {opening_range.high}"
        else:
            entry_price = candle.close if use_close else opening_range.low - WICK_ENTRY_OFFSET
            stop_price = opening_range.high + self.config.stop_loss_buffer
            reason = f"Breakdown below OR low {opening_range.low}"

        shares = self.size_position(account_size, entry_price, stop_price)
        if shares <= 0:
            logger.debug(f"Skipping {direction.value} breakout: position size is {shares}")
            return None

        stop = round(stop_price, 2)
        trade = ActiveTrade(
            direction=direction,
            entry_price=round(entry_price, 2),
            entry_time=candle.time,
            stop_loss=stop,
            current_stop=stop,
            shares=shares,
        )

        signal = Signal(
            time=candle.time,
            type=SignalType.ENTRY,
            price=trade.entry_price,
            direction=direction,
            shares=shares,
            stop=stop,
            reason=reason,
        )

        logger.debug(
            f"Entered {direction.value} {shares} @ {trade.entry_price:.2f}, stop={stop:.2f}"
        )

        return TradeUpdate(trade=trade, events=[TradeEvent.ENTRY], signals=[signal])

    # ------------------------------------------------------------------
    # Management
    # ------------------------------------------------------------------

    def update(
        self,
        trade: ActiveTrade,
        candle: Candle,
        opening_range: OpeningRange,
    ) -> TradeUpdate:
        """Process one candle against an open trade.

        Args:
            trade: Open trade (modified in place).
            candle: Next candle.
            opening_range: Session opening range.

        Returns:
            TradeUpdate with events, signals and the ClosedTrade if it closed.
        """
        update = TradeUpdate(trade=trade)
        minutes_in_trade = trade.minutes_in_trade(candle.time)

        exit_price: Optional[float] = None
        exit_reason: Optional[ExitReason] = None

        if self._stop_hit(trade, candle):
            exit_price = trade.current_stop
            exit_reason = ExitReason.STOP_LOSS
        elif minutes_in_trade >= self.config.max_holding_minutes:
            exit_price = candle.close
            exit_reason = ExitReason.MAX_TIME

        if exit_reason is None and self.config.use_partial_profits:
            self._check_targets(trade, candle, opening_range, update)

        if exit_reason is None and self.config.trailing_stop and not self.config.use_partial_profits:
            self._update_trailing_stop(trade, candle, opening_range, update)

        if exit_reason is not None or trade.is_flat:
            if exit_reason is not None:
                trade.record_exit(candle.time, exit_price, trade.remaining_shares, TERMINAL_TARGET)
            else:
                exit_reason = ExitReason.TARGETS_HIT
            self._finalize(trade, candle, exit_reason, exit_price, update)
        else:
            # Excursions only count candles the trade is still open after
            trade.update_excursion(candle)

        return update

    def force_close(self, trade: ActiveTrade, candle: Candle) -> TradeUpdate:
        """Flatten an open trade at the candle close (end of day).

        Args:
            trade: Open trade.
            candle: Last candle of the session.

        Returns:
            TradeUpdate holding the ClosedTrade.
        """
        update = TradeUpdate(trade=trade)
        trade.record_exit(candle.time, candle.close, trade.remaining_shares, TERMINAL_TARGET)
        self._finalize(trade, candle, ExitReason.END_OF_DAY, candle.close, update)
        return update

    def target_price(self, trade: ActiveTrade, opening_range: OpeningRange, index: int) -> float:
        """Price of profit target ``index`` (entry +/- range size x multiple)."""
        multiple = self.config.risk_reward_targets[index]
        return trade.entry_price + trade.direction.sign * opening_range.range_size * multiple

    @staticmethod
    def _stop_hit(trade: ActiveTrade, candle: Candle) -> bool:
        if trade.is_long:
            return candle.low <= trade.current_stop
        return candle.high >= trade.current_stop

    def _check_targets(
        self,
        trade: ActiveTrade,
        candle: Candle,
        opening_range: OpeningRange,
        update: TradeUpdate,
    ) -> None:
        """Scale out at every unreached target the candle touches.

        Each target closes its weight's share of the remaining position,
        normalized over the weights of the targets not yet reached.
        """
        percents = self.config.partial_profit_percents

        for index in range(trade.next_target_index, len(self.config.risk_reward_targets)):
            target = self.target_price(trade, opening_range, index)
            if trade.is_long:
                hit = candle.high >= target
            else:
                hit = candle.low <= target
            if not hit:
                continue

            remaining_weight = sum(percents[index:]) or 1
            shares_to_close = math.floor(trade.remaining_shares * percents[index] / remaining_weight)

            fill = trade.record_exit(candle.time, target, shares_to_close, index + 1)
            if fill is None:
                continue

            trade.next_target_index = index + 1
            update.events.append(TradeEvent.PARTIAL_FILL)
            update.signals.append(
                Signal(
                    time=candle.time,
                    type=SignalType.PARTIAL_EXIT,
                    price=fill.price,
                    direction=trade.direction,
                    shares=fill.shares,
                    target_index=fill.target_index,
                    pnl=fill.pnl,
                )
            )
            logger.debug(
                f"Partial fill T{index + 1}: {fill.shares} @ {fill.price:.2f}, "
                f"remaining={trade.remaining_shares}"
            )

            if index == 0 and self.config.break_even_after_target1:
                if trade.move_stop(trade.entry_price):
                    update.events.append(TradeEvent.BREAKEVEN_MOVE)
                    logger.debug(f"Stop moved to breakeven at {trade.entry_price:.2f}")

    def _update_trailing_stop(
        self,
        trade: ActiveTrade,
        candle: Candle,
        opening_range: OpeningRange,
        update: TradeUpdate,
    ) -> None:
        """Ratchet the stop behind the candle extreme once profit activates it."""
        range_size = opening_range.range_size
        if range_size <= 0:
            return

        if trade.is_long:
            profit_multiple = (candle.high - trade.entry_price) / range_size
        else:
            profit_multiple = (trade.entry_price - candle.low) / range_size

        if profit_multiple < self.config.trailing_stop_activation:
            return

        trail_distance = range_size * self.config.trailing_stop_distance
        if trade.is_long:
            candidate = candle.high - trail_distance
        else:
            candidate = candle.low + trail_distance

        if trade.move_stop(round(candidate, 2)):
            update.events.append(TradeEvent.TRAILING_STOP_MOVE)

    def _finalize(
        self,
        trade: ActiveTrade,
        candle: Candle,
        reason: ExitReason,
        exit_price: Optional[float],
        update: TradeUpdate,
    ) -> None:
        closed = trade.close(candle.time, reason)
        update.closed_trade = closed
        update.events.append(_EXIT_EVENTS[reason])
        update.signals.append(
            Signal(
                time=candle.time,
                type=SignalType.EXIT,
                price=exit_price if exit_price is not None else candle.close,
                direction=trade.direction,
                reason=reason.value,
                pnl=closed.total_pnl,
            )
        )
        logger.debug(
            f"Closed {trade.direction.value} ({reason.value}) @ {closed.exit_price:.2f}, "
            f"P&L={closed.total_pnl:.2f}"
        )
