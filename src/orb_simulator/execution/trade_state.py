"""Trade state dataclasses.

Defines the per-day trade lifecycle objects: the mutable ActiveTrade owned by
the day's state machine, its PartialExit fills, the frozen ClosedTrade it
becomes, and the Signal audit log entries.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..data.base import Candle
from ..utils.time_utils import MS_PER_MINUTE


class Direction(str, Enum):
    """Trade direction."""

    LONG = "LONG"
    SHORT = "SHORT"

    @property
    def sign(self) -> int:
        """+1 for long, -1 for short."""
        return 1 if self is Direction.LONG else -1


class ExitReason(str, Enum):
    """Why a trade was finalized."""

    STOP_LOSS = "Stop Loss"
    MAX_TIME = "Max Time"
    TARGETS_HIT = "Targets Hit"
    END_OF_DAY = "End of Day"


class SignalType(str, Enum):
    """Signal log entry types."""

    ENTRY = "ENTRY"
    PARTIAL_EXIT = "PARTIAL_EXIT"
    EXIT = "EXIT"


TERMINAL_TARGET = -1


@dataclass(frozen=True)
class PartialExit:
    """One fill that reduced the position.

    Attributes:
        time: Fill time (epoch ms).
        price: Fill price.
        shares: Shares closed (> 0).
        target_index: 1-based target rank, or -1 for the terminal close.
        pnl: Direction-signed P&L of the fill.
    """

    time: int
    price: float
    shares: int
    target_index: int
    pnl: float


@dataclass(frozen=True)
class Signal:
    """Append-only audit log entry."""

    time: int
    type: SignalType
    price: float
    direction: Optional[Direction] = None
    shares: Optional[int] = None
    stop: Optional[float] = None
    target_index: Optional[int] = None
    pnl: Optional[float] = None
    reason: str = ""


@dataclass
class ActiveTrade:
    """Open position tracked candle by candle.

    Attributes:
        direction: LONG or SHORT.
        entry_price: Entry fill price.
        entry_time: Entry time (epoch ms).
        stop_loss: Initial stop.
        current_stop: Working stop; only ever moves in the trade's favor.
        shares: Initial size.
        remaining_shares: Open size (never negative, never increases).
        partial_exits: Fills so far, in order.
        next_target_index: Index of the next unreached profit target.
        max_favorable_excursion: Best price move in the trade's favor ($/share).
        max_adverse_excursion: Worst price move against the trade ($/share).
        stop_history: Every stop level adopted, starting with the initial one.
    """

    direction: Direction
    entry_price: float
    entry_time: int
    stop_loss: float
    current_stop: float
    shares: int
    remaining_shares: Optional[int] = None
    partial_exits: List[PartialExit] = field(default_factory=list)
    next_target_index: int = 0
    max_favorable_excursion: float = 0.0
    max_adverse_excursion: float = 0.0
    stop_history: List[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Initialize derived fields."""
        if self.remaining_shares is None:
            self.remaining_shares = self.shares
        if not self.stop_history:
            self.stop_history.append(self.current_stop)

    @property
    def is_long(self) -> bool:
        """Check if trade is long."""
        return self.direction is Direction.LONG

    @property
    def is_flat(self) -> bool:
        """True once every share has been closed."""
        return self.remaining_shares <= 0

    def minutes_in_trade(self, now: int) -> float:
        """Minutes elapsed since entry."""
        return (now - self.entry_time) / MS_PER_MINUTE

    def fill_pnl(self, price: float, shares: int) -> float:
        """Direction-signed P&L of closing ``shares`` at ``price``."""
        return round(self.direction.sign * (price - self.entry_price) * shares, 2)

    def update_excursion(self, candle: Candle) -> None:
        """Update MFE/MAE from a candle's extremes."""
        if self.is_long:
            favorable = candle.high - self.entry_price
            adverse = self.entry_price - candle.low
        else:
            favorable = self.entry_price - candle.low
            adverse = candle.high - self.entry_price

        self.max_favorable_excursion = max(self.max_favorable_excursion, favorable)
        self.max_adverse_excursion = max(self.max_adverse_excursion, adverse)

    def is_more_favorable_stop(self, stop: float) -> bool:
        """True if ``stop`` is strictly tighter in the trade's favor."""
        if self.is_long:
            return stop > self.current_stop
        return stop < self.current_stop

    def move_stop(self, stop: float) -> bool:
        """Ratchet the working stop; looser levels are ignored.

        Args:
            stop: Candidate stop level.

        Returns:
            True if the stop moved.
        """
        if not self.is_more_favorable_stop(stop):
            return False
        self.current_stop = stop
        self.stop_history.append(stop)
        return True

    def record_exit(
        self,
        time: int,
        price: float,
        shares: int,
        target_index: int,
    ) -> Optional[PartialExit]:
        """Close part of the position.

        Shares are clamped to the open size before subtracting.

        Args:
            time: Fill time (epoch ms).
            price: Fill price (rounded to cents).
            shares: Requested shares.
            target_index: Target rank, or -1 for the terminal close.

        Returns:
            The recorded PartialExit, or None if nothing was closed.
        """
        shares = min(int(shares), self.remaining_shares)
        if shares <= 0:
            return None

        price = round(price, 2)
        fill = PartialExit(
            time=time,
            price=price,
            shares=shares,
            target_index=target_index,
            pnl=self.fill_pnl(price, shares),
        )
        self.partial_exits.append(fill)
        self.remaining_shares -= shares
        return fill

    def close(self, time: int, reason: "ExitReason") -> "ClosedTrade":
        """Freeze the trade into a ClosedTrade.

        Args:
            time: Exit time (epoch ms).
            reason: Exit reason.

        Returns:
            ClosedTrade snapshot.
        """
        total_pnl = round(sum(p.pnl for p in self.partial_exits), 2)
        exit_price = self.partial_exits[-1].price if self.partial_exits else self.entry_price

        return ClosedTrade(
            direction=self.direction,
            entry_price=self.entry_price,
            entry_time=self.entry_time,
            stop_loss=self.stop_loss,
            final_stop=self.current_stop,
            shares=self.shares,
            partial_exits=tuple(self.partial_exits),
            stop_history=tuple(self.stop_history),
            max_favorable_excursion=round(self.max_favorable_excursion, 2),
            max_adverse_excursion=round(self.max_adverse_excursion, 2),
            exit_time=time,
            exit_price=exit_price,
            exit_reason=reason,
            total_pnl=total_pnl,
            duration_minutes=int(round(self.minutes_in_trade(time))),
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"ActiveTrade({self.direction.value} {self.remaining_shares}/{self.shares} "
            f"entry={self.entry_price:.2f}, stop={self.current_stop:.2f})"
        )


@dataclass(frozen=True)
class ClosedTrade:
    """Finalized trade.

    ``total_pnl`` is the sum of every fill's P&L, and the fills' shares add up
    to the initial size.
    """

    direction: Direction
    entry_price: float
    entry_time: int
    stop_loss: float
    final_stop: float
    shares: int
    partial_exits: Tuple[PartialExit, ...]
    stop_history: Tuple[float, ...]
    max_favorable_excursion: float
    max_adverse_excursion: float
    exit_time: int
    exit_price: float
    exit_reason: ExitReason
    total_pnl: float
    duration_minutes: int

    @property
    def is_winner(self) -> bool:
        """Positive gross P&L."""
        return self.total_pnl > 0

    @property
    def exited_shares(self) -> int:
        """Shares closed across all fills."""
        return sum(p.shares for p in self.partial_exits)

    def to_dict(self) -> dict:
        """Convert trade to dict for serialization."""
        return {
            "direction": self.direction.value,
            "entry_price": self.entry_price,
            "entry_time": self.entry_time,
            "stop_loss": self.stop_loss,
            "final_stop": self.final_stop,
            "shares": self.shares,
            "num_partials": len(self.partial_exits),
            "max_favorable_excursion": self.max_favorable_excursion,
            "max_adverse_excursion": self.max_adverse_excursion,
            "exit_time": self.exit_time,
            "exit_price": self.exit_price,
            "exit_reason": self.exit_reason.value,
            "total_pnl": self.total_pnl,
            "duration_minutes": self.duration_minutes,
        }
