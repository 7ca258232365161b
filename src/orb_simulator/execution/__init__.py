"""Trade execution and lifecycle management."""

from .trade_state import (
    ActiveTrade,
    ClosedTrade,
    Direction,
    ExitReason,
    PartialExit,
    Signal,
    SignalType,
)
from .trade_manager import TradeEvent, TradeManager, TradeUpdate, calculate_position_size

__all__ = [
    "ActiveTrade",
    "ClosedTrade",
    "Direction",
    "ExitReason",
    "PartialExit",
    "Signal",
    "SignalType",
    "TradeEvent",
    "TradeManager",
    "TradeUpdate",
    "calculate_position_size",
]
