"""Market data layer.

Candle schema, deterministic random streams, ticker profiles, the synthetic
session generator and the real-time tick simulator.
"""

from .base import Candle, candles_from_frame, candles_to_frame
from .prng import LCGStream, make_stream, normal
from .profiles import STOCK_PROFILES, TickerProfile, get_profile
from .synthetic_provider import (
    DayData,
    generate_historical_series,
    generate_intraday_day,
    generate_pre_market_candles,
)
from .tick_simulator import Tick, TickSimulator, create_tick_simulator

__all__ = [
    "Candle",
    "candles_from_frame",
    "candles_to_frame",
    "LCGStream",
    "make_stream",
    "normal",
    "STOCK_PROFILES",
    "TickerProfile",
    "get_profile",
    "DayData",
    "generate_historical_series",
    "generate_intraday_day",
    "generate_pre_market_candles",
    "Tick",
    "TickSimulator",
    "create_tick_simulator",
]
