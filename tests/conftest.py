"""Pytest configuration and fixtures."""

from datetime import date, time

import pytest

from orb_simulator.data import Candle
from orb_simulator.features import compute_opening_range
from orb_simulator.utils import MS_PER_MINUTE, session_time_ms

SESSION_DATE = date(2025, 11, 3)


@pytest.fixture
def session_start_ms():
    """09:30 America/New_York on a Monday, in epoch ms."""
    return session_time_ms(SESSION_DATE, time(9, 30))


@pytest.fixture
def make_candle(session_start_ms):
    """Factory for one-minute candles addressed by minute index."""

    def _make(minute, open, high, low, close, volume=1000):
        return Candle(
            time=session_start_ms + minute * MS_PER_MINUTE,
            open=open,
            high=high,
            low=low,
            close=close,
            volume=volume,
        )

    return _make


@pytest.fixture
def or_candles(make_candle):
    """Fifteen candles forming a 100.00-101.00 range on 1000 shares each."""
    return [make_candle(i, 100.5, 101.0, 100.0, 100.5) for i in range(15)]


@pytest.fixture
def opening_range(or_candles):
    """Opening range of ``or_candles``."""
    return compute_opening_range(or_candles, minutes=15)


@pytest.fixture
def quiet_candles(make_candle):
    """Factory for in-range filler candles from ``start`` to ``end`` (exclusive)."""

    def _make(start, end, price=101.3):
        return [
            make_candle(i, price, price + 0.1, price - 0.1, price, 500)
            for i in range(start, end)
        ]

    return _make
