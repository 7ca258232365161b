"""Tests for opening range calculation."""

import pytest

from orb_simulator.features import compute_opening_range


def test_basic_range(make_candle):
    """Range spans the highest high and lowest low of the first K candles."""
    candles = [
        make_candle(0, 100.0, 100.8, 99.7, 100.5, volume=3000),
        make_candle(1, 100.5, 101.2, 100.3, 100.9, volume=2000),
        make_candle(2, 100.9, 101.0, 99.9, 100.2, volume=1000),
        make_candle(3, 100.2, 105.0, 100.0, 104.0, volume=9000),
    ]

    opening_range = compute_opening_range(candles, minutes=3)

    assert opening_range.high == 101.2
    assert opening_range.low == 99.7
    assert opening_range.range_size == pytest.approx(1.5)
    assert opening_range.midpoint == pytest.approx(100.45)
    assert opening_range.total_volume == 6000
    assert opening_range.avg_volume == 2000
    assert opening_range.end_time == candles[2].time
    assert opening_range.open_price == 100.0
    assert opening_range.candle_count == 3


def test_range_size_is_exact_difference(opening_range):
    assert opening_range.range_size == opening_range.high - opening_range.low


def test_insufficient_candles(or_candles):
    assert compute_opening_range(or_candles[:14], minutes=15) is None


def test_avg_volume_rounds_half_up(make_candle):
    candles = [
        make_candle(0, 100.0, 100.5, 99.5, 100.0, volume=1),
        make_candle(1, 100.0, 100.5, 99.5, 100.0, volume=2),
    ]

    assert compute_opening_range(candles, minutes=2).avg_volume == 2


def test_range_percent(opening_range):
    assert opening_range.range_percent == pytest.approx(0.995)


def test_snapshot(opening_range):
    assert opening_range.snapshot() == {"high": 101.0, "low": 100.0, "range_size": 1.0}
