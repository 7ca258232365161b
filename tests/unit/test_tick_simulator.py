"""Tests for the real-time tick simulator."""

import pytest

from orb_simulator.data import create_tick_simulator


def test_unknown_ticker():
    assert create_tick_simulator("NOPE") is None


def test_quotes_straddle_price():
    sim = create_tick_simulator("SPY", seed=7, clock=lambda: 1_000)

    for _ in range(200):
        tick = sim.next_tick()
        assert tick.bid <= tick.price <= tick.ask
        assert tick.ask - tick.bid == pytest.approx(tick.price * 0.0002, abs=0.011)
        assert 100 <= tick.volume <= 600
        assert tick.timestamp == 1_000


def test_tick_numbers_increase():
    sim = create_tick_simulator("AAPL", seed=1)

    numbers = [sim.next_tick().tick_number for _ in range(5)]

    assert numbers == [1, 2, 3, 4, 5]
    assert sim.tick_count == 5


def test_same_seed_same_walk():
    a = create_tick_simulator("TSLA", seed=99, clock=lambda: 0)
    b = create_tick_simulator("TSLA", seed=99, clock=lambda: 0)

    assert [a.next_tick() for _ in range(50)] == [b.next_tick() for _ in range(50)]


def test_current_price_is_idempotent():
    sim = create_tick_simulator("MSFT", start_price=100.0, seed=3)

    assert sim.get_current_price() == 100.0
    tick = sim.next_tick()

    assert sim.get_current_price() == tick.price
    assert sim.get_current_price() == sim.get_current_price()
    assert sim.tick_count == 1
