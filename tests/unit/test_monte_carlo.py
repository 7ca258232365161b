"""Tests for Monte Carlo resampling."""

from types import SimpleNamespace

import pytest

from orb_simulator.analytics import run_monte_carlo

PNLS = [120.0, -80.0, 45.5, -30.0, 210.0, -150.0, 60.0, 15.0]


def test_empty_trades_returns_none():
    assert run_monte_carlo([], 100_000) is None


def test_same_inputs_same_result():
    a = run_monte_carlo(PNLS, 100_000, num_simulations=200, seed=42)
    b = run_monte_carlo(PNLS, 100_000, num_simulations=200, seed=42)

    assert a.median == b.median
    assert a.percentile_5 == b.percentile_5
    assert a.percentile_95 == b.percentile_95
    assert a.records == b.records


def test_different_seed_changes_paths():
    a = run_monte_carlo(PNLS, 100_000, num_simulations=200, seed=1)
    b = run_monte_carlo(PNLS, 100_000, num_simulations=200, seed=2)

    assert a.records != b.records


def test_percentiles_are_ordered():
    result = run_monte_carlo(PNLS, 100_000, num_simulations=500)

    values = [
        result.worst_case.final_equity,
        result.percentile_5.final_equity,
        result.percentile_25.final_equity,
        result.median.final_equity,
        result.percentile_75.final_equity,
        result.percentile_95.final_equity,
        result.best_case.final_equity,
    ]
    assert values == sorted(values)
    assert [r.final_equity for r in result.records] == sorted(r.final_equity for r in result.records)


def test_percentile_indices():
    result = run_monte_carlo(PNLS, 100_000, num_simulations=100)

    assert result.percentile_5 is result.records[5]
    assert result.median is result.records[50]
    assert result.percentile_95 is result.records[95]
    assert result.best_case is result.records[99]


def test_single_trade_paths_are_identical():
    result = run_monte_carlo([50.0], 1_000, num_simulations=10)

    assert all(r.final_equity == 1_050.0 for r in result.records)
    assert result.median.total_return == 5.0
    assert result.median.max_drawdown == 0.0
    assert result.probability_of_profit == 100.0


def test_losing_trade_drawdown():
    result = run_monte_carlo([-100.0], 1_000, num_simulations=3)

    assert result.worst_case.max_drawdown == 10.0
    assert result.probability_of_profit == 0.0


def test_accepts_trade_objects():
    trades = [SimpleNamespace(net_pnl=p) for p in PNLS]

    from_objects = run_monte_carlo(trades, 100_000, num_simulations=50)
    from_floats = run_monte_carlo(PNLS, 100_000, num_simulations=50)

    assert from_objects.records == from_floats.records


def test_invalid_simulation_count():
    with pytest.raises(ValueError):
        run_monte_carlo(PNLS, 100_000, num_simulations=0)


def test_to_dict():
    data = run_monte_carlo(PNLS, 100_000, num_simulations=20).to_dict()

    assert set(data) >= {"median", "percentile_5", "percentile_95", "worst_case", "best_case"}
    assert "records" not in data
