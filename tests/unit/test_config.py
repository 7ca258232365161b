"""Test configuration loading and validation."""

from datetime import date
from pathlib import Path

import pydantic
import pytest

from orb_simulator.config import (
    BacktestConfig,
    ConfirmationType,
    PositionSizing,
    TradeConfig,
    deep_merge,
    load_config,
    resolved_config_hash,
    save_config,
)


def test_trade_config_defaults():
    """Documented defaults."""
    config = TradeConfig()

    assert config.opening_range_minutes == 15
    assert config.confirmation_type is ConfirmationType.CLOSE
    assert config.volume_confirmation is True
    assert config.volume_multiplier == 1.5
    assert config.risk_reward_targets == (1.5, 2.0, 3.0)
    assert config.position_sizing is PositionSizing.FIXED_RISK
    assert config.risk_per_trade == 0.02
    assert config.fixed_shares == 100
    assert config.max_trades_per_day == 2
    assert config.trailing_stop is True
    assert config.trailing_stop_activation == 1.0
    assert config.trailing_stop_distance == 0.5
    assert config.use_partial_profits is True
    assert config.partial_profit_percents == (0.33, 0.33, 0.34)
    assert config.max_holding_minutes == 300
    assert config.avoid_first_minutes == 0
    assert config.stop_loss_buffer == 0.10
    assert config.break_even_after_target1 is True


def test_invalid_enum_rejected():
    with pytest.raises(pydantic.ValidationError):
        TradeConfig(position_sizing="kelly")


def test_mismatched_partials_rejected():
    with pytest.raises(pydantic.ValidationError, match="one entry per"):
        TradeConfig(risk_reward_targets=(1.0, 2.0), partial_profit_percents=(1.0,))


def test_targets_must_ascend():
    with pytest.raises(pydantic.ValidationError, match="ascending"):
        TradeConfig(risk_reward_targets=(2.0, 1.0, 3.0))


def test_unknown_field_rejected():
    with pytest.raises(pydantic.ValidationError):
        TradeConfig(use_magic=True)


def test_config_is_frozen():
    config = TradeConfig()

    with pytest.raises(pydantic.ValidationError):
        config.fixed_shares = 5


def test_with_overrides():
    base = TradeConfig()

    updated = base.with_overrides({"confirmation_type": "wick", "fixed_shares": 10})

    assert updated.confirmation_type is ConfirmationType.WICK
    assert updated.fixed_shares == 10
    assert updated.volume_multiplier == base.volume_multiplier
    assert base.confirmation_type is ConfirmationType.CLOSE
    assert base.with_overrides(None) is base


def test_backtest_defaults():
    config = BacktestConfig()

    assert config.ticker == "SPY"
    assert config.start_date == date(2025, 11, 1)
    assert config.num_days == 60
    assert config.starting_capital == 100000.0
    assert config.commission == 0.005
    assert config.slippage == 0.02
    assert config.monte_carlo.num_simulations == 1000
    assert config.monte_carlo.seed == 42


def test_ticker_uppercased_and_seed():
    config = BacktestConfig(ticker=" aapl ")

    assert config.ticker == "AAPL"
    assert config.base_seed == ord("A") * 31337
    assert BacktestConfig(ticker="AAPL", seed=5).base_seed == 5


def test_deep_merge():
    base = {"a": 1, "strategy": {"x": 1, "y": 2}}

    merged = deep_merge(base, {"strategy": {"y": 3}, "b": 2})

    assert merged == {"a": 1, "b": 2, "strategy": {"x": 1, "y": 3}}
    assert base["strategy"]["y"] == 2


def test_config_loading(tmp_path: Path):
    """Test loading config from YAML."""
    config_yaml = """
name: Test_Run
ticker: tsla
start_date: "2025-12-01"
num_days: 5

strategy:
  confirmation_type: wick
  risk_reward_targets: [1.0, 2.0]
  partial_profit_percents: [0.5, 0.5]

monte_carlo:
  enabled: false
"""
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_yaml)

    config = load_config(config_file, overrides={"strategy": {"fixed_shares": 7}})

    assert config.name == "Test_Run"
    assert config.ticker == "TSLA"
    assert config.start_date == date(2025, 12, 1)
    assert config.strategy.confirmation_type is ConfirmationType.WICK
    assert config.strategy.risk_reward_targets == (1.0, 2.0)
    assert config.strategy.fixed_shares == 7
    assert config.strategy.volume_multiplier == 1.5
    assert config.monte_carlo.enabled is False


def test_invalid_yaml_config(tmp_path: Path):
    config_file = tmp_path / "bad.yaml"
    config_file.write_text("num_days: 0\n")

    with pytest.raises(ValueError, match="validation failed"):
        load_config(config_file)


def test_missing_config_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_hash_is_stable():
    a = BacktestConfig(ticker="SPY", num_days=10)
    b = BacktestConfig(ticker="spy", num_days=10)
    c = BacktestConfig(ticker="SPY", num_days=11)

    assert resolved_config_hash(a) == resolved_config_hash(b)
    assert resolved_config_hash(a) != resolved_config_hash(c)
    assert len(resolved_config_hash(a)) == 16


def test_save_and_reload(tmp_path: Path):
    config = BacktestConfig(ticker="NVDA", strategy=TradeConfig(fixed_shares=3))
    path = tmp_path / "out" / "config.yaml"

    save_config(config, path)
    reloaded = load_config(path)

    assert reloaded == config
