"""Pydantic configuration schemas for strategy and backtest parameters.

All configuration is defined here and validated on construction. Models are
frozen: a run builds its configuration once and threads it through every
call, and overrides produce a new validated model.
"""

from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ConfirmationType(str, Enum):
    """Breakout confirmation mode."""

    CLOSE = "close"  # Candle close beyond the range
    WICK = "wick"  # Any intrabar breach of the range


class PositionSizing(str, Enum):
    """Position sizing mode."""

    FIXED_RISK = "fixed_risk"  # Risk a fraction of the account per trade
    FIXED_SHARES = "fixed_shares"  # Constant share count


class TradeConfig(BaseModel):
    """ORB trade rules: entry, sizing, targets and exits."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Opening range and entry
    opening_range_minutes: int = Field(
        15, ge=1, le=390, description="First N minutes define the range"
    )
    confirmation_type: ConfirmationType = Field(
        ConfirmationType.CLOSE, description="Breakout confirmation mode"
    )
    volume_confirmation: bool = Field(
        True, description="Require above-average volume on the breakout candle"
    )
    volume_multiplier: float = Field(
        1.5, ge=0.0, description="Breakout volume must be N x OR average volume"
    )
    avoid_first_minutes: int = Field(
        0, ge=0, description="Skip N minutes after the range forms"
    )
    max_trades_per_day: int = Field(2, ge=0, description="Maximum entries per day")

    # Targets
    risk_reward_targets: Tuple[float, ...] = Field(
        (1.5, 2.0, 3.0), description="Profit targets as multiples of range size"
    )

    # Sizing
    position_sizing: PositionSizing = Field(
        PositionSizing.FIXED_RISK, description="Position sizing mode"
    )
    risk_per_trade: float = Field(
        0.02, gt=0.0, le=1.0, description="Account fraction risked per trade"
    )
    fixed_shares: int = Field(100, ge=1, description="Shares per trade (fixed_shares)")

    # Trailing stop (only active when partial profits are disabled)
    trailing_stop: bool = Field(True, description="Enable trailing stop")
    trailing_stop_activation: float = Field(
        1.0, ge=0.0, description="Activate after N x range of open profit"
    )
    trailing_stop_distance: float = Field(
        0.5, ge=0.0, description="Trail by N x range"
    )

    # Partial profits
    use_partial_profits: bool = Field(True, description="Scale out at targets")
    partial_profit_percents: Tuple[float, ...] = Field(
        (0.33, 0.33, 0.34), description="Position weight closed at each target"
    )
    break_even_after_target1: bool = Field(
        True, description="Move stop to entry after the first target fills"
    )

    # Exits
    max_holding_minutes: int = Field(300, ge=1, description="Max minutes in a trade")
    stop_loss_buffer: float = Field(
        0.10, ge=0.0, description="Dollar buffer beyond the opposite range boundary"
    )

    @field_validator("risk_reward_targets")
    @classmethod
    def validate_targets(cls, v: Tuple[float, ...]) -> Tuple[float, ...]:
        """Targets must be positive and strictly ascending."""
        if any(t <= 0 for t in v):
            raise ValueError(f"risk_reward_targets must be positive, got {v}")
        if any(b <= a for a, b in zip(v, v[1:])):
            raise ValueError(f"risk_reward_targets must be ascending, got {v}")
        return v

    @field_validator("partial_profit_percents")
    @classmethod
    def validate_percents(cls, v: Tuple[float, ...]) -> Tuple[float, ...]:
        """Ensure all weights are non-negative."""
        for pct in v:
            if pct < 0:
                raise ValueError(f"partial_profit_percents must be non-negative, got {pct}")
        return v

    @model_validator(mode="after")
    def validate_partials(self) -> "TradeConfig":
        """One partial weight per target."""
        if len(self.partial_profit_percents) != len(self.risk_reward_targets):
            raise ValueError(
                "partial_profit_percents must have one entry per risk_reward_target "
                f"({len(self.partial_profit_percents)} != {len(self.risk_reward_targets)})"
            )
        return self

    def with_overrides(self, overrides: Optional[Mapping[str, Any]] = None) -> "TradeConfig":
        """Return a new validated config with only the provided fields replaced.

        Args:
            overrides: Field values to replace.

        Returns:
            New TradeConfig instance.

        Raises:
            pydantic.ValidationError: If a merged value is invalid.
        """
        if not overrides:
            return self
        merged = self.model_dump()
        merged.update(overrides)
        return TradeConfig.model_validate(merged)


class MonteCarloConfig(BaseModel):
    """Monte Carlo resampling configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(True, description="Resample trades after the backtest")
    num_simulations: int = Field(1000, ge=1, description="Number of simulations")
    seed: int = Field(42, ge=0, description="Seed for the resampling stream")


class BacktestConfig(BaseModel):
    """Root backtest configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field("ORB_Simulation", description="Run name")

    ticker: str = Field("SPY", min_length=1, description="Ticker profile to simulate")
    start_date: date = Field(date(2025, 11, 1), description="First calendar date")
    num_days: int = Field(60, ge=1, description="Business days to simulate")
    seed: Optional[int] = Field(
        None, ge=0, description="Base seed (derived from the ticker when omitted)"
    )

    starting_capital: float = Field(100000.0, gt=0.0, description="Starting equity")
    commission: float = Field(0.005, ge=0.0, description="Commission per share per leg")
    slippage: float = Field(0.02, ge=0.0, description="Slippage per trade per leg ($)")

    strategy: TradeConfig = Field(default_factory=TradeConfig)
    monte_carlo: MonteCarloConfig = Field(default_factory=MonteCarloConfig)

    # Outputs
    output_dir: Path = Field(Path("runs"), description="Output directory for results")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", description="Logging level"
    )
    log_to_file: bool = Field(False, description="Write logs to file")

    @field_validator("ticker")
    @classmethod
    def validate_ticker_format(cls, v: str) -> str:
        """Ensure tickers are uppercase."""
        return v.strip().upper()

    @property
    def base_seed(self) -> int:
        """Seed for the historical series (ticker-derived default)."""
        if self.seed is not None:
            return self.seed
        return ord(self.ticker[0]) * 31337
