"""Tests for the single-day strategy runner."""

import pydantic
import pytest

from orb_simulator.config import TradeConfig
from orb_simulator.execution import ExitReason, SignalType
from orb_simulator.strategy import run_day

PLAIN = {
    "position_sizing": "fixed_shares",
    "fixed_shares": 100,
    "use_partial_profits": False,
    "trailing_stop": False,
}


def test_no_opening_range_no_trading(or_candles):
    """Too few candles for the range means an empty day."""
    result = run_day(or_candles[:10])

    assert result.trades == []
    assert result.signals == []
    assert result.opening_range is None
    assert result.summary is None


def test_breakout_then_stop_loss(or_candles, make_candle, quiet_candles):
    """A breakout is entered and stopped out on the next candle."""
    candles = (
        or_candles
        + [make_candle(15, 100.8, 101.6, 100.7, 101.5, volume=2000)]
        + [make_candle(16, 101.0, 101.2, 99.8, 100.0)]
        + quiet_candles(17, 30, price=100.5)
    )

    result = run_day(candles, overrides=PLAIN)

    assert len(result.trades) == 1
    trade = result.trades[0]
    assert trade.entry_price == 101.5
    assert trade.exit_reason is ExitReason.STOP_LOSS
    assert trade.total_pnl == pytest.approx(-160.0)

    assert [s.type for s in result.signals] == [SignalType.ENTRY, SignalType.EXIT]

    summary = result.summary
    assert summary.total_trades == 1
    assert summary.winners == 0
    assert summary.losers == 1
    assert summary.total_pnl == pytest.approx(-160.0)
    assert summary.range_size == pytest.approx(1.0)
    assert summary.range_percent == pytest.approx(0.995)


def test_open_trade_flattened_at_end_of_day(or_candles, make_candle, quiet_candles):
    """A trade still open at the last candle closes at its close."""
    candles = (
        or_candles
        + [make_candle(15, 100.8, 101.6, 100.7, 101.5, volume=2000)]
        + quiet_candles(16, 40)
    )

    result = run_day(candles, overrides=PLAIN)

    trade = result.trades[0]
    assert trade.exit_reason is ExitReason.END_OF_DAY
    assert trade.exit_time == candles[-1].time
    assert trade.exit_price == 101.3
    assert trade.exited_shares == trade.shares
    assert result.signals[-1].type is SignalType.EXIT
    # One EXIT per closed trade, end-of-day flatten included
    assert [s.type for s in result.signals].count(SignalType.EXIT) == len(result.trades)


def test_no_reentry_on_exit_candle(or_candles, make_candle, quiet_candles):
    """The candle that closes a trade cannot also open one."""
    breakout = dict(open=100.8, high=101.6, low=100.7, close=101.5, volume=2000)
    candles = (
        or_candles
        + [make_candle(15, **breakout)]
        # Stops the first trade and closes above the range on high volume
        + [make_candle(16, 101.0, 101.6, 99.8, 101.5, volume=2000)]
        + [make_candle(17, **breakout)]
        + quiet_candles(18, 30)
    )

    result = run_day(candles, overrides=PLAIN)

    assert len(result.trades) == 2
    assert result.trades[1].entry_time == candles[17].time


def test_max_trades_per_day(or_candles, make_candle, quiet_candles):
    """No entries beyond the daily cap."""
    breakout = dict(open=100.8, high=101.6, low=100.7, close=101.5, volume=2000)
    stop = dict(open=101.0, high=101.2, low=99.8, close=100.0)
    candles = or_candles + [
        make_candle(15, **breakout),
        make_candle(16, **stop),
        make_candle(17, **breakout),
        make_candle(18, **stop),
        make_candle(19, **breakout),
        make_candle(20, **stop),
    ]

    result = run_day(candles, overrides={**PLAIN, "max_trades_per_day": 2})

    assert len(result.trades) == 2
    assert sum(1 for s in result.signals if s.type is SignalType.ENTRY) == 2


def test_avoid_first_minutes(or_candles, make_candle, quiet_candles):
    """Candles inside the avoidance window are not scanned."""
    candles = (
        or_candles
        + [make_candle(15, 100.8, 101.6, 100.7, 101.5, volume=2000)]
        + quiet_candles(16, 30)
    )

    result = run_day(candles, overrides={**PLAIN, "avoid_first_minutes": 1})

    assert result.trades == []
    assert result.summary.total_trades == 0


def test_account_size_drives_fixed_risk(or_candles, make_candle, quiet_candles):
    """Fixed-risk sizing scales with the account passed in."""
    candles = (
        or_candles
        + [make_candle(15, 100.8, 101.6, 100.7, 101.5, volume=2000)]
        + quiet_candles(16, 20)
    )

    small = run_day(candles, account_size=10_000)
    large = run_day(candles, account_size=100_000)

    assert large.trades[0].shares > small.trades[0].shares


def test_config_and_overrides_merge(or_candles):
    """Overrides are merged onto the supplied config."""
    config = TradeConfig(opening_range_minutes=10)

    result = run_day(or_candles, config=config, overrides={"max_trades_per_day": 1})

    assert result.opening_range.candle_count == 10


def test_invalid_override_raises(or_candles):
    """Invalid override values are typed errors."""
    with pytest.raises(pydantic.ValidationError):
        run_day(or_candles, overrides={"confirmation_type": "body"})
