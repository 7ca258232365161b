"""Tests for the synthetic market generator."""

from datetime import date, time

import pytest

from orb_simulator.data import (
    STOCK_PROFILES,
    TickerProfile,
    generate_historical_series,
    generate_intraday_day,
    generate_pre_market_candles,
)
from orb_simulator.data.prng import next_day_seed
from orb_simulator.data.synthetic_provider import default_seed, volume_profile
from orb_simulator.utils import MS_PER_MINUTE, ms_to_exchange_date, session_time_ms

DAY = date(2025, 11, 3)


class TestIntradayDay:
    """Test single-session generation."""

    def test_deterministic(self):
        a = generate_intraday_day("SPY", DAY, 12345)
        b = generate_intraday_day("SPY", DAY, 12345)

        assert a.candles == b.candles
        assert a.open_price == b.open_price
        assert a.close_price == b.close_price

    def test_different_seeds_differ(self):
        a = generate_intraday_day("SPY", DAY, 1)
        b = generate_intraday_day("SPY", DAY, 2)

        assert a.candles != b.candles

    def test_session_shape(self):
        day = generate_intraday_day("AAPL", DAY, 99)

        assert len(day.candles) == 390
        assert day.candles[0].time == session_time_ms(DAY, time(9, 30))
        assert all(
            b.time - a.time == MS_PER_MINUTE for a, b in zip(day.candles, day.candles[1:])
        )
        assert ms_to_exchange_date(day.candles[-1].time) == DAY
        assert day.candles[0].timestamp.hour == 14  # 09:30 EST

    def test_ohlc_valid_and_rounded(self):
        day = generate_intraday_day("TSLA", DAY, 4242)

        for candle in day.candles:
            assert candle.is_valid
            assert candle.volume >= 0
            for price in (candle.open, candle.high, candle.low, candle.close):
                assert round(price, 2) == price

    def test_day_prices(self):
        day = generate_intraday_day("MSFT", DAY, 7)

        assert day.ticker == "MSFT"
        assert day.date == DAY
        assert day.open_price == day.candles[0].open
        assert day.close_price == day.candles[-1].close

    def test_prev_close_anchors_open(self):
        day = generate_intraday_day("SPY", DAY, 7, prev_close=10.0)

        assert day.open_price == pytest.approx(10.0 * (1 + day.pre_market_gap), abs=0.01)

    def test_unknown_ticker(self):
        assert generate_intraday_day("NOPE", DAY, 1) is None

    def test_custom_profile_table(self):
        profiles = {"ABC": TickerProfile("ABC Corp", 20.0, 0.02, 1_000_000, "Test")}

        day = generate_intraday_day("ABC", DAY, 5, profiles=profiles)

        assert day is not None
        assert 15.0 < day.open_price < 25.0


def test_volume_profile_is_u_shaped():
    assert volume_profile(0) > volume_profile(195)
    assert volume_profile(389) > volume_profile(195)
    assert volume_profile(0) > volume_profile(389)


def test_breakout_candles_carry_more_volume_on_average():
    day = generate_intraday_day("NVDA", DAY, 31337)
    first = day.candles[:15]
    high = max(c.high for c in first)
    low = min(c.low for c in first)

    middle = day.candles[120:270]
    outside = [c.volume for c in middle if c.high > high or c.low < low]
    inside = [c.volume for c in middle if low <= c.low and c.high <= high]

    if outside and inside:
        assert sum(outside) / len(outside) > sum(inside) / len(inside)


class TestHistoricalSeries:
    """Test chained multi-day generation."""

    def test_skips_weekends(self):
        days = list(generate_historical_series("SPY", date(2025, 11, 1), 5))

        assert [d.date for d in days] == [
            date(2025, 11, 3),
            date(2025, 11, 4),
            date(2025, 11, 5),
            date(2025, 11, 6),
            date(2025, 11, 7),
        ]

    def test_count_across_weekend(self):
        days = list(generate_historical_series("SPY", date(2025, 11, 6), 4))

        assert [d.date.weekday() for d in days] == [3, 4, 0, 1]

    def test_default_seed(self):
        assert default_seed("SPY") == ord("S") * 10000 + ord("P") * 100

    def test_seed_and_close_chain(self):
        days = list(generate_historical_series("QQQ", date(2025, 11, 3), 2, base_seed=77))

        seed1 = next_day_seed(77)
        seed2 = next_day_seed(seed1)
        first = generate_intraday_day("QQQ", days[0].date, seed1, STOCK_PROFILES["QQQ"].base_price)
        second = generate_intraday_day("QQQ", days[1].date, seed2, days[0].close_price)

        assert first.candles == days[0].candles
        assert second.candles == days[1].candles

    def test_deterministic(self):
        a = list(generate_historical_series("META", date(2025, 11, 3), 3))
        b = list(generate_historical_series("META", date(2025, 11, 3), 3))

        assert [d.candles for d in a] == [d.candles for d in b]

    def test_lazy_prefix(self):
        series = generate_historical_series("JPM", date(2025, 11, 3), 100)

        first = next(series)

        assert first.date == date(2025, 11, 3)

    def test_unknown_ticker_is_empty(self):
        assert list(generate_historical_series("NOPE", date(2025, 11, 3), 5)) == []


class TestPreMarket:
    """Test pre-market candles."""

    def test_shape(self):
        candles = generate_pre_market_candles("SPY", DAY, 123)

        assert len(candles) == 66
        assert candles[0].time == session_time_ms(DAY, time(4, 0))
        assert candles[-1].time == session_time_ms(DAY, time(9, 25))
        assert all(c.is_valid for c in candles)

    def test_deterministic(self):
        assert generate_pre_market_candles("SPY", DAY, 5) == generate_pre_market_candles(
            "SPY", DAY, 5
        )

    def test_unknown_ticker(self):
        assert generate_pre_market_candles("NOPE", DAY, 5) == []
