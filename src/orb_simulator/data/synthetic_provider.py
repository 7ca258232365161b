"""Synthetic intraday market generator.

Generates one-minute OHLCV sessions with realistic microstructure:

- overnight gap and a day-level trend bias
- mean reversion toward the open
- U-shaped intraday volume (heavy open, heavier-than-midday close)
- volume spikes on candles that break the opening range

Every value is a pure function of (ticker profile, seed, previous close), so
two runs with the same inputs produce identical candles.
"""

import math
from dataclasses import dataclass, field
from datetime import date, time
from typing import Iterator, List, Mapping, Optional

from loguru import logger

from ..utils.time_utils import MS_PER_MINUTE, business_days, session_time_ms
from .base import Candle
from .prng import LCGStream, next_day_seed, normal
from .profiles import TickerProfile, get_profile

SESSION_MINUTES = 390  # 09:30-16:00
SESSION_OPEN = time(9, 30)
PRE_MARKET_OPEN = time(4, 0)
PRE_MARKET_MINUTES = 330
PRE_MARKET_BAR_MINUTES = 5

# Live opening range tracked by the generator to place breakout volume spikes
OR_TRACKING_MINUTES = 15

GAP_VOL_SCALE = 0.6
TREND_VOL_SCALE = 0.3
NOISE_SCALE = 0.5
WICK_SCALE = 0.3
MEAN_REVERSION_STRENGTH = 0.02


@dataclass
class DayData:
    """One simulated trading session.

    Attributes:
        ticker: Ticker symbol.
        date: Session date.
        pre_market_gap: Overnight gap as a fraction of the previous close.
        open_price: Session open (rounded).
        close_price: Session close (rounded).
        candles: Regular-hours minute candles, time-ascending.
    """

    ticker: str
    date: date
    pre_market_gap: float
    open_price: float
    close_price: float
    candles: List[Candle] = field(default_factory=list)


def volume_profile(minute: int, total_minutes: int = SESSION_MINUTES) -> float:
    """U-shaped intraday volume multiplier.

    Args:
        minute: Minute index within the session.
        total_minutes: Session length in minutes.

    Returns:
        Multiplier (about 3.4 at the open, 0.4 midday, 2.9 at the close).
    """
    t = minute / total_minutes
    open_weight = math.exp(-8 * t) * 3
    close_weight = math.exp(-8 * (1 - t)) * 2.5
    return open_weight + close_weight + 0.4


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def generate_intraday_day(
    ticker: str,
    day: date,
    seed: int,
    prev_close: Optional[float] = None,
    profiles: Optional[Mapping[str, TickerProfile]] = None,
) -> Optional[DayData]:
    """Generate one regular session of one-minute candles.

    Args:
        ticker: Ticker symbol (must have a profile).
        day: Session date.
        seed: Seed for the session's uniform stream.
        prev_close: Previous session close (profile base price if None).
        profiles: Optional profile table overriding the built-in one.

    Returns:
        DayData with 390 candles, or None for an unknown ticker.
    """
    profile = get_profile(ticker, profiles)
    if profile is None:
        logger.warning(f"No ticker profile for {ticker}; no candles generated")
        return None

    stream = LCGStream(seed)
    base_price = prev_close if prev_close else profile.base_price
    vol = profile.volatility

    gap_pct = normal(stream) * vol * GAP_VOL_SCALE
    current_price = base_price * (1 + gap_pct)
    open_price = current_price

    trend_bias = normal(stream) * vol * TREND_VOL_SCALE
    minute_vol = vol / math.sqrt(SESSION_MINUTES)
    trend = trend_bias / SESSION_MINUTES
    minute_volume = profile.avg_volume / SESSION_MINUTES

    or_high = -math.inf
    or_low = math.inf

    start_ms = session_time_ms(day, SESSION_OPEN)
    candles: List[Candle] = []

    for i in range(SESSION_MINUTES):
        vol_mult = volume_profile(i)

        noise = normal(stream) * minute_vol * vol_mult * NOISE_SCALE
        mean_rev = MEAN_REVERSION_STRENGTH * (open_price - current_price) / open_price * minute_vol
        price_change = noise + trend + mean_rev

        bar_open = current_price
        intra_high = bar_open * (1 + abs(normal(stream) * minute_vol * WICK_SCALE))
        intra_low = bar_open * (1 - abs(normal(stream) * minute_vol * WICK_SCALE))
        current_price = bar_open * (1 + price_change)
        bar_close = current_price

        bar_high = max(bar_open, bar_close, intra_high)
        bar_low = min(bar_open, bar_close, intra_low)

        if i < OR_TRACKING_MINUTES:
            or_high = max(or_high, bar_high)
            or_low = min(or_low, bar_low)

        base_volume = minute_volume * vol_mult
        if i >= OR_TRACKING_MINUTES and (bar_high > or_high or bar_low < or_low):
            base_volume *= 1.8 + stream.next() * 1.2

        volume = max(0, _round_half_up(base_volume * (0.5 + stream.next())))

        candles.append(
            Candle(
                time=start_ms + i * MS_PER_MINUTE,
                open=round(bar_open, 2),
                high=round(bar_high, 2),
                low=round(bar_low, 2),
                close=round(bar_close, 2),
                volume=volume,
            )
        )

    return DayData(
        ticker=ticker.upper(),
        date=day,
        pre_market_gap=gap_pct,
        open_price=round(open_price, 2),
        close_price=round(current_price, 2),
        candles=candles,
    )


def default_seed(ticker: str) -> int:
    """Ticker-derived seed used when the caller supplies none."""
    ticker = ticker.upper()
    second = ticker[1] if len(ticker) > 1 else "\0"
    return ord(ticker[0]) * 10000 + ord(second) * 100


def generate_historical_series(
    ticker: str,
    start_date: date,
    num_days: int,
    base_seed: Optional[int] = None,
    profiles: Optional[Mapping[str, TickerProfile]] = None,
) -> Iterator[DayData]:
    """Chain sessions across ``num_days`` business days.

    Weekends are skipped. Each session's seed advances through its own
    recurrence and each session opens off the previous session's close, so
    the series is strictly sequential. Callers may stop iterating at any day.

    Args:
        ticker: Ticker symbol.
        start_date: First calendar date considered.
        num_days: Number of business days to generate.
        base_seed: Starting seed (ticker-derived if None).
        profiles: Optional profile table overriding the built-in one.

    Yields:
        DayData per business day, in date order.
    """
    profile = get_profile(ticker, profiles)
    if profile is None:
        logger.error(f"Unknown ticker {ticker}: historical series is empty")
        return

    seed = default_seed(ticker) if base_seed is None else base_seed
    prev_close: Optional[float] = profile.base_price

    for day in business_days(start_date, num_days):
        seed = next_day_seed(seed)
        day_data = generate_intraday_day(ticker, day, seed, prev_close, profiles)
        if day_data is None:
            continue
        prev_close = day_data.close_price
        yield day_data


def generate_pre_market_candles(
    ticker: str,
    day: date,
    seed: int,
    prev_close: Optional[float] = None,
    profiles: Optional[Mapping[str, TickerProfile]] = None,
) -> List[Candle]:
    """Generate sparse five-minute pre-market candles (04:00-09:25).

    Args:
        ticker: Ticker symbol.
        day: Session date.
        seed: Session seed (the pre-market stream is offset from it).
        prev_close: Previous session close (profile base price if None).
        profiles: Optional profile table overriding the built-in one.

    Returns:
        List of candles, empty for an unknown ticker.
    """
    profile = get_profile(ticker, profiles)
    if profile is None:
        return []

    stream = LCGStream(seed + 999)
    current_price = prev_close if prev_close else profile.base_price
    start_ms = session_time_ms(day, PRE_MARKET_OPEN)

    candles = []
    for minute in range(0, PRE_MARKET_MINUTES, PRE_MARKET_BAR_MINUTES):
        noise = normal(stream) * profile.volatility * 0.005
        bar_open = current_price
        current_price = bar_open * (1 + noise)
        bar_close = current_price
        bar_high = max(bar_open, bar_close) * (1 + abs(normal(stream) * 0.001))
        bar_low = min(bar_open, bar_close) * (1 - abs(normal(stream) * 0.001))
        volume = _round_half_up(profile.avg_volume * 0.001 * stream.next())

        candles.append(
            Candle(
                time=start_ms + minute * MS_PER_MINUTE,
                open=round(bar_open, 2),
                high=round(bar_high, 2),
                low=round(bar_low, 2),
                close=round(bar_close, 2),
                volume=volume,
            )
        )

    return candles
