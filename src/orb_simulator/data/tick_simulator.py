"""Real-time tick simulator.

Random-walks a price from a ticker profile and quotes a fixed relative
bid/ask spread around it.
"""

import math
import time as _time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from .prng import LCG_MODULUS, LCGStream, normal
from .profiles import TickerProfile, get_profile

SPREAD_FRACTION = 0.0002  # 0.02% of price
TICK_VOL_SCALE = 0.001


@dataclass(frozen=True)
class Tick:
    """Single simulated quote."""

    price: float
    bid: float
    ask: float
    volume: int
    timestamp: int
    tick_number: int


def _wall_clock_ms() -> int:
    return int(_time.time() * 1000)


class TickSimulator:
    """Random-walk quote generator for one ticker.

    Example:
        >>> sim = TickSimulator(STOCK_PROFILES["SPY"], seed=7)
        >>> tick = sim.next_tick()
        >>> tick.bid <= tick.price <= tick.ask
        True
    """

    def __init__(
        self,
        profile: TickerProfile,
        start_price: Optional[float] = None,
        seed: Optional[int] = None,
        clock: Callable[[], int] = _wall_clock_ms,
    ) -> None:
        """Initialize tick simulator.

        Args:
            profile: Ticker profile (volatility drives the walk).
            start_price: Starting price (profile base price if None).
            seed: Stream seed (wall clock if None).
            clock: Callable returning epoch milliseconds for tick timestamps.
        """
        self.profile = profile
        self._price = start_price if start_price else profile.base_price
        self._tick_count = 0
        self._clock = clock
        if seed is None:
            seed = _time.time_ns() % LCG_MODULUS
        self._stream = LCGStream(seed)

    @property
    def tick_count(self) -> int:
        """Number of ticks emitted so far."""
        return self._tick_count

    def next_tick(self) -> Tick:
        """Advance the walk by one tick and quote it."""
        self._tick_count += 1
        noise = normal(self._stream) * self.profile.volatility * TICK_VOL_SCALE
        self._price = self._price * (1 + noise)
        spread = self._price * SPREAD_FRACTION
        volume = int(math.floor(100 + self._stream.next() * 500 + 0.5))

        return Tick(
            price=round(self._price, 2),
            bid=round(self._price - spread / 2, 2),
            ask=round(self._price + spread / 2, 2),
            volume=volume,
            timestamp=self._clock(),
            tick_number=self._tick_count,
        )

    def get_current_price(self) -> float:
        """Current price (no side effects)."""
        return round(self._price, 2)


def create_tick_simulator(
    ticker: str,
    start_price: Optional[float] = None,
    seed: Optional[int] = None,
    profiles: Optional[Mapping[str, TickerProfile]] = None,
    clock: Callable[[], int] = _wall_clock_ms,
) -> Optional[TickSimulator]:
    """Build a tick simulator for ``ticker`` (None when the ticker is unknown)."""
    profile = get_profile(ticker, profiles)
    if profile is None:
        return None
    return TickSimulator(profile, start_price=start_price, seed=seed, clock=clock)
