"""Opening Range (OR) calculation.

The opening range is the high/low band of the first K minutes of a session.
It is computed once per day; fewer than K candles means no range and no
trading that day.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from loguru import logger

from ..data.base import Candle


@dataclass(frozen=True)
class OpeningRange:
    """Finalized opening range of one session.

    Attributes:
        high: Highest high of the range candles.
        low: Lowest low of the range candles.
        range_size: high - low.
        midpoint: Middle of the band.
        avg_volume: Mean range-candle volume (rounded).
        total_volume: Summed range-candle volume.
        end_time: Time of the last range candle (epoch ms).
        open_price: Open of the first range candle.
        candle_count: Number of candles in the range (K).
    """

    high: float
    low: float
    range_size: float
    midpoint: float
    avg_volume: int
    total_volume: int
    end_time: int
    open_price: float
    candle_count: int

    @property
    def range_percent(self) -> float:
        """Range size as a percent of the session open."""
        if self.open_price <= 0:
            return 0.0
        return round(self.range_size / self.open_price * 100, 3)

    def snapshot(self) -> dict:
        """Compact high/low/size view stored on equity points."""
        return {"high": self.high, "low": self.low, "range_size": self.range_size}

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"OpeningRange(H={self.high:.2f} L={self.low:.2f} "
            f"W={self.range_size:.2f}, {self.candle_count} bars)"
        )


def compute_opening_range(
    candles: Sequence[Candle],
    minutes: int = 15,
) -> Optional[OpeningRange]:
    """Reduce the first ``minutes`` candles of a session to an opening range.

    Args:
        candles: Session candles, time-ascending.
        minutes: Opening range length K (one candle per minute).

    Returns:
        OpeningRange, or None if fewer than K candles are available.

    Examples:
        >>> opening_range = compute_opening_range(day.candles, minutes=15)
        >>> if opening_range is None:
        ...     print("no range, no trading")
    """
    or_candles = candles[:minutes]
    if minutes <= 0 or len(or_candles) < minutes:
        logger.debug(f"Insufficient candles for opening range: {len(or_candles)} < {minutes}")
        return None

    high = round(max(c.high for c in or_candles), 2)
    low = round(min(c.low for c in or_candles), 2)
    total_volume = sum(c.volume for c in or_candles)

    return OpeningRange(
        high=high,
        low=low,
        range_size=high - low,
        midpoint=round((high + low) / 2, 2),
        avg_volume=int(math.floor(total_volume / len(or_candles) + 0.5)),
        total_volume=total_volume,
        end_time=or_candles[-1].time,
        open_price=or_candles[0].open,
        candle_count=len(or_candles),
    )
