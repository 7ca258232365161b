"""Candle schema shared by every data source.

Synthetic, historical and live sources must all hand the strategy the same
shape: time-ascending one-minute candles with no missing numeric fields.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Iterable, List

import pandas as pd

from ..utils.time_utils import ms_to_datetime

CANDLE_COLUMNS = ["time", "open", "high", "low", "close", "volume"]


@dataclass(frozen=True)
class Candle:
    """Standardized OHLCV minute bar.

    Attributes:
        time: Bar open time (epoch milliseconds, UTC).
        open: Opening price.
        high: High price.
        low: Low price.
        close: Closing price.
        volume: Share volume (non-negative integer).
    """

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: int

    @property
    def timestamp(self) -> datetime:
        """Bar open time as an aware UTC datetime."""
        return ms_to_datetime(self.time)

    @property
    def time_str(self) -> str:
        """ISO-8601 bar open time."""
        return self.timestamp.isoformat()

    @property
    def is_valid(self) -> bool:
        """Check the OHLC envelope and volume sign."""
        return (
            self.low <= min(self.open, self.close)
            and max(self.open, self.close) <= self.high
            and self.volume >= 0
        )

    def to_dict(self) -> dict:
        """Convert candle to dict for serialization."""
        return asdict(self)


def candles_to_frame(candles: Iterable[Candle]) -> pd.DataFrame:
    """Convert candles to a DataFrame with the standard columns.

    Args:
        candles: Candles to convert.

    Returns:
        DataFrame with columns time, open, high, low, close, volume.
    """
    return pd.DataFrame([c.to_dict() for c in candles], columns=CANDLE_COLUMNS)


def candles_from_frame(df: pd.DataFrame) -> List[Candle]:
    """Map an external OHLCV frame onto the Candle schema.

    Accepts either a ``time`` column in epoch milliseconds or a ``timestamp``
    column / DatetimeIndex of datetimes (naive values are taken as UTC).

    Args:
        df: Frame with open, high, low, close, volume columns.

    Returns:
        List of validated candles.

    Raises:
        ValueError: If columns are missing, values are null, times are not
            strictly ascending, or a bar violates the OHLC envelope.
    """
    if df.empty:
        return []

    frame = df.copy()

    if "time" not in frame.columns:
        if "timestamp" in frame.columns:
            stamps = pd.to_datetime(frame["timestamp"], utc=True)
        elif isinstance(frame.index, pd.DatetimeIndex):
            stamps = pd.to_datetime(frame.index, utc=True).to_series(index=frame.index)
        else:
            raise ValueError("Frame needs a 'time', 'timestamp' column or a DatetimeIndex")
        epoch = pd.Timestamp("1970-01-01", tz="UTC")
        frame["time"] = ((stamps - epoch) // pd.Timedelta(milliseconds=1)).to_numpy()

    missing = [c for c in CANDLE_COLUMNS if c not in frame.columns]
    if missing:
        raise ValueError(f"Frame is missing candle columns: {missing}")

    values = frame[CANDLE_COLUMNS]
    if values.isna().any().any():
        raise ValueError("Candle frame contains null values")

    times = values["time"].astype("int64")
    if not times.is_monotonic_increasing or times.duplicated().any():
        raise ValueError("Candle times must be strictly ascending")

    candles = []
    for row in values.itertuples(index=False):
        candle = Candle(
            time=int(row.time),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=int(round(row.volume)),
        )
        if not candle.is_valid:
            raise ValueError(f"Invalid OHLCV candle at {candle.time_str}: {candle}")
        candles.append(candle)

    return candles
