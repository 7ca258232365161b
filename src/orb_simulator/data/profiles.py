"""Ticker profiles driving the synthetic market."""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional


@dataclass(frozen=True)
class TickerProfile:
    """Price and liquidity profile of a simulated ticker.

    Attributes:
        name: Display name.
        base_price: Starting price when no previous close exists.
        volatility: Daily volatility (fraction, e.g. 0.018 = 1.8%).
        avg_volume: Average daily share volume.
        sector: Sector label.
    """

    name: str
    base_price: float
    volatility: float
    avg_volume: int
    sector: str


STOCK_PROFILES: Dict[str, TickerProfile] = {
    "AAPL": TickerProfile("Apple Inc.", 189.50, 0.018, 55_000_000, "Technology"),
    "MSFT": TickerProfile("Microsoft Corp.", 415.20, 0.016, 22_000_000, "Technology"),
    "GOOGL": TickerProfile("Alphabet Inc.", 175.80, 0.020, 25_000_000, "Technology"),
    "AMZN": TickerProfile("Amazon.com Inc.", 198.40, 0.022, 48_000_000, "Consumer Cyclical"),
    "TSLA": TickerProfile("Tesla Inc.", 245.60, 0.035, 95_000_000, "Automotive"),
    "NVDA": TickerProfile("NVIDIA Corp.", 875.30, 0.030, 42_000_000, "Technology"),
    "META": TickerProfile("Meta Platforms", 505.10, 0.024, 18_000_000, "Technology"),
    "JPM": TickerProfile("JPMorgan Chase", 198.70, 0.014, 10_000_000, "Financial"),
    "SPY": TickerProfile("S&P 500 ETF", 512.40, 0.010, 75_000_000, "ETF"),
    "QQQ": TickerProfile("Nasdaq 100 ETF", 438.90, 0.013, 45_000_000, "ETF"),
}


def get_profile(
    ticker: str,
    profiles: Optional[Mapping[str, TickerProfile]] = None,
) -> Optional[TickerProfile]:
    """Look up a ticker profile (None when unknown)."""
    table = STOCK_PROFILES if profiles is None else profiles
    return table.get(ticker.upper())
