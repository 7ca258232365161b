"""ORB Simulator.

Deterministic synthetic-market backtester for intraday Opening Range Breakout
(ORB) strategies, with partial profits, trailing stops, performance metrics
and Monte Carlo resampling of realized trades.
"""

__version__ = "0.1.0"
