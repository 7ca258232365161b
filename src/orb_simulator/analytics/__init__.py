"""Performance analytics, Monte Carlo resampling and result export."""

from .metrics import PerformanceMetrics, compute_metrics, equity_curve_frame
from .monte_carlo import MonteCarloRecord, MonteCarloResult, run_monte_carlo
from .exporter import ResultExporter

__all__ = [
    "PerformanceMetrics",
    "compute_metrics",
    "equity_curve_frame",
    "MonteCarloRecord",
    "MonteCarloResult",
    "run_monte_carlo",
    "ResultExporter",
]
