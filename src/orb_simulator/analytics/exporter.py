"""Result exporter for saving backtest artifacts."""

import json
import math
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict

import pandas as pd
from loguru import logger

from ..config import save_config
from .metrics import equity_curve_frame

if TYPE_CHECKING:
    from ..backtest.engine import BacktestResult


def _json_safe(value: Any) -> Any:
    """Replace non-finite floats (profit factor may be inf) with strings."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


class ResultExporter:
    """Exports backtest results to a run directory.

    Saves:
    - Trades log (Parquet)
    - Equity curve (Parquet)
    - Daily results (Parquet)
    - Metrics and Monte Carlo summary (JSON)
    - Configuration snapshot (YAML)
    """

    def __init__(self, output_dir: Path) -> None:
        """Initialize result exporter.

        Args:
            output_dir: Base output directory.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def export_result(self, result: "BacktestResult") -> Path:
        """Export backtest result to files.

        Args:
            result: Backtest result to export.

        Returns:
            Path to run directory.
        """
        run_dir = self.output_dir / result.run_id
        run_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Exporting backtest results to {run_dir}")

        if result.trades:
            trades_path = run_dir / "trades.parquet"
            trades_df = pd.DataFrame([t.to_dict() for t in result.trades])
            trades_df.to_parquet(trades_path, compression="snappy")
            logger.info(f"Saved {len(trades_df)} trades to {trades_path}")

        equity_path = run_dir / "equity_curve.parquet"
        equity_curve_frame(result.equity_curve).to_parquet(equity_path, compression="snappy")
        logger.info(f"Saved equity curve to {equity_path}")

        if result.daily_results:
            daily_path = run_dir / "daily_results.parquet"
            daily_df = pd.DataFrame([d.to_dict() for d in result.daily_results])
            daily_df.to_parquet(daily_path, compression="snappy")
            logger.info(f"Saved {len(daily_df)} daily results to {daily_path}")

        self._write_json(run_dir / "metrics.json", self._extract_metrics(result))

        if result.monte_carlo is not None:
            self._write_json(run_dir / "monte_carlo.json", result.monte_carlo.to_dict())

        save_config(result.config, run_dir / "config.yaml")

        return run_dir

    @staticmethod
    def _extract_metrics(result: "BacktestResult") -> Dict[str, Any]:
        """Metrics dict tagged with the run id and ticker."""
        metrics = {"run_id": result.run_id, "ticker": result.config.ticker}
        metrics.update(result.metrics.to_dict())
        return metrics

    @staticmethod
    def _write_json(path: Path, data: Dict[str, Any]) -> None:
        with path.open("w") as f:
            json.dump(_json_safe(data), f, indent=2, default=str)
        logger.info(f"Saved {path.name} to {path}")
