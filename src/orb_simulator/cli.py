"""Command-line interface for running backtests."""

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from .analytics import ResultExporter
from .backtest import BacktestEngine, BacktestResult
from .config import load_config
from .utils import setup_logger


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Opening Range Breakout simulator and backtester"
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to backtest configuration YAML file (defaults when omitted)",
    )

    parser.add_argument("--ticker", "-t", type=str, default=None, help="Ticker to simulate")

    parser.add_argument(
        "--days",
        "-d",
        type=int,
        default=None,
        help="Number of business days to backtest",
    )

    parser.add_argument(
        "--start-date",
        type=date.fromisoformat,
        default=None,
        help="First calendar date (YYYY-MM-DD)",
    )

    parser.add_argument("--seed", type=int, default=None, help="Base seed for the series")

    parser.add_argument(
        "--output-dir",
        "-o",
        type=Path,
        default=None,
        help="Override output directory (default from config)",
    )

    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Do not write run artifacts",
    )

    parser.add_argument(
        "--no-monte-carlo",
        action="store_true",
        help="Skip the Monte Carlo resampling",
    )

    return parser


def _overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.ticker:
        overrides["ticker"] = args.ticker
    if args.days is not None:
        overrides["num_days"] = args.days
    if args.start_date is not None:
        overrides["start_date"] = args.start_date
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.output_dir is not None:
        overrides["output_dir"] = args.output_dir
    if args.no_monte_carlo:
        overrides["monte_carlo"] = {"enabled": False}
    return overrides


def print_summary(result: BacktestResult) -> None:
    """Print the backtest summary table."""
    m = result.metrics

    print("\n" + "=" * 60)
    print("BACKTEST SUMMARY")
    print("=" * 60)
    print(f"Run ID:           {result.run_id}")
    print(f"Ticker:           {result.config.ticker}")
    print(f"Days:             {len(result.daily_results)}")
    print(f"Total Trades:     {m.total_trades} ({m.long_trades} long / {m.short_trades} short)")
    print(f"Win Rate:         {m.win_rate:.1f}%")
    print(f"Total P&L:        {m.total_pnl:,.2f}")
    print(f"Profit Factor:    {m.profit_factor:.2f}")
    print(f"Expectancy:       {m.expectancy:.2f}")
    print(f"Max Drawdown:     {m.max_drawdown:,.2f} ({m.max_drawdown_pct:.2f}%)")
    print(f"Sharpe:           {m.sharpe_ratio:.2f}")
    print(f"Sortino:          {m.sortino_ratio:.2f}")
    print(f"Final Equity:     {m.final_equity:,.2f} ({m.total_return_pct:+.2f}%)")

    mc = result.monte_carlo
    if mc is not None:
        print("-" * 60)
        print(f"Monte Carlo ({mc.num_simulations} sims)")
        print(f"  5th pct:        {mc.percentile_5.final_equity:,.2f}")
        print(f"  Median:         {mc.median.final_equity:,.2f}")
        print(f"  95th pct:       {mc.percentile_95.final_equity:,.2f}")
        print(f"  P(profit):      {mc.probability_of_profit:.1f}%")
    print("=" * 60)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    args = build_parser().parse_args(argv)

    if args.config is not None and not args.config.exists():
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        return 1

    try:
        config = load_config(args.config, overrides=_overrides_from_args(args))

        log_path = setup_logger(config)
        if log_path is not None:
            logger.info(f"Logging to {log_path}")

        result = BacktestEngine(config).run()

        print_summary(result)

        if not args.no_export:
            run_dir = ResultExporter(config.output_dir).export_result(result)
            print(f"\nResults saved to: {run_dir}")

        return 0

    except Exception as e:
        logger.exception(f"Backtest failed: {e}")
        print(f"\nError: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
