"""Run-scoped loguru setup.

Console output always; with ``log_to_file`` the log is written into the
run's artifact directory (``output_dir/<run_id>/backtest.log``) so it sits
next to the exported trades and metrics.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config import BacktestConfig, resolved_config_hash

LOG_FILENAME = "backtest.log"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[ticker]}</magenta> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | run={extra[run_id]} "
    "ticker={extra[ticker]} | {name}:{function}:{line} - {message}"
)


def run_log_path(config: BacktestConfig) -> Path:
    """Where a run's log file goes."""
    return Path(config.output_dir) / resolved_config_hash(config) / LOG_FILENAME


def setup_logger(config: BacktestConfig, serialize: bool = False) -> Optional[Path]:
    """Configure loguru for one backtest run.

    Every record carries the run id and ticker in ``extra`` so file logs
    from different runs can be told apart.

    Args:
        config: Run configuration (log_level, log_to_file, output_dir).
        serialize: Write the file sink as JSON lines.

    Returns:
        Path of the log file, or None when file logging is off.
    """
    logger.remove()
    logger.configure(extra={"run_id": resolved_config_hash(config), "ticker": config.ticker})

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=config.log_level, colorize=True)

    if not config.log_to_file:
        return None

    log_path = run_log_path(config)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_path,
        format=FILE_FORMAT,
        level=config.log_level,
        rotation="10 MB",
        compression="zip",
        serialize=serialize,
    )
    return log_path
