"""Utility functions and helpers."""

from .logging import run_log_path, setup_logger
from .time_utils import (
    EXCHANGE_TZ,
    MS_PER_MINUTE,
    business_days,
    is_weekend,
    ms_to_datetime,
    ms_to_exchange_date,
    session_time_ms,
)

__all__ = [
    "run_log_path",
    "setup_logger",
    "EXCHANGE_TZ",
    "MS_PER_MINUTE",
    "business_days",
    "is_weekend",
    "ms_to_datetime",
    "ms_to_exchange_date",
    "session_time_ms",
]
