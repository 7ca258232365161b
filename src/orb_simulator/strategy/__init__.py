"""Strategy orchestration for a single session."""

from .runner import DayResult, DaySummary, run_day, summarize_day

__all__ = ["DayResult", "DaySummary", "run_day", "summarize_day"]
