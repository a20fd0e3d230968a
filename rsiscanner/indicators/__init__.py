"""Technical indicators module."""

from rsiscanner.indicators.rsi import DEFAULT_PERIOD, calculate_rsi, compute_rsi

__all__ = [
    "DEFAULT_PERIOD",
    "calculate_rsi",
    "compute_rsi",
]
