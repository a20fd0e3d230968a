"""Price-history sources and snapshot aggregation."""

from rsiscanner.data.base import (
    DEFAULT_TIMEFRAME,
    TIMEFRAMES,
    BaseFetcher,
    FetchError,
    check_timeframe,
)
from rsiscanner.data.aggregator import SymbolDataAggregator
from rsiscanner.data.binance import BinanceFetcher
from rsiscanner.data.simulated import SimulatedFetcher

__all__ = [
    "BaseFetcher",
    "BinanceFetcher",
    "DEFAULT_TIMEFRAME",
    "FetchError",
    "SimulatedFetcher",
    "SymbolDataAggregator",
    "TIMEFRAMES",
    "check_timeframe",
]
