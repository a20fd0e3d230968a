"""Concurrent per-symbol candle fetching and RSI aggregation."""

import asyncio
import logging
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional

from rsiscanner.data.base import BaseFetcher, FetchError, check_timeframe
from rsiscanner.indicators import DEFAULT_PERIOD, compute_rsi
from rsiscanner.models import SymbolData

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[str, BaseException], None]


class SymbolDataAggregator:
    """Builds symbol -> SymbolData snapshots, one refresh cycle at a time.

    Every cycle fetches all symbols concurrently and swaps in a new
    read-only snapshot once all of them have settled. A symbol whose fetch
    fails keeps its entry from the previous snapshot (when that snapshot was
    for the same timeframe), and the failure is logged and handed to the
    optional ``on_error`` callback.

    Only one cycle runs at a time; calling ``refresh`` while one is pending
    returns the current snapshot untouched. ``invalidate`` marks the pending
    cycle stale so its results are dropped and a new cycle may start.
    """

    def __init__(
        self,
        fetcher: BaseFetcher,
        period: int = DEFAULT_PERIOD,
        on_error: Optional[ErrorCallback] = None,
    ):
        """Initialize the aggregator.

        Args:
            fetcher: Price-history source.
            period: RSI period.
            on_error: Called with (symbol, exception) for each failed fetch.
        """
        self._fetcher = fetcher
        self.period = period
        self._on_error = on_error
        self._snapshot: Mapping[str, SymbolData] = MappingProxyType({})
        self._snapshot_timeframe: Optional[str] = None
        self._generation = 0
        self._in_flight: Optional[int] = None

    @property
    def snapshot(self) -> Mapping[str, SymbolData]:
        """The latest complete snapshot."""
        return self._snapshot

    @property
    def timeframe(self) -> Optional[str]:
        """Timeframe of the latest snapshot, None before the first cycle."""
        return self._snapshot_timeframe

    @property
    def in_flight(self) -> bool:
        """Whether a current (non-stale) cycle is pending."""
        return self._in_flight == self._generation

    def invalidate(self) -> None:
        """Mark any pending cycle stale, e.g. after a timeframe change."""
        self._generation += 1

    async def refresh(self, symbols: Iterable[str], timeframe: str) -> Mapping[str, SymbolData]:
        """Run one refresh cycle.

        Args:
            symbols: Symbols to fetch. Duplicates are ignored.
            timeframe: Candle timeframe.

        Returns:
            The snapshot in effect after the cycle.

        Raises:
            ValueError: If the timeframe is not supported.
        """
        check_timeframe(timeframe)

        if self.in_flight:
            logger.debug("Refresh already in flight, skipping")
            return self._snapshot

        generation = self._generation
        self._in_flight = generation
        symbols = list(dict.fromkeys(symbols))

        try:
            results = await asyncio.gather(
                *(self._fetch_one(symbol, timeframe) for symbol in symbols),
                return_exceptions=True,
            )
        finally:
            if self._in_flight == generation:
                self._in_flight = None

        if generation != self._generation:
            logger.info("Discarding stale %s refresh for %d symbols", timeframe, len(symbols))
            return self._snapshot

        previous = self._snapshot if self._snapshot_timeframe == timeframe else {}
        updated: dict[str, SymbolData] = {}

        for symbol, result in zip(symbols, results):
            if isinstance(result, BaseException):
                self._report_failure(symbol, result)
                if symbol in previous:
                    updated[symbol] = previous[symbol]
            else:
                updated[symbol] = result

        self._snapshot = MappingProxyType(updated)
        self._snapshot_timeframe = timeframe
        logger.debug("Snapshot updated: %d/%d symbols", len(updated), len(symbols))
        return self._snapshot

    async def _fetch_one(self, symbol: str, timeframe: str) -> SymbolData:
        candles = await self._fetcher.fetch(symbol, timeframe)
        rsi = compute_rsi(candles, self.period)
        return SymbolData(
            symbol=symbol,
            timeframe=timeframe,
            candles=tuple(candles),
            rsi=tuple(rsi),
        )

    def _report_failure(self, symbol: str, error: BaseException) -> None:
        if isinstance(error, FetchError):
            logger.warning("%s", error)
        else:
            logger.error("Unexpected error fetching %s", symbol, exc_info=error)

        if self._on_error is not None:
            self._on_error(symbol, error)
