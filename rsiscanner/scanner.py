"""Periodic refresh loop tying data, alerts and notifications together."""

import asyncio
import contextlib
import logging
from typing import Callable, Iterable, Mapping, Optional

from rsiscanner.alerts import AlertMonitor, NotificationQueue
from rsiscanner.alerts.notifications import DISPLAY_SECONDS
from rsiscanner.data import DEFAULT_TIMEFRAME, BaseFetcher, SymbolDataAggregator, check_timeframe
from rsiscanner.data.aggregator import ErrorCallback
from rsiscanner.indicators import DEFAULT_PERIOD
from rsiscanner.models import SymbolData, ToastNotification
from rsiscanner.settings import normalize_symbols

logger = logging.getLogger(__name__)

REFRESH_SECONDS = 60.0

SnapshotListener = Callable[[Mapping[str, SymbolData]], None]


class Scanner:
    """Refreshes tracked symbols on a fixed interval and raises alerts.

    Each refresh runs one aggregator cycle. A new snapshot is handed to the
    alert monitor, every resulting draft is pushed to the notification
    queue, and snapshot listeners are called. Changing the timeframe or the
    symbol set drops any in-flight cycle and triggers an immediate refresh.
    """

    def __init__(
        self,
        fetcher: BaseFetcher,
        symbols: Iterable[str],
        timeframe: str = DEFAULT_TIMEFRAME,
        refresh_seconds: float = REFRESH_SECONDS,
        period: int = DEFAULT_PERIOD,
        alerts_enabled: bool = False,
        display_seconds: float = DISPLAY_SECONDS,
        on_error: Optional[ErrorCallback] = None,
    ):
        check_timeframe(timeframe)
        self.refresh_seconds = refresh_seconds
        self.aggregator = SymbolDataAggregator(fetcher, period=period, on_error=on_error)
        self.monitor = AlertMonitor(enabled=alerts_enabled)
        self.notifications = NotificationQueue(display_seconds=display_seconds)
        self._symbols = normalize_symbols(symbols)
        self._timeframe = timeframe
        self._listeners: list[SnapshotListener] = []
        self._last_snapshot: Optional[Mapping[str, SymbolData]] = None
        self._wakeup = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._cycles: set[asyncio.Task] = set()

    @property
    def symbols(self) -> list[str]:
        return list(self._symbols)

    @property
    def timeframe(self) -> str:
        return self._timeframe

    @property
    def snapshot(self) -> Mapping[str, SymbolData]:
        return self.aggregator.snapshot

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def on_snapshot(self, listener: SnapshotListener) -> None:
        """Register a callback for every newly swapped-in snapshot."""
        self._listeners.append(listener)

    def set_alerts_enabled(self, enabled: bool) -> None:
        self.monitor.enabled = enabled

    def set_timeframe(self, timeframe: str) -> None:
        """Switch timeframe and refresh right away."""
        check_timeframe(timeframe)
        if timeframe == self._timeframe:
            return
        self._timeframe = timeframe
        self._supersede()

    def set_symbols(self, symbols: Iterable[str]) -> None:
        """Replace the tracked symbols and refresh right away."""
        symbols = normalize_symbols(symbols)
        if symbols == self._symbols:
            return
        self._symbols = symbols
        self._supersede()

    async def refresh_once(self) -> list[ToastNotification]:
        """Run one refresh cycle and process its snapshot.

        Returns:
            Notifications queued by this cycle.
        """
        snapshot = await self.aggregator.refresh(self._symbols, self._timeframe)
        if snapshot is self._last_snapshot:
            return []
        self._last_snapshot = snapshot

        timeframe = self.aggregator.timeframe or self._timeframe
        toasts = [self.notifications.push(d) for d in self.monitor.evaluate(snapshot, timeframe)]

        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener %r failed", listener)
        return toasts

    async def run(self) -> None:
        """Refresh forever, every ``refresh_seconds`` or when woken early.

        Each cycle runs as its own task. A wakeup after a timeframe or symbol
        change starts a new cycle right away instead of waiting for a slow
        stale one to settle; the aggregator drops the stale results.
        """
        while True:
            self._wakeup.clear()
            self._spawn_cycle()
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._wakeup.wait(), timeout=self.refresh_seconds)

    def start(self) -> asyncio.Task:
        """Start the refresh loop as a background task."""
        if not self.running:
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Cancel the refresh loop and its cycles, and drop pending notifications."""
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

        cycles = list(self._cycles)
        for cycle in cycles:
            cycle.cancel()
        await asyncio.gather(*cycles, return_exceptions=True)
        self.notifications.clear()

    def _spawn_cycle(self) -> None:
        cycle = asyncio.create_task(self.refresh_once())
        self._cycles.add(cycle)
        cycle.add_done_callback(self._cycle_done)

    def _cycle_done(self, cycle: asyncio.Task) -> None:
        self._cycles.discard(cycle)
        if cycle.cancelled():
            return
        error = cycle.exception()
        if error is not None:
            logger.error("Refresh cycle failed", exc_info=error)

    def _supersede(self) -> None:
        logger.info("Selection changed: %d symbols on %s", len(self._symbols), self._timeframe)
        self.aggregator.invalidate()
        self._wakeup.set()
