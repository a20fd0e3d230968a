"""Threshold-crossing detection across refresh cycles."""

import logging
from typing import Iterable, Mapping, Optional

from rsiscanner.alerts.status import AlertStatusTable, classify_rsi
from rsiscanner.models import AlertKind, AlertStatus, SymbolData, ToastDraft

logger = logging.getLogger(__name__)

# Shorter timeframes are too noisy to alert on
ALERT_TIMEFRAMES = frozenset({"15m", "30m", "1h", "2h", "4h", "8h", "1d", "3d", "1w"})


class AlertMonitor:
    """Emits one notification per transition into overbought or oversold.

    Each call to ``evaluate`` classifies the latest RSI of every symbol in a
    snapshot, records the status, and returns drafts only for symbols whose
    status changed into an extreme. Staying overbought across cycles, or
    returning to neutral, yields nothing.

    While alerting is disabled, or for timeframes outside the allow-list,
    evaluation is skipped entirely and the status table is left untouched.
    """

    def __init__(
        self,
        enabled: bool = False,
        allowed_timeframes: Iterable[str] = ALERT_TIMEFRAMES,
        table: Optional[AlertStatusTable] = None,
    ):
        self.enabled = enabled
        self.allowed_timeframes = frozenset(allowed_timeframes)
        self.table = table if table is not None else AlertStatusTable()

    def is_active(self, timeframe: str) -> bool:
        return self.enabled and timeframe in self.allowed_timeframes

    def evaluate(self, snapshot: Mapping[str, SymbolData], timeframe: str) -> list[ToastDraft]:
        """Process one refresh cycle.

        Args:
            snapshot: Mapping of symbol to its latest data.
            timeframe: Timeframe the snapshot was computed on.

        Returns:
            Notification drafts for symbols that just became overbought or
            oversold, in snapshot order.
        """
        if not self.is_active(timeframe) or not snapshot:
            return []

        drafts = []
        for symbol, data in snapshot.items():
            value = data.latest_rsi
            if value is None:
                continue

            status = classify_rsi(value)
            changed = self.table.update(symbol, status)
            if not changed or status is AlertStatus.NEUTRAL:
                continue

            kind = AlertKind.OVERBOUGHT if status is AlertStatus.OVERBOUGHT else AlertKind.OVERSOLD
            logger.info("%s (%s) is now %s at %.2f", symbol, timeframe, kind.value, value)
            drafts.append(ToastDraft(symbol=symbol, timeframe=timeframe, rsi_value=value, kind=kind))

        return drafts
