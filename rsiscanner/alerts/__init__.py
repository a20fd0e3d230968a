"""RSI alerting: status tracking, crossing detection and notifications."""

from rsiscanner.alerts.status import (
    OVERBOUGHT_THRESHOLD,
    OVERSOLD_THRESHOLD,
    AlertStatusTable,
    classify_rsi,
)
from rsiscanner.alerts.monitor import ALERT_TIMEFRAMES, AlertMonitor
from rsiscanner.alerts.notifications import DISPLAY_SECONDS, NotificationQueue

__all__ = [
    "ALERT_TIMEFRAMES",
    "AlertMonitor",
    "AlertStatusTable",
    "DISPLAY_SECONDS",
    "NotificationQueue",
    "OVERBOUGHT_THRESHOLD",
    "OVERSOLD_THRESHOLD",
    "classify_rsi",
]
