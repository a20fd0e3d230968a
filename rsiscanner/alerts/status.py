"""RSI regime classification and per-symbol status tracking."""

from typing import Iterator

from rsiscanner.models import AlertStatus

OVERBOUGHT_THRESHOLD = 70.0
OVERSOLD_THRESHOLD = 30.0


def classify_rsi(value: float) -> AlertStatus:
    """Map an RSI value to its regime.

    Args:
        value: RSI value (0-100).

    Returns:
        OVERBOUGHT at or above 70, OVERSOLD at or below 30, else NEUTRAL.
    """
    if value >= OVERBOUGHT_THRESHOLD:
        return AlertStatus.OVERBOUGHT
    if value <= OVERSOLD_THRESHOLD:
        return AlertStatus.OVERSOLD
    return AlertStatus.NEUTRAL


class AlertStatusTable:
    """Last recorded AlertStatus per symbol.

    Symbols that were never recorded read as NEUTRAL. The table lives for
    the lifetime of the process and is not persisted.
    """

    def __init__(self):
        self._statuses: dict[str, AlertStatus] = {}

    def get(self, symbol: str) -> AlertStatus:
        return self._statuses.get(symbol, AlertStatus.NEUTRAL)

    def update(self, symbol: str, status: AlertStatus) -> bool:
        """Record a status for a symbol.

        Returns:
            True if the status differs from the previously recorded one.
        """
        changed = self.get(symbol) is not status
        self._statuses[symbol] = status
        return changed

    def reset(self) -> None:
        self._statuses.clear()

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._statuses

    def __iter__(self) -> Iterator[str]:
        return iter(self._statuses)

    def __len__(self) -> int:
        return len(self._statuses)
