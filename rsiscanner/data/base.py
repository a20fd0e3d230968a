"""Base price-history fetcher interface."""

from abc import ABC, abstractmethod

from rsiscanner.models import Candle

# Supported candle timeframes, shortest first
TIMEFRAMES = ("1m", "3m", "5m", "15m", "30m", "1h", "2h", "4h", "8h", "1d", "3d", "1w")

DEFAULT_TIMEFRAME = "15m"


class FetchError(RuntimeError):
    """Raised when price history cannot be fetched or parsed."""

    def __init__(self, symbol: str, timeframe: str, message: str):
        super().__init__(f"Failed to fetch {timeframe} candles for {symbol}: {message}")
        self.symbol = symbol
        self.timeframe = timeframe


def check_timeframe(timeframe: str) -> None:
    """Raise ValueError for an unsupported timeframe."""
    if timeframe not in TIMEFRAMES:
        raise ValueError(f"Invalid timeframe: {timeframe}. Must be one of {list(TIMEFRAMES)}")


class BaseFetcher(ABC):
    """Abstract base class for price-history sources.

    Implementations (Binance, simulated data) must return candles ordered by
    timestamp ascending and must raise FetchError on failure instead of
    returning an empty list.
    """

    @abstractmethod
    async def fetch(self, symbol: str, timeframe: str) -> list[Candle]:
        """Fetch recent candles for a symbol.

        Args:
            symbol: Trading symbol (e.g., BTCUSDT).
            timeframe: Candle timeframe, one of TIMEFRAMES.

        Returns:
            Candles ordered oldest first.

        Raises:
            ValueError: If the timeframe is not supported.
            FetchError: On network, HTTP or parse failure.
        """
        pass

    async def aclose(self) -> None:
        """Release any held resources."""
        return None
