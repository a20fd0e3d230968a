"""Binance kline fetcher using httpx."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from rsiscanner.data.base import BaseFetcher, FetchError, check_timeframe
from rsiscanner.models import Candle, validate_candles

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.binance.com"
KLINES_PATH = "/api/v3/klines"


class BinanceFetcher(BaseFetcher):
    """Fetches OHLCV klines from the Binance public REST API.

    No authentication is needed. One shared AsyncClient is used for every
    request so connections are pooled across a refresh cycle.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        limit: int = 100,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the fetcher.

        Args:
            base_url: API root URL.
            limit: Number of klines to request per symbol.
            timeout: Request timeout in seconds.
            client: Optional pre-built client (used by tests).
        """
        self.base_url = base_url.rstrip("/")
        self.limit = limit
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def fetch(self, symbol: str, timeframe: str) -> list[Candle]:
        check_timeframe(timeframe)
        params = {"symbol": symbol.upper(), "interval": timeframe, "limit": self.limit}

        try:
            response = await self._client.get(KLINES_PATH, params=params)
            response.raise_for_status()
            rows = response.json()
        except httpx.HTTPStatusError as e:
            raise FetchError(symbol, timeframe, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FetchError(symbol, timeframe, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise FetchError(symbol, timeframe, f"invalid JSON: {e}") from e

        logger.debug("Fetched %d %s klines for %s", len(rows) if isinstance(rows, list) else 0, timeframe, symbol)
        return parse_klines(symbol, timeframe, rows)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def parse_klines(symbol: str, timeframe: str, rows: Any) -> list[Candle]:
    """Convert raw kline rows into candles.

    Each row is ``[open_time_ms, open, high, low, close, volume, ...]`` with
    prices and volume encoded as strings.

    Raises:
        FetchError: If the payload is not a list of well-formed rows.
    """
    if not isinstance(rows, list):
        raise FetchError(symbol, timeframe, f"unexpected payload: {type(rows).__name__}")

    try:
        candles = [
            Candle(
                timestamp=datetime.fromtimestamp(int(row[0]) / 1000, tz=timezone.utc),
                open=float(row[1]),
                high=float(row[2]),
                low=float(row[3]),
                close=float(row[4]),
                volume=float(row[5]),
            )
            for row in rows
        ]
        return validate_candles(candles)
    except (TypeError, ValueError, IndexError) as e:
        raise FetchError(symbol, timeframe, f"malformed kline row: {e}") from e
