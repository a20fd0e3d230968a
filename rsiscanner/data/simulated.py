"""Simulated price-history source for offline use."""

import asyncio
import random
from datetime import datetime, timedelta, timezone
from typing import Optional

from rsiscanner.data.base import BaseFetcher, check_timeframe
from rsiscanner.models import Candle

TIMEFRAME_SECONDS = {
    "1m": 60,
    "3m": 3 * 60,
    "5m": 5 * 60,
    "15m": 15 * 60,
    "30m": 30 * 60,
    "1h": 3600,
    "2h": 2 * 3600,
    "4h": 4 * 3600,
    "8h": 8 * 3600,
    "1d": 86400,
    "3d": 3 * 86400,
    "1w": 7 * 86400,
}


class SimulatedFetcher(BaseFetcher):
    """Generates random-walk candles without touching the network.

    Each symbol keeps its own price path, so successive fetches continue
    the walk instead of starting over. Prices follow a noisy walk with a
    small per-symbol drift to produce a spread of RSI readings.
    """

    def __init__(
        self,
        limit: int = 100,
        base_price: float = 100.0,
        volatility: float = 0.01,
        seed: Optional[int] = None,
        latency: float = 0.0,
    ):
        """Initialize the simulated source.

        Args:
            limit: Number of candles returned per fetch.
            base_price: Starting price for every symbol.
            volatility: Standard deviation of per-candle returns.
            seed: Optional RNG seed for reproducible output.
            latency: Artificial delay per fetch in seconds.
        """
        self.limit = limit
        self.base_price = base_price
        self.volatility = volatility
        self.latency = latency
        self._rng = random.Random(seed)
        self._paths: dict[tuple[str, str], list[Candle]] = {}

    async def fetch(self, symbol: str, timeframe: str) -> list[Candle]:
        check_timeframe(timeframe)
        if self.latency:
            await asyncio.sleep(self.latency)

        key = (symbol.upper(), timeframe)
        path = self._paths.get(key)
        if path is None:
            path = self._generate(timeframe, self.limit, self.base_price, self._start_time(timeframe))
        else:
            path = path[1:] + self._generate(
                timeframe, 1, path[-1].close, path[-1].timestamp + _step(timeframe)
            )
        self._paths[key] = path
        return list(path)

    def _start_time(self, timeframe: str) -> datetime:
        now = datetime.now(timezone.utc).replace(microsecond=0)
        return now - _step(timeframe) * self.limit

    def _generate(self, timeframe: str, count: int, price: float, start: datetime) -> list[Candle]:
        drift = self._rng.uniform(-0.5, 0.5) * self.volatility
        candles = []
        for i in range(count):
            open_price = price
            close = max(0.01, open_price * (1 + drift + self._rng.gauss(0.0, self.volatility)))
            high = max(open_price, close) * (1 + abs(self._rng.gauss(0.0, self.volatility / 2)))
            low = min(open_price, close) * (1 - abs(self._rng.gauss(0.0, self.volatility / 2)))
            candles.append(Candle(
                timestamp=start + _step(timeframe) * i,
                open=round(open_price, 6),
                high=round(high, 6),
                low=round(max(0.0, low), 6),
                close=round(close, 6),
                volume=round(self._rng.uniform(100, 10000), 2),
            ))
            price = close
        return candles


def _step(timeframe: str) -> timedelta:
    return timedelta(seconds=TIMEFRAME_SECONDS[timeframe])
