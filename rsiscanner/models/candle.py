"""Candle (OHLCV), RSI point and per-symbol snapshot data models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Candle(BaseModel):
    """Represents a single OHLCV candle."""

    timestamp: datetime = Field(..., description="Candle open timestamp")
    open: float = Field(..., ge=0, description="Opening price")
    high: float = Field(..., ge=0, description="High price")
    low: float = Field(..., ge=0, description="Low price")
    close: float = Field(..., ge=0, description="Closing price")
    volume: float = Field(..., ge=0, description="Traded volume")

    model_config = {"frozen": True}


class RsiPoint(BaseModel):
    """A single RSI reading aligned to a candle timestamp."""

    timestamp: datetime = Field(..., description="Timestamp of the source candle")
    value: float = Field(..., ge=0, le=100, description="RSI value (0-100)")

    model_config = {"frozen": True}


class SymbolData(BaseModel):
    """Candles and RSI series for one symbol on one timeframe."""

    symbol: str = Field(..., min_length=1, description="Trading symbol")
    timeframe: str = Field(..., min_length=1, description="Candle timeframe")
    candles: tuple[Candle, ...] = Field(default=(), description="Candles, oldest first")
    rsi: tuple[RsiPoint, ...] = Field(default=(), description="RSI series, oldest first")

    model_config = {"frozen": True}

    @property
    def latest_rsi(self) -> Optional[float]:
        """Most recent RSI value, or None while the series is empty."""
        if not self.rsi:
            return None
        return self.rsi[-1].value

    @property
    def last_close(self) -> Optional[float]:
        """Close of the most recent candle, or None without candles."""
        if not self.candles:
            return None
        return self.candles[-1].close


def validate_candles(candles: list[Candle]) -> list[Candle]:
    """Check that candles are strictly ascending by timestamp.

    Args:
        candles: Candles as returned by a fetcher.

    Returns:
        The same list, unchanged.

    Raises:
        ValueError: If timestamps are out of order or duplicated.
    """
    for prev, cur in zip(candles, candles[1:]):
        if cur.timestamp <= prev.timestamp:
            raise ValueError(
                f"Candles must be strictly ascending: {cur.timestamp} after {prev.timestamp}"
            )
    return candles
