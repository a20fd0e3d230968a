"""Alert status and toast notification models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class AlertStatus(str, Enum):
    """RSI regime of a symbol."""

    NEUTRAL = "neutral"
    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"


class AlertKind(str, Enum):
    """Kind of a threshold-crossing notification."""

    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"


class ToastDraft(BaseModel):
    """A notification produced by the alert monitor, before it is queued."""

    symbol: str = Field(..., min_length=1, description="Trading symbol")
    timeframe: str = Field(..., min_length=1, description="Timeframe the RSI was computed on")
    rsi_value: float = Field(..., ge=0, le=100, description="RSI value that triggered the alert")
    kind: AlertKind = Field(..., description="Overbought or oversold")

    model_config = {"frozen": True}


class ToastNotification(ToastDraft):
    """A queued, time-limited notification shown to the user."""

    id: int = Field(..., ge=1, description="Unique, monotonically increasing id")
    created_at: datetime = Field(
        default_factory=datetime.now, description="Time the notification was queued"
    )

    @property
    def title(self) -> str:
        return f"{self.symbol} ({self.timeframe})"

    @property
    def message(self) -> str:
        label = "Overbought" if self.kind is AlertKind.OVERBOUGHT else "Oversold"
        return f"{self.title} is now {label} at {self.rsi_value:.2f}"
