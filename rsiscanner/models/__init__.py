"""Data models for the RSI scanner."""

from rsiscanner.models.candle import Candle, RsiPoint, SymbolData, validate_candles
from rsiscanner.models.alert import AlertKind, AlertStatus, ToastDraft, ToastNotification
from rsiscanner.models.annotation import Annotation, FreehandStroke, Point, Trendline

__all__ = [
    "AlertKind",
    "AlertStatus",
    "Annotation",
    "Candle",
    "FreehandStroke",
    "Point",
    "RsiPoint",
    "SymbolData",
    "ToastDraft",
    "ToastNotification",
    "Trendline",
    "validate_candles",
]
