"""Relative Strength Index calculations.

RSI uses Wilder's smoothing: the first average gain/loss is the simple mean
of the first `period` changes, after which each average is updated as
``avg = (avg * (period - 1) + value) / period``.
"""

from rsiscanner.models import Candle, RsiPoint

DEFAULT_PERIOD = 14


def calculate_rsi(prices: list[float], period: int = DEFAULT_PERIOD) -> list[float]:
    """Calculate Wilder's Relative Strength Index.

    Unlike padded indicator outputs, the warm-up window is dropped rather
    than filled with NaN: the result holds one value for every price after
    the first `period` changes.

    Args:
        prices: List of price values (typically close prices), oldest first.
        period: RSI period (default 14).

    Returns:
        List of RSI values (0-100) of length ``max(0, len(prices) - period)``.

    Raises:
        ValueError: If period is less than 1.
    """
    if period < 1:
        raise ValueError(f"RSI period must be at least 1, got {period}")
    if len(prices) < period + 1:
        return []

    changes = [prices[i] - prices[i - 1] for i in range(1, len(prices))]
    gains = [max(c, 0.0) for c in changes]
    losses = [max(-c, 0.0) for c in changes]

    # Seed with simple means of the first `period` changes
    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    result = [_rsi_from_averages(avg_gain, avg_loss)]

    for i in range(period, len(changes)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        result.append(_rsi_from_averages(avg_gain, avg_loss))

    return result


def compute_rsi(candles: list[Candle], period: int = DEFAULT_PERIOD) -> list[RsiPoint]:
    """Compute the RSI series for a candle sequence.

    The returned points carry the timestamps of the trailing candles, so the
    series lines up with the end of the candle list.

    Args:
        candles: Candles ordered by timestamp ascending.
        period: RSI period (default 14).

    Returns:
        RSI points, oldest first. Empty when there is not enough history.
    """
    values = calculate_rsi([c.close for c in candles], period)
    if not values:
        return []

    aligned = candles[len(candles) - len(values):]
    return [
        RsiPoint(timestamp=candle.timestamp, value=value)
        for candle, value in zip(aligned, values)
    ]


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    rsi = 100 - (100 / (1 + rs))
    # Guard against float noise just outside the band
    return min(100.0, max(0.0, rsi))
