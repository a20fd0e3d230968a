"""Async tests for the notification queue."""

import asyncio

import pytest

from rsiscanner.alerts import NotificationQueue
from rsiscanner.models import AlertKind, ToastDraft


def draft(symbol: str = "BTCUSDT", kind: AlertKind = AlertKind.OVERBOUGHT, value: float = 75.0) -> ToastDraft:
    return ToastDraft(symbol=symbol, timeframe="1h", rsi_value=value, kind=kind)


@pytest.mark.asyncio
async def test_push_assigns_monotonic_ids():
    queue = NotificationQueue(display_seconds=10)

    first = queue.push(draft("BTCUSDT"))
    second = queue.push(draft("ETHUSDT"))
    third = queue.push(draft("SOLUSDT"))

    assert first.id < second.id < third.id
    assert [t.symbol for t in queue.items] == ["BTCUSDT", "ETHUSDT", "SOLUSDT"]
    queue.clear()


@pytest.mark.asyncio
async def test_notification_expires_after_display_time():
    queue = NotificationQueue(display_seconds=0.05)
    toast = queue.push(draft())

    assert toast.id in queue
    await asyncio.sleep(0.15)

    assert toast.id not in queue
    assert len(queue) == 0


@pytest.mark.asyncio
async def test_dismiss_removes_early_and_preserves_order():
    queue = NotificationQueue(display_seconds=10)
    a = queue.push(draft("BTCUSDT"))
    b = queue.push(draft("ETHUSDT"))
    c = queue.push(draft("SOLUSDT"))

    assert queue.dismiss(b.id) is True
    assert [t.id for t in queue.items] == [a.id, c.id]
    queue.clear()


@pytest.mark.asyncio
async def test_dismiss_unknown_or_expired_is_noop():
    queue = NotificationQueue(display_seconds=0.02)
    toast = queue.push(draft())
    await asyncio.sleep(0.1)

    assert queue.dismiss(toast.id) is False
    assert queue.dismiss(9999) is False


@pytest.mark.asyncio
async def test_removal_fires_exactly_once():
    events = []
    queue = NotificationQueue(display_seconds=0.05)
    queue.subscribe(lambda event, toast: events.append((event, toast.id)))

    toast = queue.push(draft())
    queue.dismiss(toast.id)
    # The cancelled timer must not remove it a second time
    await asyncio.sleep(0.15)
    queue.dismiss(toast.id)

    assert events == [("pushed", toast.id), ("removed", toast.id)]


@pytest.mark.asyncio
async def test_clear_cancels_all():
    events = []
    queue = NotificationQueue(display_seconds=0.05)
    queue.push(draft("BTCUSDT"))
    queue.push(draft("ETHUSDT"))
    queue.subscribe(lambda event, toast: events.append(event))

    queue.clear()
    await asyncio.sleep(0.15)

    assert len(queue) == 0
    assert events == ["removed", "removed"]


@pytest.mark.asyncio
async def test_toast_message():
    queue = NotificationQueue(display_seconds=10)
    toast = queue.push(draft("ETHUSDT", AlertKind.OVERSOLD, 27.4))

    assert toast.kind is AlertKind.OVERSOLD
    assert toast.message == "ETHUSDT (1h) is now Oversold at 27.40"
    queue.clear()
