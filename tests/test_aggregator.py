"""Async tests for the symbol data aggregator and the scanner loop."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from rsiscanner.data import BaseFetcher, FetchError, SymbolDataAggregator
from rsiscanner.models import AlertKind, Candle
from rsiscanner.scanner import Scanner


def make_candles(closes: list[float]) -> list[Candle]:
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        Candle(timestamp=start + timedelta(minutes=15 * i), open=c, high=c, low=c, close=c, volume=10.0)
        for i, c in enumerate(closes)
    ]


RISING = [100.0 + i for i in range(30)]
FALLING = [200.0 - i for i in range(30)]


class FakeFetcher(BaseFetcher):
    """Serves scripted closes, failures and delays per symbol."""

    def __init__(self, closes: dict[str, list[float]]):
        self.closes = dict(closes)
        self.failing: set[str] = set()
        self.delays: dict[str, float] = {}
        self.calls: list[tuple[str, str]] = []

    async def fetch(self, symbol: str, timeframe: str) -> list[Candle]:
        self.calls.append((symbol, timeframe))
        delay = self.delays.get(symbol, 0)
        if delay:
            await asyncio.sleep(delay)
        if symbol in self.failing:
            raise FetchError(symbol, timeframe, "boom")
        return make_candles(self.closes[symbol])


@pytest.mark.asyncio
async def test_refresh_builds_snapshot_for_every_symbol():
    fetcher = FakeFetcher({"BTCUSDT": RISING, "ETHUSDT": FALLING, "NEWUSDT": RISING[:5]})
    aggregator = SymbolDataAggregator(fetcher)

    snapshot = await aggregator.refresh(["BTCUSDT", "ETHUSDT", "NEWUSDT"], "15m")

    assert set(snapshot) == {"BTCUSDT", "ETHUSDT", "NEWUSDT"}
    assert snapshot["BTCUSDT"].latest_rsi == 100.0
    assert snapshot["ETHUSDT"].latest_rsi == 0.0
    assert snapshot["NEWUSDT"].rsi == ()
    assert snapshot["BTCUSDT"].timeframe == "15m"
    assert aggregator.timeframe == "15m"


@pytest.mark.asyncio
async def test_failed_fetch_keeps_previous_entry():
    symbols = ["AUSDT", "BUSDT", "CUSDT", "DUSDT"]
    fetcher = FakeFetcher({s: RISING for s in symbols})
    errors = []
    aggregator = SymbolDataAggregator(fetcher, on_error=lambda s, e: errors.append((s, e)))

    first = await aggregator.refresh(symbols, "1h")

    fetcher.closes = {s: FALLING for s in symbols}
    fetcher.failing = {"CUSDT"}
    second = await aggregator.refresh(symbols, "1h")

    assert set(second) == set(symbols)
    assert second["CUSDT"] is first["CUSDT"]
    for symbol in ["AUSDT", "BUSDT", "DUSDT"]:
        assert second[symbol].latest_rsi == 0.0
    assert [s for s, _ in errors] == ["CUSDT"]
    assert isinstance(errors[0][1], FetchError)


@pytest.mark.asyncio
async def test_failed_fetch_without_previous_entry_is_absent():
    fetcher = FakeFetcher({"BTCUSDT": RISING, "ETHUSDT": RISING})
    fetcher.failing = {"ETHUSDT"}
    aggregator = SymbolDataAggregator(fetcher)

    snapshot = await aggregator.refresh(["BTCUSDT", "ETHUSDT"], "1h")

    assert set(snapshot) == {"BTCUSDT"}


@pytest.mark.asyncio
async def test_previous_entry_not_reused_across_timeframes():
    fetcher = FakeFetcher({"BTCUSDT": RISING})
    aggregator = SymbolDataAggregator(fetcher)
    await aggregator.refresh(["BTCUSDT"], "1h")

    fetcher.failing = {"BTCUSDT"}
    snapshot = await aggregator.refresh(["BTCUSDT"], "4h")

    assert "BTCUSDT" not in snapshot


@pytest.mark.asyncio
async def test_unexpected_errors_do_not_abort_cycle():
    class BrokenFetcher(FakeFetcher):
        async def fetch(self, symbol: str, timeframe: str) -> list[Candle]:
            if symbol == "BADUSDT":
                raise KeyError(symbol)
            return await super().fetch(symbol, timeframe)

    aggregator = SymbolDataAggregator(BrokenFetcher({"BTCUSDT": RISING}))
    snapshot = await aggregator.refresh(["BTCUSDT", "BADUSDT"], "1h")

    assert set(snapshot) == {"BTCUSDT"}


@pytest.mark.asyncio
async def test_fetches_run_concurrently():
    symbols = [f"S{i}USDT" for i in range(5)]
    fetcher = FakeFetcher({s: RISING for s in symbols})
    fetcher.delays = {s: 0.1 for s in symbols}
    aggregator = SymbolDataAggregator(fetcher)

    loop = asyncio.get_running_loop()
    started = loop.time()
    await aggregator.refresh(symbols, "1h")

    assert loop.time() - started < 0.4


@pytest.mark.asyncio
async def test_refresh_while_in_flight_is_noop():
    fetcher = FakeFetcher({"BTCUSDT": RISING})
    fetcher.delays = {"BTCUSDT": 0.1}
    aggregator = SymbolDataAggregator(fetcher)

    first = asyncio.create_task(aggregator.refresh(["BTCUSDT"], "1h"))
    await asyncio.sleep(0.01)
    assert aggregator.in_flight

    skipped = await aggregator.refresh(["BTCUSDT"], "1h")
    assert dict(skipped) == {}
    assert len(fetcher.calls) == 1

    snapshot = await first
    assert "BTCUSDT" in snapshot
    assert not aggregator.in_flight


@pytest.mark.asyncio
async def test_stale_cycle_results_are_discarded():
    fetcher = FakeFetcher({"BTCUSDT": RISING, "ETHUSDT": FALLING})
    fetcher.delays = {"BTCUSDT": 0.1}
    aggregator = SymbolDataAggregator(fetcher)

    stale = asyncio.create_task(aggregator.refresh(["BTCUSDT"], "15m"))
    await asyncio.sleep(0.01)

    aggregator.invalidate()
    fresh = await aggregator.refresh(["ETHUSDT"], "1h")
    assert set(fresh) == {"ETHUSDT"}

    await stale
    assert set(aggregator.snapshot) == {"ETHUSDT"}
    assert aggregator.timeframe == "1h"


@pytest.mark.asyncio
async def test_snapshot_is_read_only():
    aggregator = SymbolDataAggregator(FakeFetcher({"BTCUSDT": RISING}))
    snapshot = await aggregator.refresh(["BTCUSDT"], "1h")

    with pytest.raises(TypeError):
        snapshot["ETHUSDT"] = snapshot["BTCUSDT"]


@pytest.mark.asyncio
async def test_invalid_timeframe_raises():
    aggregator = SymbolDataAggregator(FakeFetcher({}))
    with pytest.raises(ValueError):
        await aggregator.refresh(["BTCUSDT"], "7m")


@pytest.mark.asyncio
async def test_scanner_notifies_once_per_crossing():
    fetcher = FakeFetcher({"BTCUSDT": RISING, "ETHUSDT": FALLING})
    scanner = Scanner(fetcher, ["btcusdt", "ethusdt"], timeframe="1h", alerts_enabled=True)
    seen = []
    scanner.on_snapshot(lambda snapshot: seen.append(dict(snapshot)))

    first = await scanner.refresh_once()
    second = await scanner.refresh_once()

    assert sorted((t.symbol, t.kind) for t in first) == [
        ("BTCUSDT", AlertKind.OVERBOUGHT),
        ("ETHUSDT", AlertKind.OVERSOLD),
    ]
    assert second == []
    assert len(scanner.notifications) == 2
    assert len(seen) == 2
    await scanner.stop()
    assert len(scanner.notifications) == 0


@pytest.mark.asyncio
async def test_scanner_without_alerts_queues_nothing():
    scanner = Scanner(FakeFetcher({"BTCUSDT": RISING}), ["BTCUSDT"], timeframe="1h")

    assert await scanner.refresh_once() == []
    assert len(scanner.notifications) == 0


@pytest.mark.asyncio
async def test_scanner_refreshes_immediately_on_timeframe_change():
    fetcher = FakeFetcher({"BTCUSDT": RISING})
    scanner = Scanner(fetcher, ["BTCUSDT"], timeframe="1h", refresh_seconds=60)

    scanner.start()
    await asyncio.sleep(0.05)
    assert fetcher.calls == [("BTCUSDT", "1h")]

    scanner.set_timeframe("4h")
    await asyncio.sleep(0.05)
    assert fetcher.calls[-1] == ("BTCUSDT", "4h")
    assert scanner.snapshot["BTCUSDT"].timeframe == "4h"

    await scanner.stop()
    assert not scanner.running


@pytest.mark.asyncio
async def test_timeframe_change_does_not_wait_for_slow_cycle():
    fetcher = FakeFetcher({"BTCUSDT": RISING})
    fetcher.delays = {"BTCUSDT": 1.0}
    scanner = Scanner(fetcher, ["BTCUSDT"], timeframe="1h", refresh_seconds=60)

    scanner.start()
    await asyncio.sleep(0.05)
    assert fetcher.calls == [("BTCUSDT", "1h")]

    fetcher.delays = {}
    scanner.set_timeframe("4h")
    await asyncio.sleep(0.2)

    assert fetcher.calls[-1] == ("BTCUSDT", "4h")
    assert scanner.snapshot["BTCUSDT"].timeframe == "4h"

    await scanner.stop()
    assert scanner.snapshot["BTCUSDT"].timeframe == "4h"


@pytest.mark.asyncio
async def test_failing_listener_does_not_stop_the_loop():
    fetcher = FakeFetcher({"BTCUSDT": RISING})
    scanner = Scanner(fetcher, ["BTCUSDT"], timeframe="1h", refresh_seconds=60, alerts_enabled=True)
    seen = []

    def broken(snapshot):
        raise RuntimeError("render failed")

    scanner.on_snapshot(broken)
    scanner.on_snapshot(lambda snapshot: seen.append(snapshot))

    toasts = await scanner.refresh_once()
    assert len(toasts) == 1
    assert len(seen) == 1

    scanner.start()
    await asyncio.sleep(0.05)
    scanner.set_timeframe("4h")
    await asyncio.sleep(0.05)

    assert scanner.running
    assert len(seen) == 3
    await scanner.stop()
