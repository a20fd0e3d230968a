"""Tests for the Binance and simulated price-history sources."""

from datetime import datetime, timezone

import httpx
import pytest

from rsiscanner.data import TIMEFRAMES, BinanceFetcher, FetchError, SimulatedFetcher

BASE_URL = "https://api.binance.test"


def kline(open_time_ms: int, close: str = "101.5") -> list:
    return [open_time_ms, "100.0", "102.0", "99.0", close, "12.5", open_time_ms + 59_999, "1250.0", 10, "6.0", "600.0", "0"]


def make_fetcher(handler) -> BinanceFetcher:
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return BinanceFetcher(base_url=BASE_URL, limit=3, client=client)


@pytest.mark.asyncio
async def test_binance_parses_klines():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=[kline(1_700_000_000_000), kline(1_700_000_060_000, "103.25")])

    fetcher = make_fetcher(handler)
    candles = await fetcher.fetch("btcusdt", "1m")

    params = requests[0].url.params
    assert requests[0].url.path == "/api/v3/klines"
    assert params["symbol"] == "BTCUSDT"
    assert params["interval"] == "1m"
    assert params["limit"] == "3"

    assert len(candles) == 2
    assert candles[0].timestamp == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)
    assert candles[0].open == 100.0
    assert candles[0].high == 102.0
    assert candles[0].low == 99.0
    assert candles[0].volume == 12.5
    assert candles[1].close == 103.25


@pytest.mark.asyncio
async def test_binance_http_error_raises_fetch_error():
    fetcher = make_fetcher(lambda request: httpx.Response(400, json={"code": -1121, "msg": "Invalid symbol."}))

    with pytest.raises(FetchError) as exc_info:
        await fetcher.fetch("NOPEUSDT", "1h")

    assert exc_info.value.symbol == "NOPEUSDT"
    assert exc_info.value.timeframe == "1h"
    assert "HTTP 400" in str(exc_info.value)


@pytest.mark.asyncio
async def test_binance_network_error_raises_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FetchError):
        await make_fetcher(handler).fetch("BTCUSDT", "1h")


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"unexpected": "object"},
    [["not", "enough"]],
    [kline(1_700_000_000_000, close="abc")],
    [kline(1_700_000_060_000), kline(1_700_000_000_000)],
])
async def test_binance_malformed_payload_raises_fetch_error(payload):
    fetcher = make_fetcher(lambda request: httpx.Response(200, json=payload))

    with pytest.raises(FetchError):
        await fetcher.fetch("BTCUSDT", "1h")


@pytest.mark.asyncio
async def test_binance_invalid_json_raises_fetch_error():
    fetcher = make_fetcher(lambda request: httpx.Response(200, content=b"<html>"))

    with pytest.raises(FetchError):
        await fetcher.fetch("BTCUSDT", "1h")


@pytest.mark.asyncio
async def test_binance_rejects_unknown_timeframe():
    fetcher = make_fetcher(lambda request: httpx.Response(200, json=[]))

    with pytest.raises(ValueError, match="Invalid timeframe"):
        await fetcher.fetch("BTCUSDT", "2m")


@pytest.mark.asyncio
async def test_binance_borrowed_client_is_not_closed():
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(lambda r: httpx.Response(200, json=[])))
    fetcher = BinanceFetcher(base_url=BASE_URL, client=client)

    await fetcher.aclose()

    assert not client.is_closed
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize("timeframe", TIMEFRAMES)
async def test_simulated_candles_are_ascending(timeframe: str):
    fetcher = SimulatedFetcher(limit=50, seed=7)
    candles = await fetcher.fetch("BTCUSDT", timeframe)

    assert len(candles) == 50
    assert all(b.timestamp > a.timestamp for a, b in zip(candles, candles[1:]))
    assert all(c.low <= min(c.open, c.close) and c.high >= max(c.open, c.close) for c in candles)


@pytest.mark.asyncio
async def test_simulated_walk_continues():
    fetcher = SimulatedFetcher(limit=20, seed=1)
    first = await fetcher.fetch("ETHUSDT", "1h")
    second = await fetcher.fetch("ETHUSDT", "1h")

    assert len(second) == 20
    assert second[:-1] == first[1:]
    assert second[-1].open == first[-1].close


@pytest.mark.asyncio
async def test_simulated_is_reproducible_with_seed():
    a = await SimulatedFetcher(limit=30, seed=42).fetch("SOLUSDT", "4h")
    b = await SimulatedFetcher(limit=30, seed=42).fetch("SOLUSDT", "4h")

    assert [c.close for c in a] == [c.close for c in b]


@pytest.mark.asyncio
async def test_simulated_rejects_unknown_timeframe():
    with pytest.raises(ValueError):
        await SimulatedFetcher().fetch("BTCUSDT", "10m")
