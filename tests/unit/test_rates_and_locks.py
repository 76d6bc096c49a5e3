"""
Unit tests for USD rate providers and the per-user lock registry
"""

import asyncio
from decimal import Decimal

import httpx

from gamewallet.core.locks import UserLockRegistry
from gamewallet.services.rates import CoinGeckoRates, StaticRates


async def test_static_rates_skip_unknown_currencies():
    rates = StaticRates({"btc": "40000", "VEST": "0.85"})
    assert await rates.get_rates(["BTC", "VEST", "ETH"]) == {
        "BTC": Decimal("40000"),
        "VEST": Decimal("0.85"),
    }


async def test_coingecko_rates_override_fallback():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"bitcoin": {"usd": 61000.5}, "ethereum": {"usd": 3100}})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        provider = CoinGeckoRates(
            url="https://api.test/simple/price",
            fallback=StaticRates({"BTC": "1", "ETH": "1", "VEST": "0.85"}),
            client=client,
        )
        rates = await provider.get_rates(["BTC", "ETH", "VEST"])
        # second call is served from cache
        await provider.get_rates(["BTC"])

    assert rates == {"BTC": Decimal("61000.5"), "ETH": Decimal("3100"), "VEST": Decimal("0.85")}
    assert len(calls) == 1
    assert calls[0].url.params["vs_currencies"] == "usd"


async def test_coingecko_failure_falls_back_to_static():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        provider = CoinGeckoRates(fallback=StaticRates({"BTC": "43250"}), client=client)
        rates = await provider.get_rates(["BTC"])

    assert rates == {"BTC": Decimal("43250")}


async def test_user_lock_serializes_one_user():
    registry = UserLockRegistry()
    order = []

    async def worker(name, delay):
        async with registry.lock("user-1"):
            order.append(f"{name}-start")
            await asyncio.sleep(delay)
            order.append(f"{name}-end")

    await asyncio.gather(worker("a", 0.02), worker("b", 0))
    assert order == ["a-start", "a-end", "b-start", "b-end"]


async def test_different_users_do_not_contend():
    registry = UserLockRegistry()
    async with registry.lock("user-1"):
        assert registry.is_locked("user-1")
        assert not registry.is_locked("user-2")
        async with registry.lock("user-2"):
            assert registry.is_locked("user-2")
    assert not registry.is_locked("user-1")
