"""
USD price providers for wallet summaries.

Rates are used for display totals only; they never touch a balance.
"""

import logging
import time
from decimal import Decimal
from typing import Dict, Iterable, Optional

import httpx

from gamewallet.core.config import settings

# Configure logging
logger = logging.getLogger(__name__)

COINGECKO_IDS = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
}


class RatesProvider:
    """Base rates provider interface"""

    async def get_rates(self, currencies: Iterable[str]) -> Dict[str, Decimal]:
        """
        Get USD rates.

        Args:
            currencies: Currency codes to price

        Returns:
            Mapping of currency code to USD price; unknown codes are omitted
        """
        raise NotImplementedError


class StaticRates(RatesProvider):
    """Fixed rates from configuration"""

    def __init__(self, rates: Optional[Dict[str, Decimal]] = None):
        self.rates = {k.upper(): Decimal(str(v)) for k, v in (rates or settings.usd_rates).items()}

    async def get_rates(self, currencies: Iterable[str]) -> Dict[str, Decimal]:
        return {c: self.rates[c] for c in currencies if c in self.rates}


class CoinGeckoRates(RatesProvider):
    """
    Live rates from the CoinGecko simple price API.

    Results are cached for ``rates_cache_seconds``. Currencies CoinGecko does
    not list, and any request failure, fall back to the static rates.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        fallback: Optional[RatesProvider] = None,
        cache_seconds: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url or settings.coingecko_url
        self.fallback = fallback or StaticRates()
        self.cache_seconds = settings.rates_cache_seconds if cache_seconds is None else cache_seconds
        self.client = client
        self._cache: Dict[str, Decimal] = {}
        self._fetched_at = 0.0

    async def _fetch(self) -> Dict[str, Decimal]:
        params = {"ids": ",".join(COINGECKO_IDS.values()), "vs_currencies": "usd"}
        if self.client is not None:
            response = await self.client.get(self.url, params=params)
        else:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(self.url, params=params)
        response.raise_for_status()
        payload = response.json()

        rates = {}
        for code, coin_id in COINGECKO_IDS.items():
            price = payload.get(coin_id, {}).get("usd")
            if price is not None:
                rates[code] = Decimal(str(price))
        return rates

    async def get_rates(self, currencies: Iterable[str]) -> Dict[str, Decimal]:
        currencies = list(currencies)
        if not self._cache or time.monotonic() - self._fetched_at > self.cache_seconds:
            try:
                self._cache = await self._fetch()
                self._fetched_at = time.monotonic()
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"CoinGecko rates unavailable, using fallback: {e}")

        rates = await self.fallback.get_rates(currencies)
        rates.update({c: self._cache[c] for c in currencies if c in self._cache})
        return rates
