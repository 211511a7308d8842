"""CoinGecko price feed provider."""
from __future__ import annotations

import asyncio
import logging
import ssl
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import aiohttp
import certifi

from ..config import CoinGeckoConfig
from ..errors import PriceUnavailable
from ..models import TokenInfo
from ..tokens import TOKENS

logger = logging.getLogger(__name__)


class RateLimiter:
    """Enforce a minimum spacing between consecutive upstream requests.

    A single cursor shared by every request of the owning provider: the
    upstream budget is global, not per token. Use it as an async context
    manager around each request; concurrent callers queue on a lock so the
    wait, the request and the cursor update happen one caller at a time.
    """

    def __init__(
        self,
        min_interval: float = 1.1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> RateLimiter:
        await self._lock.acquire()
        try:
            await self.wait()
        except BaseException:
            self._lock.release()
            raise
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        try:
            self.mark()
        finally:
            self._lock.release()

    async def wait(self) -> None:
        """Sleep until ``min_interval`` has elapsed since the last request."""
        if self._last_request is None or self.min_interval <= 0:
            return
        elapsed = self._clock() - self._last_request
        if elapsed < self.min_interval:
            delay = self.min_interval - elapsed
            logger.debug("Rate limiting CoinGecko request for %.3fs", delay)
            await self._sleep(delay)

    def mark(self) -> None:
        """Record that a request just completed."""
        self._last_request = self._clock()


class CoinGeckoProvider:
    """Fetch spot and historical prices from the CoinGecko public API."""

    def __init__(
        self,
        config: CoinGeckoConfig | None = None,
        rate_limiter: RateLimiter | None = None,
        registry: Mapping[str, TokenInfo] = TOKENS,
    ) -> None:
        config = config or CoinGeckoConfig()
        self.base_url = config.base_url.rstrip("/")
        self.timeout = config.timeout
        self.rate_limiter = rate_limiter or RateLimiter(config.min_request_interval)
        self._registry = registry

    def _coingecko_id(self, token_id: str) -> str:
        token = self._registry.get(token_id)
        if token is None or not token.price_id:
            raise PriceUnavailable(token_id, "no CoinGecko id registered")
        return token.price_id

    async def _request(self, endpoint: str, params: dict[str, str]) -> Any:
        """GET ``endpoint`` through the shared rate limiter and return the JSON body."""
        url = f"{self.base_url}{endpoint}"
        ssl_context = ssl.create_default_context(cafile=certifi.where())

        async with self.rate_limiter:
            connector = aiohttp.TCPConnector(ssl=ssl_context)
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url,
                    params=params,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        raise RuntimeError(f"CoinGecko API error: HTTP {response.status}")
                    return await response.json()

    async def get_price(self, token_id: str, quote_currency: str = "usd") -> float:
        """Fetch the current price of ``token_id`` (symbol or mint address).

        Raises:
            PriceUnavailable: no CoinGecko id is known for the token, or the
                request failed, or the response lacks a numeric price.
        """
        coingecko_id = self._coingecko_id(token_id)
        try:
            data = await self._request(
                "/simple/price",
                {"ids": coingecko_id, "vs_currencies": quote_currency},
            )
        except Exception as e:
            logger.error("Error fetching price for %s: %s", token_id, e)
            raise PriceUnavailable(token_id, str(e)) from e

        price = (data or {}).get(coingecko_id, {}).get(quote_currency)
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            raise PriceUnavailable(
                token_id, f"no {quote_currency} price for {coingecko_id} in response"
            )
        return float(price)

    async def get_historical_prices(self, token_id: str, days: int) -> list[float]:
        """Fetch daily prices for the trailing ``days`` days, oldest first.

        Raises:
            PriceUnavailable: the token has no CoinGecko id or the request failed.
        """
        coingecko_id = self._coingecko_id(token_id)
        try:
            data = await self._request(
                f"/coins/{coingecko_id}/market_chart",
                {"vs_currency": "usd", "days": str(days), "interval": "daily"},
            )
            points = data.get("prices", [])
            prices = [float(point[1]) for point in points]
        except Exception as e:
            logger.warning("Error fetching historical prices for %s: %s", token_id, e)
            raise PriceUnavailable(token_id, str(e)) from e

        # The daily series includes the current partial day as an extra point
        return prices[-days:] if days > 0 else []
