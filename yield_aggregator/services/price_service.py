"""Price lookup service with a time-boxed spot price cache."""
from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..errors import PriceUnavailable
from ..interfaces.price_provider import PriceProvider
from ..models import PriceCacheEntry
from ..oracles import CoinGeckoProvider

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 5 * 60  # seconds


def flat_price_series(days: int) -> list[float]:
    """Fallback history: a constant series, which yields zero ratio volatility."""
    return [1.0] * max(days, 0)


class PriceService:
    """Resolve current and historical token prices through a pluggable provider.

    Spot prices are cached per (token, quote currency) for ``cache_ttl``
    seconds. Concurrent misses on the same key are not deduplicated; each
    one calls the provider and the last write wins.
    """

    def __init__(
        self,
        provider: PriceProvider | None = None,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.provider = provider if provider is not None else CoinGeckoProvider()
        self.cache_ttl = cache_ttl
        self._clock = clock
        self._cache: dict[tuple[str, str], PriceCacheEntry] = {}

    async def get_price(self, token_id: str, quote_currency: str = "usd") -> float:
        """Return the price of ``token_id``, from cache when fresh.

        Raises:
            PriceUnavailable: the provider could not price the token.
        """
        key = (token_id, quote_currency)
        cached = self._cache.get(key)
        now = self._clock()
        if cached is not None and now - cached.fetched_at < self.cache_ttl:
            return cached.price

        try:
            price = await self.provider.get_price(token_id, quote_currency)
        except PriceUnavailable:
            raise
        except Exception as e:
            raise PriceUnavailable(token_id, str(e)) from e

        self._cache[key] = PriceCacheEntry(price=price, fetched_at=now)
        logger.debug("Price %s/%s = %s", token_id, quote_currency, price)
        return price

    async def get_historical_prices(self, token_id: str, days: int) -> list[float]:
        """Return ``days`` daily prices, oldest first. Never raises.

        Any provider failure degrades to :func:`flat_price_series`.
        """
        try:
            return list(await self.provider.get_historical_prices(token_id, days))
        except Exception as e:
            logger.warning(
                "Historical prices unavailable for %s (%s), using flat fallback",
                token_id, e,
            )
            return flat_price_series(days)

    def clear_cache(self) -> None:
        self._cache.clear()
