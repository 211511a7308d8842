"""Price provider protocol: price feed abstraction."""
from typing import Protocol


class PriceProvider(Protocol):
    """Abstract interface for a spot and historical price feed."""

    async def get_price(self, token_id: str, quote_currency: str = "usd") -> float: ...

    async def get_historical_prices(self, token_id: str, days: int) -> list[float]: ...
