"""Price feed providers."""
from .coingecko import CoinGeckoProvider, RateLimiter

__all__ = ["CoinGeckoProvider", "RateLimiter"]
