"""Solana liquidity-pool yield aggregator."""
from .errors import (
    ConfigurationError,
    DataIntegrityError,
    PriceUnavailable,
    TransportError,
    YieldAggregatorError,
)
from .models import PriceCacheEntry, TokenInfo, YieldOpportunity

__all__ = [
    "ConfigurationError",
    "DataIntegrityError",
    "PriceCacheEntry",
    "PriceUnavailable",
    "TokenInfo",
    "TransportError",
    "YieldAggregatorError",
    "YieldOpportunity",
]
