"""Protocol interfaces for the yield aggregator."""
from .chain import ChainClient
from .collector import YieldCollector
from .price_provider import PriceProvider

__all__ = ["ChainClient", "PriceProvider", "YieldCollector"]
