"""Service modules"""
from .price_service import PriceService, flat_price_series

__all__ = ["PriceService", "flat_price_series"]
