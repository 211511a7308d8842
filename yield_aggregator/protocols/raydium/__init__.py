from .collector import RaydiumCollector

__all__ = ["RaydiumCollector"]
