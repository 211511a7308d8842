from .collector import OrcaCollector

__all__ = ["OrcaCollector"]
