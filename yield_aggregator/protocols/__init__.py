"""Protocol collectors."""
from .base import BaseCollector
from .orca import OrcaCollector
from .raydium import RaydiumCollector

__all__ = ["BaseCollector", "OrcaCollector", "RaydiumCollector"]
