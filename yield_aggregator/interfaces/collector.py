"""Yield collector protocol: per-protocol opportunity collection."""
from collections.abc import Sequence
from typing import Protocol

from ..config import CollectorConfig
from ..models import YieldOpportunity


class YieldCollector(Protocol):
    """Abstract interface for collecting yield opportunities from one protocol."""

    @property
    def protocol_name(self) -> str: ...

    @property
    def configurations(self) -> Sequence[CollectorConfig]: ...

    async def collect(self) -> list[YieldOpportunity]: ...
