"""Shared collector behaviour: config filtering and partial-failure joins."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable, Sequence
from typing import Generic, TypeVar

from ..config import CollectorConfig
from ..errors import ConfigurationError
from ..models import YieldOpportunity

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT", bound=CollectorConfig)


class BaseCollector(Generic[ConfigT]):
    """Base for protocol collectors.

    Keeps only the enabled configs of the subclass's own variant. An empty
    input, or an input where nothing survives filtering, is a caller defect
    and raises :class:`ConfigurationError`.
    """

    protocol_tag: str = ""
    config_type: type[CollectorConfig] = CollectorConfig
    display_name: str = ""

    def __init__(self, configs: Iterable[CollectorConfig]) -> None:
        configs = list(configs or ())
        if not configs:
            raise ConfigurationError("Config array cannot be empty")

        self._configs: list[ConfigT] = [
            c  # type: ignore[misc]
            for c in configs
            if isinstance(c, self.config_type)
            and c.protocol == self.protocol_tag
            and c.enabled
        ]
        if not self._configs:
            raise ConfigurationError(
                f"No enabled configurations found for collector type: {self.protocol_tag}"
            )

    @property
    def protocol_name(self) -> str:
        return self.display_name

    @property
    def configurations(self) -> list[ConfigT]:
        return list(self._configs)

    async def collect(self) -> list[YieldOpportunity]:
        raise NotImplementedError

    async def _collect_successes(
        self,
        labels: Sequence[str],
        tasks: Sequence[Awaitable[YieldOpportunity]],
    ) -> list[YieldOpportunity]:
        """Run per-pool pipelines concurrently and keep only the successes.

        One pipeline failing never cancels or hides its siblings.
        """
        results = await asyncio.gather(*tasks, return_exceptions=True)

        opportunities: list[YieldOpportunity] = []
        for label, result in zip(labels, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error(
                    "Error parsing %s pool %s: %s", self.display_name, label, result
                )
                continue
            opportunities.append(result)
        return opportunities
