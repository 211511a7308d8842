"""Error taxonomy for the yield aggregator."""
from __future__ import annotations


class YieldAggregatorError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(YieldAggregatorError, ValueError):
    """Invalid or empty configuration. Raised at construction, never retried."""


class PriceUnavailable(YieldAggregatorError):
    """No price could be resolved for a token (missing feed id or provider failure)."""

    def __init__(self, token_id: str, reason: str = "") -> None:
        self.token_id = token_id
        self.reason = reason
        message = f"Price unavailable for {token_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DataIntegrityError(YieldAggregatorError):
    """Raw pool data is malformed or inconsistent. The affected pool is dropped."""


class TransportError(YieldAggregatorError):
    """A network or batch request failed as a whole."""
