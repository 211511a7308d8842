"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TokenInfo:
    """Static metadata for a token known to the registry."""

    symbol: str
    address: str
    decimals: int
    price_id: str | None = None


@dataclass(frozen=True)
class PriceCacheEntry:
    """A cached spot price and the clock reading at which it was fetched."""

    price: float
    fetched_at: float


@dataclass(frozen=True)
class YieldOpportunity:
    """Normalized yield opportunity produced by a protocol collector."""

    id: str
    protocol: str
    asset: str
    pool_id: str
    total_apy: float
    fee_apy: float
    reward_apy: float
    tvl_usd: float
    risk_score: int
    impermanent_loss_risk: float
    rewards: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "protocol": self.protocol,
            "asset": self.asset,
            "pool_id": self.pool_id,
            "total_apy": self.total_apy,
            "fee_apy": self.fee_apy,
            "reward_apy": self.reward_apy,
            "tvl_usd": self.tvl_usd,
            "risk_score": self.risk_score,
            "impermanent_loss_risk": self.impermanent_loss_risk,
            "rewards": list(self.rewards),
        }
