from .client import SolanaClient
from .whirlpool import (
    WhirlpoolRewardInfo,
    WhirlpoolState,
    decode_whirlpool,
    derive_whirlpool_address,
)

__all__ = [
    "SolanaClient",
    "WhirlpoolRewardInfo",
    "WhirlpoolState",
    "decode_whirlpool",
    "derive_whirlpool_address",
]
