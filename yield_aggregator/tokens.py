"""Static token registry, keyed by both symbol and mint address.

Lookups never raise: unknown tokens resolve to symbol ``"Unknown"`` and
0 decimals so one unlisted mint cannot abort a whole collection run.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .models import TokenInfo

# System program address; reward slots holding it are unused.
NULL_MINT = "11111111111111111111111111111111"

UNKNOWN_SYMBOL = "Unknown"
FALLBACK_DECIMALS = 0

BUILTIN_TOKENS: tuple[TokenInfo, ...] = (
    TokenInfo("SOL", "So11111111111111111111111111111111111111112", 9, "solana"),
    TokenInfo("USDC", "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", 6, "usd-coin"),
    TokenInfo("USDT", "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB", 6, "tether"),
    TokenInfo("ORCA", "orcaEKTdK7LKz57vaAYr9QeNsVEPfiu6QeMU1kektZE", 6, "orca"),
    TokenInfo("RAY", "4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R", 6, "raydium"),
    TokenInfo("SRM", "SRMuApVNdxXokk5GT7XD5cUUgXMBCoAz2LHeuAoKWRt", 6, "serum"),
    # Wrapped BTC (Portal)
    TokenInfo("BTC", "9n4nbM75f5Ui33ZbPYXn59EwSgE8CGsHtAeTH5YFeJ9E", 6, "bitcoin"),
)


def build_registry(tokens: Iterable[TokenInfo]) -> Mapping[str, TokenInfo]:
    """Build a read-only mapping indexed by symbol and by address.

    A later token sharing a symbol or address with an earlier one replaces
    it entirely, so no key is left pointing at the replaced entry.
    """
    index: dict[str, TokenInfo] = {}
    for token in tokens:
        for key in (token.symbol, token.address):
            replaced = index.get(key)
            if replaced is None:
                continue
            for stale in (replaced.symbol, replaced.address):
                if index.get(stale) is replaced:
                    del index[stale]
        index[token.symbol] = token
        index[token.address] = token
    return MappingProxyType(index)


TOKENS: Mapping[str, TokenInfo] = build_registry(BUILTIN_TOKENS)


def lookup(
    id_or_symbol: str, registry: Mapping[str, TokenInfo] = TOKENS
) -> TokenInfo | None:
    return registry.get(id_or_symbol)


def symbol_for(id_or_symbol: str, registry: Mapping[str, TokenInfo] = TOKENS) -> str:
    token = registry.get(id_or_symbol)
    return token.symbol if token else UNKNOWN_SYMBOL


def decimals_for(id_or_symbol: str, registry: Mapping[str, TokenInfo] = TOKENS) -> int:
    token = registry.get(id_or_symbol)
    return token.decimals if token else FALLBACK_DECIMALS


def price_id_for(
    id_or_symbol: str, registry: Mapping[str, TokenInfo] = TOKENS
) -> str | None:
    token = registry.get(id_or_symbol)
    return token.price_id if token else None
