"""Chain client protocol: read-only Solana RPC abstraction."""
from typing import Protocol


class ChainClient(Protocol):
    """Abstract interface for the account reads the on-chain collectors need."""

    async def get_account_info(self, address: str) -> bytes | None: ...

    async def get_token_account_balance(self, address: str) -> int: ...
