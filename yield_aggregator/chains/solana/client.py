"""Solana JSON-RPC client with fallback support."""
import base64
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ...config import ChainConfig
from ...errors import DataIntegrityError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_COMMITMENT = "confirmed"


class SolanaClient:
    """Read-only Solana RPC client with automatic endpoint fallback."""

    def __init__(self, config: ChainConfig, commitment: str = DEFAULT_COMMITMENT) -> None:
        self.endpoints = list(config.rpc_endpoints)
        self.timeout = config.rpc_timeout
        self.commitment = commitment
        self.current_rpc_index = 0

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make RPC call with fallback to alternative endpoints."""
        if not self.endpoints:
            raise TransportError("No Solana RPC endpoints configured")

        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        rpc_url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        result = await response.json()
                        if "error" in result:
                            raise RuntimeError(f"RPC Error: {result['error']}")

                        if rpc_index != self.current_rpc_index:
                            logger.info("Switched to RPC endpoint: %s", rpc_url)
                            self.current_rpc_index = rpc_index

                        return result.get("result")
            except Exception as e:
                last_error = e
                logger.warning("RPC endpoint %s failed: %s", rpc_url, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

        raise TransportError(f"All RPC endpoints failed. Last error: {last_error}")

    async def get_account_info(self, address: str) -> bytes | None:
        """Return the raw account data, or None if the account does not exist."""
        result = await self.rpc_call(
            "getAccountInfo",
            [address, {"encoding": "base64", "commitment": self.commitment}],
        )
        value = (result or {}).get("value")
        if not value:
            return None

        data = value.get("data")
        if not isinstance(data, list) or not data:
            raise DataIntegrityError(f"Unexpected account data encoding for {address}")
        return base64.b64decode(data[0])

    async def get_token_account_balance(self, address: str) -> int:
        """Return the raw (integer, undecimalized) balance of an SPL token account."""
        result = await self.rpc_call(
            "getTokenAccountBalance",
            [address, {"commitment": self.commitment}],
        )
        value = (result or {}).get("value")
        if not value or "amount" not in value:
            raise DataIntegrityError(f"No token balance returned for {address}")
        return int(value["amount"])
