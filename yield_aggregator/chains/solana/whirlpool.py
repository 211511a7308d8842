"""Orca Whirlpool account layout and address derivation (no I/O).

Account layout (Anchor, little-endian), offsets in bytes:

    0    discriminator            [u8; 8]
    8    whirlpools_config        Pubkey
    40   whirlpool_bump           [u8; 1]
    41   tick_spacing             u16
    43   tick_spacing_seed        [u8; 2]
    45   fee_rate                 u16   (hundredths of a basis point)
    47   protocol_fee_rate        u16
    49   liquidity                u128
    65   sqrt_price               u128  (Q64.64)
    81   tick_current_index       i32
    85   protocol_fee_owed_a      u64
    93   protocol_fee_owed_b      u64
    101  token_mint_a             Pubkey
    133  token_vault_a            Pubkey
    165  fee_growth_global_a      u128
    181  token_mint_b             Pubkey
    213  token_vault_b            Pubkey
    245  fee_growth_global_b      u128
    261  reward_last_updated_ts   u64
    269  reward_infos             [WhirlpoolRewardInfo; 3], 128 bytes each:
             mint Pubkey, vault Pubkey, authority Pubkey,
             emissions_per_second_x64 u128, growth_global_x64 u128
"""
from __future__ import annotations

import struct
from dataclasses import dataclass

from solders.pubkey import Pubkey

from ...errors import DataIntegrityError

WHIRLPOOL_PROGRAM_ID = "whirLbMiicVdio4qvUfM5KAg6Ct8VwpYzGff3uctyCc"
WHIRLPOOLS_CONFIG = "2LecshUwdy9xi7meFgHtFJQNSKk4KdTrcpvaB56dP2NQ"

# fee_rate is stored in hundredths of a basis point: 3000 is 0.3%
FEE_RATE_DENOMINATOR = 1_000_000
NUM_REWARDS = 3

_REWARD_INFOS_OFFSET = 269
_REWARD_INFO_SIZE = 128
WHIRLPOOL_ACCOUNT_SIZE = _REWARD_INFOS_OFFSET + NUM_REWARDS * _REWARD_INFO_SIZE


@dataclass(frozen=True)
class WhirlpoolRewardInfo:
    mint: str
    vault: str
    emissions_per_second_x64: int


@dataclass(frozen=True)
class WhirlpoolState:
    """Decoded subset of a Whirlpool account."""

    whirlpools_config: str
    tick_spacing: int
    fee_rate: int
    liquidity: int
    sqrt_price: int
    token_mint_a: str
    token_vault_a: str
    token_mint_b: str
    token_vault_b: str
    reward_infos: tuple[WhirlpoolRewardInfo, ...]

    @property
    def fee_rate_decimal(self) -> float:
        """Fee rate as a fraction, e.g. 3000 → 0.003."""
        return self.fee_rate / FEE_RATE_DENOMINATOR


def derive_whirlpool_address(
    mint_one: str,
    mint_two: str,
    tick_spacing: int,
    program_id: str = WHIRLPOOL_PROGRAM_ID,
    whirlpools_config: str = WHIRLPOOLS_CONFIG,
) -> str:
    """Derive the deterministic Whirlpool PDA for a mint pair and tick spacing."""
    address, _bump = Pubkey.find_program_address(
        [
            b"whirlpool",
            bytes(Pubkey.from_string(whirlpools_config)),
            bytes(Pubkey.from_string(mint_one)),
            bytes(Pubkey.from_string(mint_two)),
            struct.pack("<H", tick_spacing),
        ],
        Pubkey.from_string(program_id),
    )
    return str(address)


def _pubkey_at(data: bytes, offset: int) -> str:
    return str(Pubkey.from_bytes(data[offset:offset + 32]))


def _u128_at(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset:offset + 16], "little")


def decode_whirlpool(data: bytes) -> WhirlpoolState:
    """Decode raw Whirlpool account bytes.

    Raises:
        DataIntegrityError: the buffer is shorter than a Whirlpool account.
    """
    if len(data) < WHIRLPOOL_ACCOUNT_SIZE:
        raise DataIntegrityError(
            f"Whirlpool account data too short: {len(data)} < {WHIRLPOOL_ACCOUNT_SIZE}"
        )

    tick_spacing, = struct.unpack_from("<H", data, 41)
    fee_rate, = struct.unpack_from("<H", data, 45)

    rewards = []
    for i in range(NUM_REWARDS):
        base = _REWARD_INFOS_OFFSET + i * _REWARD_INFO_SIZE
        rewards.append(
            WhirlpoolRewardInfo(
                mint=_pubkey_at(data, base),
                vault=_pubkey_at(data, base + 32),
                emissions_per_second_x64=_u128_at(data, base + 96),
            )
        )

    return WhirlpoolState(
        whirlpools_config=_pubkey_at(data, 8),
        tick_spacing=tick_spacing,
        fee_rate=fee_rate,
        liquidity=_u128_at(data, 49),
        sqrt_price=_u128_at(data, 65),
        token_mint_a=_pubkey_at(data, 101),
        token_vault_a=_pubkey_at(data, 133),
        token_mint_b=_pubkey_at(data, 181),
        token_vault_b=_pubkey_at(data, 213),
        reward_infos=tuple(rewards),
    )


def price_from_sqrt_price(sqrt_price_x64: int, decimals_a: int, decimals_b: int) -> float:
    """Spot price of token A in units of token B from a Q64.64 sqrt price."""
    sqrt_price = sqrt_price_x64 / 2**64
    return sqrt_price**2 * 10 ** (decimals_a - decimals_b)
