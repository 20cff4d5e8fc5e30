"""
RarityStaking Hashing

- keccak256: EVM hash, used for Merkle leaves and contract addresses
- sha256: used for raffle seeds
"""

import hashlib
from typing import Union

from Crypto.Hash import keccak as _keccak


def _to_bytes(data: Union[bytes, str]) -> bytes:
    if isinstance(data, str):
        if data.startswith('0x') or data.startswith('0X'):
            return bytes.fromhex(data[2:])
        return bytes.fromhex(data)
    return data


def keccak256(data: Union[bytes, str]) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum standard).

    Args:
        data: Input bytes or hex string

    Returns:
        32-byte hash
    """
    k = _keccak.new(digest_bits=256)
    k.update(_to_bytes(data))
    return k.digest()


def sha256(data: Union[bytes, str]) -> bytes:
    """Compute SHA-256 hash of bytes or a hex string."""
    return hashlib.sha256(_to_bytes(data)).digest()
