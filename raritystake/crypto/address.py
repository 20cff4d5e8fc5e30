"""
RarityStaking Addresses

EIP-55 checksummed 20-byte addresses for accounts and contracts. Every
address that enters the contract or a token is normalized here so map
lookups never depend on hex casing.
"""

import rlp
from eth_utils import is_address, to_canonical_address, to_checksum_address

from ..constants import NULL_ADDRESS
from ..exceptions import InvalidAddressError
from .hashing import keccak256


def normalize_address(address: str) -> str:
    """
    Return the checksum form of *address*.

    Raises:
        InvalidAddressError: If *address* is not a 20-byte hex address
    """
    if not isinstance(address, str) or not is_address(address):
        raise InvalidAddressError(f"Invalid address: {address!r}")
    return to_checksum_address(address)


def is_null_address(address: str) -> bool:
    return normalize_address(address) == NULL_ADDRESS


def contract_address(deployer: str, nonce: int) -> str:
    """
    Derive a CREATE-style contract address.

    address = keccak256(rlp([deployer, nonce]))[12:]
    """
    encoded = rlp.encode([to_canonical_address(normalize_address(deployer)), nonce])
    return to_checksum_address(keccak256(encoded)[12:])


def account_address(seed: bytes, index: int) -> str:
    """Deterministic signer address for local test chains."""
    return to_checksum_address(keccak256(seed + index.to_bytes(8, 'big'))[12:])
