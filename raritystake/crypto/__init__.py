"""
RarityStaking crypto helpers: hashing, addresses and Merkle proofs.
"""

from .hashing import keccak256, sha256
from .address import (
    normalize_address,
    is_null_address,
    contract_address,
    account_address,
)
from .merkle import (
    rarity_leaf,
    verify_proof,
    merkle_root,
    merkle_proof,
)

__all__ = [
    "keccak256",
    "sha256",
    "normalize_address",
    "is_null_address",
    "contract_address",
    "account_address",
    "rarity_leaf",
    "verify_proof",
    "merkle_root",
    "merkle_proof",
]
