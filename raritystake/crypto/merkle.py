"""
Sorted-pair keccak256 Merkle trees (OpenZeppelin ``MerkleProof`` layout).

Rarity datasets are committed as a single root; each ``initializeRarity``
entry carries the sibling hashes that lead from its leaf to that root.
"""

from typing import List, Sequence

from .hashing import keccak256


def rarity_leaf(token_id: int, rarity_score: int) -> bytes:
    """keccak256(abi.encodePacked(uint256 tokenId, uint256 rarityScore))"""
    return keccak256(token_id.to_bytes(32, 'big') + rarity_score.to_bytes(32, 'big'))


def hash_pair(a: bytes, b: bytes) -> bytes:
    return keccak256(a + b) if a < b else keccak256(b + a)


def process_proof(proof: Sequence[bytes], leaf: bytes) -> bytes:
    computed = leaf
    for sibling in proof:
        computed = hash_pair(computed, sibling)
    return computed


def verify_proof(proof: Sequence[bytes], root: bytes, leaf: bytes) -> bool:
    return process_proof(proof, leaf) == root


def build_tree(leaves: Sequence[bytes]) -> List[List[bytes]]:
    """
    Build all levels of the tree, leaves first.

    An odd node at the end of a level is promoted unchanged.
    """
    if not leaves:
        raise ValueError("Cannot build a Merkle tree without leaves")

    levels = [list(leaves)]
    while len(levels[-1]) > 1:
        current = levels[-1]
        parent = []
        for i in range(0, len(current), 2):
            if i + 1 < len(current):
                parent.append(hash_pair(current[i], current[i + 1]))
            else:
                parent.append(current[i])
        levels.append(parent)
    return levels


def merkle_root(leaves: Sequence[bytes]) -> bytes:
    return build_tree(leaves)[-1][0]


def merkle_proof(leaves: Sequence[bytes], index: int) -> List[bytes]:
    """Sibling path for the leaf at *index*."""
    if index < 0 or index >= len(leaves):
        raise IndexError(f"Leaf index {index} out of range")

    proof = []
    for level in build_tree(leaves)[:-1]:
        sibling = index ^ 1
        if sibling < len(level):
            proof.append(level[sibling])
        index //= 2
    return proof
