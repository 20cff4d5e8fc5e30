"""
Rarity table: token id → rarity score, filled by batch initialization.

Each entry's proof is checked by an injected ``RarityProofVerifier``.
Whether a second initialization of the same id overwrites or fails is set
by the re-initialization policy.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence, Union

from ..constants import PROOF_BYTES, REINIT_POLICIES, REINIT_POLICY_REJECT
from ..crypto.merkle import rarity_leaf, verify_proof
from ..exceptions import (
    ConfigurationError,
    InvalidRarityProofError,
    RarityAlreadyInitializedError,
    RarityError,
)
from ..logger import get_logger
from .types import TokenRarity

logger = get_logger(__name__)


class RarityProofVerifier(ABC):
    """Decides whether a rarity entry is backed by the committed dataset."""

    @abstractmethod
    def verify(self, entry: TokenRarity) -> bool:
        ...


class AcceptAllVerifier(RarityProofVerifier):
    """No commitment configured: any well-formed entry is accepted."""

    def verify(self, entry: TokenRarity) -> bool:
        return True


class MerkleRarityVerifier(RarityProofVerifier):
    """
    Sorted-pair keccak256 Merkle proof against a committed root.

    Leaf: keccak256(abi.encodePacked(uint256 tokenId, uint256 rarityScore))
    """

    def __init__(self, root: Union[str, bytes]):
        if isinstance(root, str):
            root = bytes.fromhex(root[2:] if root.startswith("0x") else root)
        if len(root) != PROOF_BYTES:
            raise ConfigurationError(f"Merkle root must be {PROOF_BYTES} bytes")
        self.root = root

    def verify(self, entry: TokenRarity) -> bool:
        leaf = rarity_leaf(entry.token_id, entry.rarity_score)
        return verify_proof(entry.proof_bytes(), self.root, leaf)


def verifier_from_root(merkle_root: Optional[str]) -> RarityProofVerifier:
    if merkle_root:
        return MerkleRarityVerifier(merkle_root)
    return AcceptAllVerifier()


class RarityTable:
    """
    Holds one ``TokenRarity`` per token id.

    ``initialize`` validates the whole batch (shape, duplicates, policy,
    proofs) before writing anything.
    """

    def __init__(
        self,
        verifier: Optional[RarityProofVerifier] = None,
        reinit_policy: str = REINIT_POLICY_REJECT,
    ):
        if reinit_policy not in REINIT_POLICIES:
            raise ConfigurationError(f"Unknown re-initialization policy {reinit_policy!r}")
        self.verifier = verifier or AcceptAllVerifier()
        self.reinit_policy = reinit_policy
        self._entries: Dict[int, TokenRarity] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, token_id: int) -> bool:
        return token_id in self._entries

    def rarity_of(self, token_id: int) -> int:
        entry = self._entries.get(token_id)
        return entry.rarity_score if entry else 0

    def entry(self, token_id: int) -> Optional[TokenRarity]:
        return self._entries.get(token_id)

    def validate(self, entries: Iterable[Union[TokenRarity, Sequence]]) -> List[TokenRarity]:
        """
        Parse and check a batch without writing it.

        Raises:
            RarityError: Malformed entry, empty batch or duplicate id in batch
            RarityAlreadyInitializedError: Id already set and policy is ``reject``
            InvalidRarityProofError: Proof rejected by the verifier
        """
        parsed = [TokenRarity.from_entry(e) for e in entries]
        if not parsed:
            raise RarityError("No rarity entries supplied")

        seen = set()
        for entry in parsed:
            if entry.token_id in seen:
                raise RarityError(f"Duplicate rarity entry for token #{entry.token_id}")
            seen.add(entry.token_id)

            if entry.token_id in self._entries and self.reinit_policy == REINIT_POLICY_REJECT:
                raise RarityAlreadyInitializedError(entry.token_id)

            if not self.verifier.verify(entry):
                logger.warning(
                    f"Rejected rarity proof for token #{entry.token_id} "
                    f"(score {entry.rarity_score})"
                )
                raise InvalidRarityProofError(entry.token_id)

        return parsed

    def initialize(self, entries: Iterable[Union[TokenRarity, Sequence]]) -> List[TokenRarity]:
        parsed = self.validate(entries)
        overwritten = sum(1 for e in parsed if e.token_id in self._entries)
        for entry in parsed:
            self._entries[entry.token_id] = entry

        logger.info(
            f"Rarity initialized for {len(parsed)} tokens"
            + (f" ({overwritten} overwritten)" if overwritten else "")
        )
        return parsed
