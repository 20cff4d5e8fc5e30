"""
RarityStaking Types

Records held by the contract and the events it emits.
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Sequence, Tuple, Union

from eth_utils import is_0x_prefixed, is_hex

from ..constants import NULL_ADDRESS, PROOF_BYTES
from ..exceptions import RarityError


def _normalize_proof_hash(value: Union[str, bytes], token_id: int) -> str:
    if isinstance(value, (bytes, bytearray)):
        if len(value) != PROOF_BYTES:
            raise RarityError(f"Proof element for token #{token_id} must be {PROOF_BYTES} bytes")
        return "0x" + bytes(value).hex()
    if not isinstance(value, str) or not is_0x_prefixed(value) or not is_hex(value):
        raise RarityError(f"Proof element for token #{token_id} must be 0x-prefixed hex")
    if len(value) != 2 + PROOF_BYTES * 2:
        raise RarityError(f"Proof element for token #{token_id} must be {PROOF_BYTES} bytes")
    return value.lower()


@dataclass(frozen=True)
class TokenRarity:
    """
    One rarity entry.

    Attributes:
        token_id: NFT id
        rarity_score: Non-negative score scaling the reward rate
        proof: Sibling hashes proving (token_id, rarity_score) against the
            committed rarity root. A single hash is the common case.
    """
    token_id: int
    rarity_score: int
    proof: Tuple[str, ...] = ()

    @classmethod
    def from_entry(cls, entry: Union["TokenRarity", Sequence[Any]]) -> "TokenRarity":
        """
        Accept ``TokenRarity`` or a ``(token_id, rarity_score, proof)`` triple,
        where proof is one 32-byte hash or a list of them.
        """
        if isinstance(entry, TokenRarity):
            return entry
        if not isinstance(entry, (list, tuple)) or len(entry) != 3:
            raise RarityError(f"Rarity entry must be (tokenId, rarityScore, proof), got {entry!r}")

        token_id, rarity_score, proof = entry
        if isinstance(token_id, bool) or not isinstance(token_id, int) or token_id < 0:
            raise RarityError(f"Invalid token id {token_id!r}")
        if isinstance(rarity_score, bool) or not isinstance(rarity_score, int) or rarity_score < 0:
            raise RarityError(f"Invalid rarity score {rarity_score!r} for token #{token_id}")

        if isinstance(proof, (str, bytes, bytearray)):
            proof = [proof]
        return cls(
            token_id=token_id,
            rarity_score=rarity_score,
            proof=tuple(_normalize_proof_hash(p, token_id) for p in proof),
        )

    def proof_bytes(self) -> List[bytes]:
        return [bytes.fromhex(p[2:]) for p in self.proof]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tokenId": self.token_id,
            "rarityScore": self.rarity_score,
            "proof": list(self.proof),
        }


@dataclass(frozen=True)
class StakeRecord:
    """
    Stake state of one token. ``owner == NULL_ADDRESS`` means not staked.

    Attributes:
        token_id: NFT id
        owner: Staker address
        staked_at: Unix time of staking
        last_claimed_at: Unix time rewards were last paid (``staked_at`` until then)
    """
    token_id: int
    owner: str = NULL_ADDRESS
    staked_at: int = 0
    last_claimed_at: int = 0

    @property
    def is_staked(self) -> bool:
        return self.owner != NULL_ADDRESS

    @property
    def accrual_start(self) -> int:
        return max(self.staked_at, self.last_claimed_at)

    def __getitem__(self, key: str) -> Any:
        # stakedInfo(id)["owner"] as exposed by the contract ABI
        return self.to_dict()[key]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tokenId": self.token_id,
            "owner": self.owner,
            "stakedAt": self.staked_at,
            "lastClaimedAt": self.last_claimed_at,
        }


@dataclass(frozen=True)
class RaffleResult:
    """Outcome of one raffle roll."""
    round: int
    winner_token_id: int
    winner: str
    prize: Decimal
    seed: str
    participants: Tuple[int, ...]
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": self.round,
            "winnerTokenId": self.winner_token_id,
            "winner": self.winner,
            "prize": str(self.prize),
            "seed": self.seed,
            "participants": len(self.participants),
            "timestamp": self.timestamp,
        }


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RarityInitializedEvent:
    token_id: int
    rarity_score: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "RarityInitialized",
            "tokenId": self.token_id,
            "rarityScore": self.rarity_score,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class StakedEvent:
    owner: str
    token_id: int
    staked_at: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Staked",
            "owner": self.owner,
            "tokenId": self.token_id,
            "stakedAt": self.staked_at,
        }


@dataclass(frozen=True)
class UnstakedEvent:
    owner: str
    token_id: int
    unstaked_at: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Unstaked",
            "owner": self.owner,
            "tokenId": self.token_id,
            "unstakedAt": self.unstaked_at,
        }


@dataclass(frozen=True)
class RewardsClaimedEvent:
    owner: str
    token_ids: Tuple[int, ...]
    amount: Decimal
    claimed_at: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "RewardsClaimed",
            "owner": self.owner,
            "tokenIds": list(self.token_ids),
            "amount": str(self.amount),
            "claimedAt": self.claimed_at,
        }


@dataclass(frozen=True)
class RaffleRolledEvent:
    result: RaffleResult

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "RaffleRolled", **self.result.to_dict()}


@dataclass(frozen=True)
class OwnershipTransferredEvent:
    previous_owner: str
    new_owner: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "OwnershipTransferred",
            "previousOwner": self.previous_owner,
            "newOwner": self.new_owner,
        }
