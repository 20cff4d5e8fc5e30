"""
Rarity-weighted NFT staking

Provides:
  - RarityStaking     : the staking contract
  - RarityTable       : token id → rarity score, with proof verification
  - StakeLedger       : stake records and per-owner index
  - RewardStrategy    : pluggable reward curve (LinearRarityRewardStrategy)
  - RaffleStrategy    : pluggable raffle selection (weighted / uniform)
"""

from .types import (
    TokenRarity,
    StakeRecord,
    RaffleResult,
    RarityInitializedEvent,
    StakedEvent,
    UnstakedEvent,
    RewardsClaimedEvent,
    RaffleRolledEvent,
    OwnershipTransferredEvent,
)
from .rarity import (
    RarityTable,
    RarityProofVerifier,
    AcceptAllVerifier,
    MerkleRarityVerifier,
)
from .ledger import StakeLedger
from .rewards import RewardStrategy, LinearRarityRewardStrategy, RewardCalculator
from .raffle import (
    RaffleSelector,
    RaffleStrategy,
    WeightedRaffleStrategy,
    UniformRaffleStrategy,
)
from .contract import RarityStaking

__all__ = [
    "TokenRarity",
    "StakeRecord",
    "RaffleResult",
    "RarityInitializedEvent",
    "StakedEvent",
    "UnstakedEvent",
    "RewardsClaimedEvent",
    "RaffleRolledEvent",
    "OwnershipTransferredEvent",
    "RarityTable",
    "RarityProofVerifier",
    "AcceptAllVerifier",
    "MerkleRarityVerifier",
    "StakeLedger",
    "RewardStrategy",
    "LinearRarityRewardStrategy",
    "RewardCalculator",
    "RaffleSelector",
    "RaffleStrategy",
    "WeightedRaffleStrategy",
    "UniformRaffleStrategy",
    "RarityStaking",
]
