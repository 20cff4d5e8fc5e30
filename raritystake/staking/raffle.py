"""
RarityStaking Raffle Selection

Picks one winning token from a list of staked ids. The seed combines fresh
entropy with the round number, timestamp and participant list; given the
same seed, selection is deterministic.
"""

import os
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Callable, List, Optional, Sequence, Tuple

from ..crypto.hashing import sha256
from ..logger import get_logger
from .types import RaffleResult

logger = get_logger(__name__)


class RaffleStrategy(ABC):
    """Chooses a winner from ``(token_id, weight)`` candidates and a seed."""

    @abstractmethod
    def select(self, candidates: Sequence[Tuple[int, int]], seed: bytes) -> int:
        ...


class UniformRaffleStrategy(RaffleStrategy):
    """Every participating token has the same chance."""

    def select(self, candidates: Sequence[Tuple[int, int]], seed: bytes) -> int:
        index = int.from_bytes(seed[:8], 'little') % len(candidates)
        return candidates[index][0]


class WeightedRaffleStrategy(RaffleStrategy):
    """
    Chance proportional to rarity score.

    1. Sum the weights
    2. Map the seed to a point in [0, total)
    3. Walk the cumulative distribution to that point
    """

    def select(self, candidates: Sequence[Tuple[int, int]], seed: bytes) -> int:
        total = sum(weight for _, weight in candidates)

        if total == 0:
            logger.warning(
                "All %d raffle candidates have zero rarity, falling back to uniform selection",
                len(candidates),
            )
            return UniformRaffleStrategy().select(candidates, seed)

        point = int.from_bytes(seed[:16], 'little') % total
        cumulative = 0
        for token_id, weight in candidates:
            cumulative += weight
            if point < cumulative:
                return token_id

        # Unreachable while point < total
        return candidates[-1][0]


class RaffleSelector:
    """
    Runs raffle rounds and keeps their history.

    Args:
        strategy: Winner selection strategy (weighted by default)
        entropy: ``n -> n random bytes``; ``os.urandom`` unless injected
    """

    def __init__(
        self,
        strategy: Optional[RaffleStrategy] = None,
        entropy: Callable[[int], bytes] = os.urandom,
    ):
        self.strategy = strategy or WeightedRaffleStrategy()
        self._entropy = entropy
        self._history: List[RaffleResult] = []

    @property
    def next_round(self) -> int:
        return len(self._history) + 1

    @property
    def history(self) -> List[RaffleResult]:
        return list(self._history)

    def compute_seed(self, round_number: int, timestamp: int, token_ids: Sequence[int]) -> bytes:
        data = (
            self._entropy(32)
            + round_number.to_bytes(8, 'little')
            + timestamp.to_bytes(8, 'little')
        )
        for token_id in token_ids:
            data += token_id.to_bytes(32, 'big')
        return sha256(data)

    def draw(
        self,
        candidates: Sequence[Tuple[int, int]],
        timestamp: int,
    ) -> Tuple[int, bytes]:
        """Return ``(winning token id, seed)`` for the next round."""
        seed = self.compute_seed(self.next_round, timestamp, [tid for tid, _ in candidates])
        return self.strategy.select(candidates, seed), seed

    def record(
        self,
        winner_token_id: int,
        winner: str,
        prize: Decimal,
        seed: bytes,
        participants: Sequence[int],
        timestamp: int,
    ) -> RaffleResult:
        result = RaffleResult(
            round=self.next_round,
            winner_token_id=winner_token_id,
            winner=winner,
            prize=prize,
            seed="0x" + seed.hex(),
            participants=tuple(participants),
            timestamp=timestamp,
        )
        self._history.append(result)
        return result
