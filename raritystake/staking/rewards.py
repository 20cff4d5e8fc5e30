"""
RarityStaking Reward Calculation

Rewards are a strategy of (rarity score, elapsed seconds). Only the shape of
the curve is pinned down: a per-day amount that grows linearly with rarity
between a minimum and a maximum multiplier. All coefficients come from
``RewardsConfig`` so the curve can be recalibrated without code changes.
"""

from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_DOWN
from typing import Optional

from ..config.loader import RewardsConfig
from ..constants import (
    DEFAULT_BASE_DAILY_REWARD,
    DEFAULT_MAX_MULTIPLIER,
    DEFAULT_MIN_MULTIPLIER,
    DEFAULT_RARITY_CEILING,
    DEFAULT_RARITY_FLOOR,
    SECONDS_PER_DAY,
    TOKEN_PRECISION,
)
from ..exceptions import ConfigurationError
from .rarity import RarityTable
from .types import StakeRecord


class RewardStrategy(ABC):
    """
    Reward owed for holding a token of *rarity_score* staked for
    *elapsed_seconds*. Implementations must return 0 for 0 seconds, never
    return a negative amount, and be non-decreasing in elapsed time.
    """

    @abstractmethod
    def compute(self, rarity_score: int, elapsed_seconds: int) -> Decimal:
        ...


class LinearRarityRewardStrategy(RewardStrategy):
    """
    daily = base_daily_reward * (min_mult + (max_mult - min_mult) * t)
    t     = clamp((score - rarity_floor) / (rarity_ceiling - rarity_floor), 0, 1)

    Accrues per second and is truncated to token precision.
    """

    def __init__(
        self,
        base_daily_reward: Decimal = DEFAULT_BASE_DAILY_REWARD,
        min_multiplier: Decimal = DEFAULT_MIN_MULTIPLIER,
        max_multiplier: Decimal = DEFAULT_MAX_MULTIPLIER,
        rarity_floor: int = DEFAULT_RARITY_FLOOR,
        rarity_ceiling: int = DEFAULT_RARITY_CEILING,
    ):
        if rarity_ceiling <= rarity_floor:
            raise ConfigurationError("rarity_ceiling must be greater than rarity_floor")
        if base_daily_reward < 0 or min_multiplier < 0 or max_multiplier < min_multiplier:
            raise ConfigurationError("Reward coefficients must be non-negative and ordered")

        self.base_daily_reward = Decimal(base_daily_reward)
        self.min_multiplier = Decimal(min_multiplier)
        self.max_multiplier = Decimal(max_multiplier)
        self.rarity_floor = rarity_floor
        self.rarity_ceiling = rarity_ceiling

    @classmethod
    def from_config(cls, config: RewardsConfig) -> "LinearRarityRewardStrategy":
        return cls(
            base_daily_reward=config.base_daily_reward,
            min_multiplier=config.min_multiplier,
            max_multiplier=config.max_multiplier,
            rarity_floor=config.rarity_floor,
            rarity_ceiling=config.rarity_ceiling,
        )

    def multiplier(self, rarity_score: int) -> Decimal:
        span = Decimal(self.rarity_ceiling - self.rarity_floor)
        t = Decimal(rarity_score - self.rarity_floor) / span
        t = min(max(t, Decimal("0")), Decimal("1"))
        return self.min_multiplier + (self.max_multiplier - self.min_multiplier) * t

    def daily_reward(self, rarity_score: int) -> Decimal:
        return self.base_daily_reward * self.multiplier(rarity_score)

    def compute(self, rarity_score: int, elapsed_seconds: int) -> Decimal:
        if elapsed_seconds <= 0:
            return Decimal("0")
        amount = self.daily_reward(rarity_score) * Decimal(elapsed_seconds) / SECONDS_PER_DAY
        return amount.quantize(TOKEN_PRECISION, rounding=ROUND_DOWN)

    def __repr__(self) -> str:
        return (
            f"<LinearRarityRewardStrategy base={self.base_daily_reward} "
            f"mult={self.min_multiplier}..{self.max_multiplier} "
            f"rarity={self.rarity_floor}..{self.rarity_ceiling}>"
        )


class RewardCalculator:
    """Applies a RewardStrategy to stake records using the rarity table."""

    def __init__(self, rarity_table: RarityTable, strategy: Optional[RewardStrategy] = None):
        self.rarity_table = rarity_table
        self.strategy = strategy or LinearRarityRewardStrategy()

    def pending(self, record: StakeRecord, now: int) -> Decimal:
        """Reward accrued since the later of stake time and last claim."""
        if not record.is_staked:
            return Decimal("0")
        elapsed = max(0, now - record.accrual_start)
        amount = self.strategy.compute(self.rarity_table.rarity_of(record.token_id), elapsed)
        return max(amount, Decimal("0"))
