"""
RarityStaking Configuration

Loads config.toml; environment variables override TOML values.
"""

from .loader import (
    StakingConfig,
    RewardsConfig,
    RaffleConfig,
    RaritySectionConfig,
    LogSectionConfig,
    load_config,
)

__all__ = [
    "StakingConfig",
    "RewardsConfig",
    "RaffleConfig",
    "RaritySectionConfig",
    "LogSectionConfig",
    "load_config",
]
