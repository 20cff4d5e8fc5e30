"""
RarityStaking TOML Configuration Loader

Loads every section of config.toml with environment variable overrides.
Each section is a dataclass with ``from_dict`` and ``apply_env``.

Environment variable mapping:
    [rewards] base_daily_reward → RARITY_BASE_DAILY_REWARD
    [raffle] prize              → RARITY_RAFFLE_PRIZE
    [rarity] merkle_root        → RARITY_MERKLE_ROOT
    ...
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import (
    DEFAULT_BASE_DAILY_REWARD,
    DEFAULT_MAX_MULTIPLIER,
    DEFAULT_MIN_MULTIPLIER,
    DEFAULT_RAFFLE_PRIZE,
    DEFAULT_RARITY_CEILING,
    DEFAULT_RARITY_FLOOR,
    PROOF_BYTES,
    REINIT_POLICIES,
    REINIT_POLICY_REJECT,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _decimal(value: Any, name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def _int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass
class RewardsConfig:
    """[rewards] section: reward curve calibration."""
    base_daily_reward: Decimal = DEFAULT_BASE_DAILY_REWARD
    min_multiplier: Decimal = DEFAULT_MIN_MULTIPLIER
    max_multiplier: Decimal = DEFAULT_MAX_MULTIPLIER
    rarity_floor: int = DEFAULT_RARITY_FLOOR
    rarity_ceiling: int = DEFAULT_RARITY_CEILING
    claim_on_unstake: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RewardsConfig":
        return cls(
            base_daily_reward=_decimal(
                data.get("base_daily_reward", DEFAULT_BASE_DAILY_REWARD), "base_daily_reward"
            ),
            min_multiplier=_decimal(
                data.get("min_multiplier", DEFAULT_MIN_MULTIPLIER), "min_multiplier"
            ),
            max_multiplier=_decimal(
                data.get("max_multiplier", DEFAULT_MAX_MULTIPLIER), "max_multiplier"
            ),
            rarity_floor=_int(data.get("rarity_floor", DEFAULT_RARITY_FLOOR), "rarity_floor"),
            rarity_ceiling=_int(
                data.get("rarity_ceiling", DEFAULT_RARITY_CEILING), "rarity_ceiling"
            ),
            claim_on_unstake=_bool(data.get("claim_on_unstake", True)),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("RARITY_BASE_DAILY_REWARD"):
            self.base_daily_reward = _decimal(v, "RARITY_BASE_DAILY_REWARD")
        if v := os.environ.get("RARITY_MIN_MULTIPLIER"):
            self.min_multiplier = _decimal(v, "RARITY_MIN_MULTIPLIER")
        if v := os.environ.get("RARITY_MAX_MULTIPLIER"):
            self.max_multiplier = _decimal(v, "RARITY_MAX_MULTIPLIER")
        if v := os.environ.get("RARITY_FLOOR"):
            self.rarity_floor = _int(v, "RARITY_FLOOR")
        if v := os.environ.get("RARITY_CEILING"):
            self.rarity_ceiling = _int(v, "RARITY_CEILING")
        if v := os.environ.get("RARITY_CLAIM_ON_UNSTAKE"):
            self.claim_on_unstake = _bool(v)

    def validate(self) -> None:
        if self.base_daily_reward < 0:
            raise ConfigurationError("base_daily_reward cannot be negative")
        if self.min_multiplier < 0:
            raise ConfigurationError("min_multiplier cannot be negative")
        if self.max_multiplier < self.min_multiplier:
            raise ConfigurationError("max_multiplier must be >= min_multiplier")
        if self.rarity_ceiling <= self.rarity_floor:
            raise ConfigurationError("rarity_ceiling must be greater than rarity_floor")


@dataclass
class RaffleConfig:
    """[raffle] section."""
    prize: Decimal = DEFAULT_RAFFLE_PRIZE
    weighted: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RaffleConfig":
        return cls(
            prize=_decimal(data.get("prize", DEFAULT_RAFFLE_PRIZE), "prize"),
            weighted=_bool(data.get("weighted", True)),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("RARITY_RAFFLE_PRIZE"):
            self.prize = _decimal(v, "RARITY_RAFFLE_PRIZE")
        if v := os.environ.get("RARITY_RAFFLE_WEIGHTED"):
            self.weighted = _bool(v)

    def validate(self) -> None:
        if self.prize < 0:
            raise ConfigurationError("raffle prize cannot be negative")


@dataclass
class RaritySectionConfig:
    """[rarity] section."""
    reinit_policy: str = REINIT_POLICY_REJECT
    merkle_root: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RaritySectionConfig":
        return cls(
            reinit_policy=str(data.get("reinit_policy", REINIT_POLICY_REJECT)).lower(),
            merkle_root=data.get("merkle_root", ""),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("RARITY_REINIT_POLICY"):
            self.reinit_policy = v.lower()
        if v := os.environ.get("RARITY_MERKLE_ROOT"):
            self.merkle_root = v

    def validate(self) -> None:
        if self.reinit_policy not in REINIT_POLICIES:
            raise ConfigurationError(
                f"reinit_policy must be one of {', '.join(REINIT_POLICIES)}, "
                f"got {self.reinit_policy!r}"
            )
        if self.merkle_root:
            root = self.merkle_root[2:] if self.merkle_root.startswith("0x") else self.merkle_root
            try:
                raw = bytes.fromhex(root)
            except ValueError:
                raise ConfigurationError("merkle_root must be hex")
            if len(raw) != PROOF_BYTES:
                raise ConfigurationError(f"merkle_root must be {PROOF_BYTES} bytes")


@dataclass
class LogSectionConfig:
    """[log] section."""
    level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogSectionConfig":
        return cls(level=str(data.get("level", "INFO")).upper())

    def apply_env(self) -> None:
        if v := os.environ.get("RARITY_LOG_LEVEL"):
            self.level = v.upper()

    def validate(self) -> None:
        if self.level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigurationError(f"Unknown log level {self.level!r}")


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass
class StakingConfig:
    """Root configuration object."""
    rewards: RewardsConfig = field(default_factory=RewardsConfig)
    raffle: RaffleConfig = field(default_factory=RaffleConfig)
    rarity: RaritySectionConfig = field(default_factory=RaritySectionConfig)
    log: LogSectionConfig = field(default_factory=LogSectionConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StakingConfig":
        return cls(
            rewards=RewardsConfig.from_dict(data.get("rewards", {})),
            raffle=RaffleConfig.from_dict(data.get("raffle", {})),
            rarity=RaritySectionConfig.from_dict(data.get("rarity", {})),
            log=LogSectionConfig.from_dict(data.get("log", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "StakingConfig":
        """
        Load from a TOML file. A missing file yields the defaults.
        """
        path = Path(config_path)
        if not path.exists():
            logger.debug(f"Config file {path} not found, using defaults")
            return cls()

        try:
            with open(path, "rb") as f:
                data = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {path}: {e}")

        return cls.from_dict(data)

    def apply_env(self) -> None:
        self.rewards.apply_env()
        self.raffle.apply_env()
        self.rarity.apply_env()
        self.log.apply_env()

    def validate(self) -> None:
        self.rewards.validate()
        self.raffle.validate()
        self.rarity.validate()
        self.log.validate()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rewards": {
                "base_daily_reward": str(self.rewards.base_daily_reward),
                "min_multiplier": str(self.rewards.min_multiplier),
                "max_multiplier": str(self.rewards.max_multiplier),
                "rarity_floor": self.rewards.rarity_floor,
                "rarity_ceiling": self.rewards.rarity_ceiling,
                "claim_on_unstake": self.rewards.claim_on_unstake,
            },
            "raffle": {
                "prize": str(self.raffle.prize),
                "weighted": self.raffle.weighted,
            },
            "rarity": {
                "reinit_policy": self.rarity.reinit_policy,
                "merkle_root": self.rarity.merkle_root,
            },
            "log": {
                "level": self.log.level,
            },
        }


def load_config(config_path: Optional[str] = None) -> StakingConfig:
    """
    Load, apply environment overrides and validate.

    Args:
        config_path: TOML path. Defaults to ``RARITY_CONFIG_PATH``.
    """
    from ..constants import RARITY_CONFIG_PATH

    config = StakingConfig.from_file(config_path or str(RARITY_CONFIG_PATH))
    config.apply_env()
    config.validate()
    logger.debug(f"Loaded staking config: {config.to_dict()}")
    return config
