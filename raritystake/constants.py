"""
RarityStaking Constants

Global constants and environment configuration used throughout the package.
Environment values are read once at import from ``.env`` (via python-dotenv)
and may be overridden by real environment variables.
"""
import ast
import os
from decimal import Decimal
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                'INFO',
    'LOG_FORMAT':               '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':          '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING': 'True',
    'LOG_FILE_OUTPUT':          'True',
}

STAKING_DEFAULTS = {
    'RARITY_CONFIG_PATH':       'config.toml',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# CHAIN CONSTANTS
# ==================================================================================
NULL_ADDRESS = '0x' + '00' * 20
SECONDS_PER_DAY = 24 * 60 * 60
TOKEN_DECIMALS = 18
# Smallest representable token amount (1 wei)
TOKEN_PRECISION = Decimal(1).scaleb(-TOKEN_DECIMALS)
PROOF_BYTES = 32


# ==================================================================================
# STAKING PARAMETERS
# ==================================================================================
# Upper bound on ids accepted by a single batch call
MAX_BATCH_SIZE = 500

# Reward curve calibration. Only the shape (linear between two multipliers
# over a rarity band) is known; every value here is overridable from config.
DEFAULT_BASE_DAILY_REWARD = Decimal('10')
DEFAULT_MIN_MULTIPLIER = Decimal('80')
DEFAULT_MAX_MULTIPLIER = Decimal('120')
DEFAULT_RARITY_FLOOR = 277489
DEFAULT_RARITY_CEILING = 2859033

DEFAULT_RAFFLE_PRIZE = Decimal('100')

REINIT_POLICY_REJECT = 'reject'
REINIT_POLICY_OVERWRITE = 'overwrite'
REINIT_POLICIES = (REINIT_POLICY_REJECT, REINIT_POLICY_OVERWRITE)


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = LOGGER_DEFAULTS | STAKING_DEFAULTS
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Only known literals reach ast.literal_eval.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # Process environment wins over .env, .env wins over defaults
    raw = os.environ.get(key, _config.get(key))
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
