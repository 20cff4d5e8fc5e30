"""
RarityStaking Exceptions

Error taxonomy for the staking contract. Every failure aborts the whole
call; nothing here is fatal to the contract itself.
"""


class RarityStakingError(Exception):
    """Base exception for RarityStaking."""
    pass


class InvalidAddressError(RarityStakingError):
    """Invalid account or contract address."""
    pass


class ConfigurationError(RarityStakingError):
    """Configuration error."""
    pass


# ── Authorization ─────────────────────────────────────────────────────

class AuthorizationError(RarityStakingError):
    """Caller is not allowed to perform the operation."""
    pass


class NotContractOwnerError(AuthorizationError):
    """Raised when an owner-only entry point is called by someone else."""
    def __init__(self, caller: str):
        self.caller = caller
        super().__init__(f"Ownable: caller {caller} is not the owner")


class NotTokenOwnerError(AuthorizationError):
    """Raised when the caller does not hold the NFT being staked."""
    def __init__(self, token_id: int, caller: str):
        self.token_id = token_id
        self.caller = caller
        super().__init__(f"Token #{token_id} is not owned by {caller}")


class NotStakeOwnerError(AuthorizationError):
    """Raised when the caller is not the recorded staker of a token."""
    def __init__(self, token_id: int, caller: str):
        self.token_id = token_id
        self.caller = caller
        super().__init__(f"Token #{token_id} was not staked by {caller}")


# ── Stake state ───────────────────────────────────────────────────────

class StakeStateError(RarityStakingError):
    """Operation conflicts with the current stake state of a token."""
    pass


class AlreadyStakedError(StakeStateError):
    def __init__(self, token_id: int):
        self.token_id = token_id
        super().__init__(f"Token #{token_id} is already staked")


class NotStakedError(StakeStateError):
    def __init__(self, token_id: int):
        self.token_id = token_id
        super().__init__(f"Token #{token_id} is not staked")


# ── Rarity ────────────────────────────────────────────────────────────

class RarityError(RarityStakingError):
    """Malformed or rejected rarity entry."""
    pass


class RarityAlreadyInitializedError(RarityError):
    def __init__(self, token_id: int):
        self.token_id = token_id
        super().__init__(f"Rarity for token #{token_id} is already initialized")


class InvalidRarityProofError(RarityError):
    def __init__(self, token_id: int):
        self.token_id = token_id
        super().__init__(f"Rarity proof for token #{token_id} failed verification")


# ── Preconditions ─────────────────────────────────────────────────────

class PreconditionError(RarityStakingError):
    """A collaborator is not in the state the call requires."""
    pass


class NotApprovedError(PreconditionError):
    """Raised when the contract may not move the caller's NFT."""
    def __init__(self, token_id: int, operator: str):
        self.token_id = token_id
        self.operator = operator
        super().__init__(f"Contract {operator} is not approved for token #{token_id}")


class InsufficientRewardBalanceError(PreconditionError):
    """Raised when the contract holds too few tokens to pay out."""
    def __init__(self, symbol: str, required, available):
        self.symbol = symbol
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient {symbol} held by contract: {available} (required: {required})"
        )


# ── Raffle ────────────────────────────────────────────────────────────

class RaffleError(RarityStakingError):
    """Raffle roll could not be performed."""
    pass
