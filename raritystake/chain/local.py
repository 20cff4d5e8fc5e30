"""
Local in-process chain.

Provides signer accounts, CREATE-style contract addresses and a manual
block clock, so the staking contract and its tokens can be deployed and
driven together the way a Hardhat network would.
"""

from typing import Dict, List, Optional

from ..config.loader import StakingConfig
from ..crypto.address import account_address, contract_address, normalize_address
from ..logger import get_logger
from ..staking.contract import RarityStaking
from ..tokens.erc20 import ERC20Token
from ..tokens.erc721 import ERC721Token
from .clock import ManualClock

logger = get_logger(__name__)

DEFAULT_ACCOUNT_SEED = b"raritystake-local"


class LocalChain:
    """
    Deterministic accounts plus a manual clock.

    Args:
        num_accounts: Number of signer accounts to derive
        genesis_time: Initial block timestamp (wall clock if omitted)
        seed: Seed for account derivation
    """

    def __init__(
        self,
        num_accounts: int = 10,
        genesis_time: Optional[int] = None,
        seed: bytes = DEFAULT_ACCOUNT_SEED,
    ):
        if num_accounts < 1:
            raise ValueError("A local chain needs at least one account")
        self.clock = ManualClock(genesis_time)
        self.accounts: List[str] = [account_address(seed, i) for i in range(num_accounts)]
        self._nonces: Dict[str, int] = {}

    @property
    def deployer(self) -> str:
        return self.accounts[0]

    def now(self) -> int:
        return self.clock.now()

    def increase_time(self, seconds: int) -> int:
        """Advance block time, like ``evm_increaseTime``."""
        return self.clock.advance(seconds)

    def _next_address(self, deployer: str) -> str:
        deployer = normalize_address(deployer)
        nonce = self._nonces.get(deployer, 0)
        self._nonces[deployer] = nonce + 1
        return contract_address(deployer, nonce)

    # ── Deployment ────────────────────────────────────────────────────

    def deploy_erc20(self, name: str, symbol: str, deployer: Optional[str] = None) -> ERC20Token:
        return ERC20Token(name, symbol, self._next_address(deployer or self.deployer))

    def deploy_erc721(
        self,
        name: str,
        symbol: str,
        deployer: Optional[str] = None,
        start_token_id: int = 0,
    ) -> ERC721Token:
        return ERC721Token(
            name, symbol, self._next_address(deployer or self.deployer), start_token_id
        )

    def deploy_staking(
        self,
        nft: ERC721Token,
        reward_token: ERC20Token,
        nexus_token: ERC20Token,
        deployer: Optional[str] = None,
        config: Optional[StakingConfig] = None,
        **kwargs,
    ) -> RarityStaking:
        deployer = deployer or self.deployer
        return RarityStaking(
            nft,
            reward_token,
            nexus_token,
            owner=deployer,
            address=self._next_address(deployer),
            config=config,
            clock=self.clock,
            **kwargs,
        )
