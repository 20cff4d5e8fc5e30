"""
RarityStaking contract

Stake NFTs, accrue a rarity-scaled reward token, and enter staked tokens in
Nexus-paying raffles.

Entry points (contract ABI name → method):
    initializeRarity → initialize_rarity     (owner only)
    tokenRarity      → token_rarity
    stakeTokens      → stake_tokens
    unstakeTokens    → unstake_tokens
    stakedInfo       → staked_info
    getUserStaked    → get_user_staked
    claimRewards     → claim_rewards
    getRewards       → get_rewards
    raffleRoll       → raffle_roll           (owner only)
    owner            → owner

Every mutating call holds the contract lock and validates its whole batch
before touching state, so a failed call leaves nothing behind.
"""

import asyncio
import os
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from ..chain.clock import Clock, SystemClock
from ..config.loader import StakingConfig
from ..constants import MAX_BATCH_SIZE
from ..crypto.address import is_null_address, normalize_address
from ..exceptions import (
    InsufficientRewardBalanceError,
    NotApprovedError,
    NotContractOwnerError,
    NotStakedError,
    NotStakeOwnerError,
    NotTokenOwnerError,
    AlreadyStakedError,
    RaffleError,
    RarityStakingError,
)
from ..logger import get_logger
from ..tokens.interfaces import FungibleToken, NonFungibleToken
from .ledger import StakeLedger
from .raffle import RaffleSelector, RaffleStrategy, UniformRaffleStrategy, WeightedRaffleStrategy
from .rarity import RarityProofVerifier, RarityTable, verifier_from_root
from .rewards import LinearRarityRewardStrategy, RewardCalculator, RewardStrategy
from .types import (
    OwnershipTransferredEvent,
    RaffleResult,
    RaffleRolledEvent,
    RarityInitializedEvent,
    RewardsClaimedEvent,
    StakeRecord,
    StakedEvent,
    TokenRarity,
    UnstakedEvent,
)

logger = get_logger(__name__)


class RarityStaking:
    """
    Rarity-weighted NFT staking contract.

    Collaborators are injected as capability interfaces:
        nft          : NonFungibleToken held in custody while staked
        reward_token : FungibleToken paid by claim_rewards
        nexus_token  : FungibleToken paid to raffle winners

    The contract address must hold enough of each fungible token to cover
    payouts; nothing is minted.
    """

    def __init__(
        self,
        nft: NonFungibleToken,
        reward_token: FungibleToken,
        nexus_token: FungibleToken,
        owner: str,
        address: str,
        *,
        config: Optional[StakingConfig] = None,
        clock: Optional[Clock] = None,
        reward_strategy: Optional[RewardStrategy] = None,
        raffle_strategy: Optional[RaffleStrategy] = None,
        proof_verifier: Optional[RarityProofVerifier] = None,
        entropy: Callable[[int], bytes] = os.urandom,
    ):
        """
        Args:
            nft: Staked collection
            reward_token: Token paid as staking reward
            nexus_token: Token paid as raffle prize
            owner: Deployer; may initialize rarity, roll raffles, withdraw
            address: This contract's address
            config: Reward / raffle / rarity settings (defaults if omitted)
            clock: Block-time source (wall clock if omitted)
            reward_strategy: Overrides the curve built from ``config.rewards``
            raffle_strategy: Overrides the strategy implied by ``config.raffle``
            proof_verifier: Overrides the verifier implied by ``config.rarity``
            entropy: Random byte source for raffle seeds
        """
        self.config = config or StakingConfig()
        self.config.validate()

        self.nft = nft
        self.reward_token = reward_token
        self.nexus_token = nexus_token
        self.address = normalize_address(address)
        self._owner = normalize_address(owner)
        self.clock = clock or SystemClock()
        self._lock = asyncio.Lock()

        self._rarity = RarityTable(
            verifier=proof_verifier or verifier_from_root(self.config.rarity.merkle_root),
            reinit_policy=self.config.rarity.reinit_policy,
        )
        self._ledger = StakeLedger()
        self._rewards = RewardCalculator(
            self._rarity,
            reward_strategy or LinearRarityRewardStrategy.from_config(self.config.rewards),
        )
        if raffle_strategy is None:
            raffle_strategy = (
                WeightedRaffleStrategy() if self.config.raffle.weighted else UniformRaffleStrategy()
            )
        self._raffle = RaffleSelector(raffle_strategy, entropy=entropy)

        self._events: List[Any] = []
        logger.info(f"RarityStaking deployed at {self.address} (owner {self._owner})")

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def owner(self) -> str:
        return self._owner

    def token_rarity(self, token_id: int) -> int:
        return self._rarity.rarity_of(token_id)

    def rarity_entry(self, token_id: int) -> Optional[TokenRarity]:
        return self._rarity.entry(token_id)

    def staked_info(self, token_id: int) -> StakeRecord:
        return self._ledger.record(token_id)

    def get_user_staked(self, owner: str) -> List[int]:
        return self._ledger.user_staked(normalize_address(owner))

    def get_rewards(self, token_id: int) -> Decimal:
        """Pending reward for *token_id* right now (0 when not staked)."""
        return self._rewards.pending(self._ledger.record(token_id), self.clock.now())

    def raffle_history(self) -> List[RaffleResult]:
        return self._raffle.history

    @property
    def reward_strategy(self) -> RewardStrategy:
        return self._rewards.strategy

    @property
    def total_staked(self) -> int:
        return self._ledger.total_staked

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    # ── Guards ────────────────────────────────────────────────────────

    def _require_owner(self, caller: str) -> None:
        if caller != self._owner:
            raise NotContractOwnerError(caller)

    @staticmethod
    def _check_batch(token_ids: Iterable[int]) -> List[int]:
        ids = list(token_ids)
        if not ids:
            raise RarityStakingError("No token ids supplied")
        if len(ids) > MAX_BATCH_SIZE:
            raise RarityStakingError(f"Batch size {len(ids)} exceeds max {MAX_BATCH_SIZE}")
        for token_id in ids:
            if isinstance(token_id, bool) or not isinstance(token_id, int) or token_id < 0:
                raise RarityStakingError(f"Invalid token id {token_id!r}")
        if len(set(ids)) != len(ids):
            raise RarityStakingError("Duplicate token ids in batch")
        return ids

    def _require_stake_owner(self, caller: str, token_id: int) -> StakeRecord:
        record = self._ledger.record(token_id)
        if not record.is_staked:
            raise NotStakedError(token_id)
        if record.owner != caller:
            raise NotStakeOwnerError(token_id, caller)
        return record

    def _require_balance(self, token: FungibleToken, amount: Decimal) -> None:
        available = token.balance_of(self.address)
        if available < amount:
            logger.warning(
                f"Payout of {amount} {token.symbol} refused: contract holds {available}"
            )
            raise InsufficientRewardBalanceError(token.symbol, amount, available)

    # ── Rarity ────────────────────────────────────────────────────────

    async def initialize_rarity(
        self,
        caller: str,
        entries: Iterable[Union[TokenRarity, Sequence]],
    ) -> List[RarityInitializedEvent]:
        """
        Batch-write ``(tokenId, rarityScore, proof)`` entries (owner only).
        """
        caller = normalize_address(caller)
        async with self._lock:
            self._require_owner(caller)
            written = self._rarity.initialize(entries)

            events = [RarityInitializedEvent(e.token_id, e.rarity_score) for e in written]
            self._events.extend(events)
            return events

    # ── Staking ───────────────────────────────────────────────────────

    async def stake_tokens(self, caller: str, token_ids: Iterable[int]) -> List[StakedEvent]:
        """
        Take custody of *token_ids* from *caller* and start accrual.

        Raises:
            NotTokenOwnerError: Caller does not hold a token
            NotApprovedError: Contract is not approved to move a token
            AlreadyStakedError: A token is already staked
        """
        caller = normalize_address(caller)
        ids = self._check_batch(token_ids)

        async with self._lock:
            for token_id in ids:
                if self._ledger.is_staked(token_id):
                    raise AlreadyStakedError(token_id)
                if not self.nft.exists(token_id) or self.nft.owner_of(token_id) != caller:
                    raise NotTokenOwnerError(token_id, caller)
                if not (
                    self.nft.is_approved_for_all(caller, self.address)
                    or self.nft.get_approved(token_id) == self.address
                ):
                    raise NotApprovedError(token_id, self.address)

            now = self.clock.now()
            events = []
            for token_id in ids:
                await self.nft.transfer_from(self.address, caller, self.address, token_id)
                self._ledger.add(token_id, caller, now)
                events.append(StakedEvent(caller, token_id, now))

            self._events.extend(events)
            logger.info(f"Staked {len(ids)} {self.nft.symbol} for {caller}")
            return events

    async def unstake_tokens(self, caller: str, token_ids: Iterable[int]) -> List[UnstakedEvent]:
        """
        Return *token_ids* to *caller*. Pending rewards are paid first when
        ``claim_on_unstake`` is enabled.

        Raises:
            NotStakedError: A token is not staked
            NotStakeOwnerError: A token was staked by someone else

        An underfunded contract pays what it holds and the rest is forfeited;
        custody is always returned.
        """
        caller = normalize_address(caller)
        ids = self._check_batch(token_ids)

        async with self._lock:
            records = [self._require_stake_owner(caller, token_id) for token_id in ids]
            now = self.clock.now()

            payout = Decimal("0")
            if self.config.rewards.claim_on_unstake:
                pending = sum((self._rewards.pending(r, now) for r in records), Decimal("0"))
                available = self.reward_token.balance_of(self.address)
                payout = min(pending, available)
                if payout < pending:
                    logger.warning(
                        f"Unstake by {caller}: contract holds {available} "
                        f"{self.reward_token.symbol} of {pending} pending, "
                        f"forfeiting {pending - payout}"
                    )
                if payout > 0:
                    await self.reward_token.transfer(self.address, caller, payout)
                    self._events.append(RewardsClaimedEvent(caller, tuple(ids), payout, now))

            events = []
            for token_id in ids:
                self._ledger.remove(token_id)
                await self.nft.transfer_from(self.address, self.address, caller, token_id)
                events.append(UnstakedEvent(caller, token_id, now))

            self._events.extend(events)
            logger.info(
                f"Unstaked {len(ids)} {self.nft.symbol} for {caller}"
                + (f", paid {payout} {self.reward_token.symbol}" if payout > 0 else "")
            )
            return events

    # ── Rewards ───────────────────────────────────────────────────────

    async def claim_rewards(self, caller: str, token_ids: Iterable[int]) -> RewardsClaimedEvent:
        """
        Pay accrued rewards for *token_ids* to *caller* in one transfer.

        Raises:
            NotStakedError / NotStakeOwnerError: Caller is not the staker
            InsufficientRewardBalanceError: Contract cannot cover the total
        """
        caller = normalize_address(caller)
        ids = self._check_batch(token_ids)

        async with self._lock:
            records = [self._require_stake_owner(caller, token_id) for token_id in ids]
            now = self.clock.now()

            total = sum((self._rewards.pending(r, now) for r in records), Decimal("0"))
            if total > 0:
                self._require_balance(self.reward_token, total)
                await self.reward_token.transfer(self.address, caller, total)

            for token_id in ids:
                self._ledger.mark_claimed(token_id, now)

            event = RewardsClaimedEvent(caller, tuple(ids), total, now)
            self._events.append(event)
            logger.info(f"Claimed {total} {self.reward_token.symbol} for {caller} ({len(ids)} tokens)")
            return event

    # ── Raffle ────────────────────────────────────────────────────────

    async def raffle_roll(self, caller: str, token_ids: Iterable[int]) -> RaffleResult:
        """
        Draw one winner among staked *token_ids* and pay the raffle prize in
        Nexus to its staker (owner only). Stake records are not modified.
        """
        caller = normalize_address(caller)
        ids = self._check_batch(token_ids)

        async with self._lock:
            self._require_owner(caller)
            for token_id in ids:
                if not self._ledger.is_staked(token_id):
                    raise NotStakedError(token_id)

            prize = self.config.raffle.prize
            if prize > 0:
                self._require_balance(self.nexus_token, prize)

            now = self.clock.now()
            candidates = [(token_id, self._rarity.rarity_of(token_id)) for token_id in ids]
            winner_id, seed = self._raffle.draw(candidates, now)
            if winner_id not in ids:
                raise RaffleError(f"Raffle strategy picked non-participant #{winner_id}")

            winner = self._ledger.record(winner_id).owner
            if prize > 0:
                await self.nexus_token.transfer(self.address, winner, prize)

            result = self._raffle.record(winner_id, winner, prize, seed, ids, now)
            self._events.append(RaffleRolledEvent(result))
            logger.info(
                f"Raffle round {result.round}: token #{winner_id} won "
                f"{prize} {self.nexus_token.symbol} for {winner} ({len(ids)} entrants)"
            )
            return result

    # ── Ownership & treasury ──────────────────────────────────────────

    async def transfer_ownership(self, caller: str, new_owner: str) -> OwnershipTransferredEvent:
        caller = normalize_address(caller)
        new_owner = normalize_address(new_owner)

        async with self._lock:
            self._require_owner(caller)
            if is_null_address(new_owner):
                raise RarityStakingError("Ownable: new owner is the zero address")

            event = OwnershipTransferredEvent(self._owner, new_owner)
            self._owner = new_owner
            self._events.append(event)
            logger.warning(f"Ownership transferred: {event.previous_owner} → {new_owner}")
            return event

    async def withdraw_tokens(self, caller: str, token: FungibleToken, amount: Decimal) -> None:
        """Sweep *amount* of *token* held by the contract to the owner."""
        caller = normalize_address(caller)

        async with self._lock:
            self._require_owner(caller)
            if amount <= 0:
                raise RarityStakingError("Withdraw amount must be positive")
            self._require_balance(token, amount)
            await token.transfer(self.address, self._owner, amount)
            logger.info(f"Withdrew {amount} {token.symbol} to {self._owner}")

    async def set_reward_strategy(self, caller: str, strategy: RewardStrategy) -> None:
        """
        Replace the reward curve. Applies to all unclaimed accrual from now on.
        """
        caller = normalize_address(caller)

        async with self._lock:
            self._require_owner(caller)
            self._rewards.strategy = strategy
            logger.info(f"Reward strategy set to {strategy!r}")

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "owner": self._owner,
            "nft": self.nft.address,
            "rewardToken": self.reward_token.address,
            "nexusToken": self.nexus_token.address,
            "rarityEntries": len(self._rarity),
            "totalStaked": self._ledger.total_staked,
            "stakers": self._ledger.staker_count,
            "raffleRounds": len(self._raffle.history),
            "rewardBalance": str(self.reward_token.balance_of(self.address)),
            "nexusBalance": str(self.nexus_token.balance_of(self.address)),
        }

    def __repr__(self) -> str:
        return f"<RarityStaking {self.address} staked={self._ledger.total_staked}>"
