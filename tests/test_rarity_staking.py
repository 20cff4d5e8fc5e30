"""
RarityStaking Contract Test Suite

Coverage:
  - Deployment on a LocalChain (NFT, reward token, Nexus, staking)
  - initialize_rarity: owner-only batch writes, proofs, re-initialization
  - stake_tokens / unstake_tokens: custody, authorization, batch atomicity
  - claim_rewards / get_rewards: accrual, single transfer, reset on claim
  - raffle_roll: owner-only, staked-only, Nexus prize, stake records untouched
  - Ownership transfer, treasury withdrawal, reward strategy swap
  - The end-to-end stake → claim → unstake → raffle scenario
"""

from decimal import Decimal

import pytest

from raritystake.chain.local import LocalChain
from raritystake.config.loader import StakingConfig
from raritystake.constants import NULL_ADDRESS, SECONDS_PER_DAY
from raritystake.crypto.merkle import merkle_proof, merkle_root, rarity_leaf
from raritystake.exceptions import (
    AlreadyStakedError,
    InsufficientRewardBalanceError,
    InvalidRarityProofError,
    NotApprovedError,
    NotContractOwnerError,
    NotStakedError,
    NotStakeOwnerError,
    NotTokenOwnerError,
    RarityAlreadyInitializedError,
    RarityStakingError,
)
from raritystake.staking import (
    RarityStaking,
    RewardStrategy,
    StakedEvent,
    UniformRaffleStrategy,
)


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

PROOF = "0x91369e121087da8ce3a93a8fb3130ad45da79788fda60bb017eef42ff61fc49d"
RARITY = 2277489
FUND = Decimal("10000")
GENESIS = 1_700_000_000


def fixed_entropy(n: int) -> bytes:
    return b"\x01" * n


class Deployment:
    """Owner holds 100 NFTs (ids 0-99); contract funded with 10000 of each token."""

    def __init__(self, config=None, **kwargs):
        self.chain = LocalChain(genesis_time=GENESIS)
        self.owner = self.chain.accounts[0]
        self.alice = self.chain.accounts[1]
        self.bob = self.chain.accounts[2]

        self.nft = self.chain.deploy_erc721("Test NFT", "TNFT")
        self.token = self.chain.deploy_erc20("Test Token", "TTK")
        self.nexus = self.chain.deploy_erc20("Nexus", "NEXUS")
        kwargs.setdefault("entropy", fixed_entropy)
        self.staking = self.chain.deploy_staking(
            self.nft, self.token, self.nexus, config=config, **kwargs
        )

    async def setup(self, fund=FUND, mint=100):
        await self.nft.mint(self.owner, mint)
        await self.nft.set_approval_for_all(self.owner, self.staking.address, True)
        if fund > 0:
            for erc20 in (self.token, self.nexus):
                await erc20.mint(self.owner, fund)
                await erc20.transfer(self.owner, self.staking.address, fund)
        return self

    async def init_rarity(self, ids, score=RARITY):
        return await self.staking.initialize_rarity(
            self.owner, [(i, score, PROOF) for i in ids]
        )

    async def give(self, account, token_id):
        """Move an NFT from the owner to *account* and approve the contract."""
        await self.nft.transfer_from(self.owner, self.owner, account, token_id)
        await self.nft.set_approval_for_all(account, self.staking.address, True)


async def deployed(config=None, fund=FUND, **kwargs) -> Deployment:
    return await Deployment(config, **kwargs).setup(fund=fund)


# ══════════════════════════════════════════════════════════════════════
#  DEPLOYMENT
# ══════════════════════════════════════════════════════════════════════


class TestDeployment:

    def test_addresses_distinct_and_deterministic(self):
        a = Deployment()
        b = Deployment()
        addrs = {a.nft.address, a.token.address, a.nexus.address, a.staking.address}
        assert len(addrs) == 4
        assert a.staking.address == b.staking.address

    def test_owner_is_deployer(self):
        d = Deployment()
        assert d.staking.owner == d.owner
        assert isinstance(d.staking, RarityStaking)

    def test_empty_views(self):
        d = Deployment()
        assert d.staking.token_rarity(1) == 0
        assert d.staking.staked_info(1)["owner"] == NULL_ADDRESS
        assert d.staking.get_user_staked(d.owner) == []
        assert d.staking.get_rewards(1) == Decimal("0")
        assert d.staking.total_staked == 0

    def test_invalid_config_rejected(self):
        config = StakingConfig()
        config.rarity.reinit_policy = "maybe"
        with pytest.raises(RarityStakingError):
            Deployment(config)

    @pytest.mark.asyncio
    async def test_to_dict(self):
        d = await deployed()
        info = d.staking.to_dict()
        assert info["address"] == d.staking.address
        assert info["owner"] == d.owner
        assert info["rewardBalance"] == "10000"
        assert info["nexusBalance"] == "10000"
        assert "staked=0" in repr(d.staking)


# ══════════════════════════════════════════════════════════════════════
#  RARITY
# ══════════════════════════════════════════════════════════════════════


class TestInitializeRarity:

    @pytest.mark.asyncio
    async def test_owner_initializes_batch(self):
        d = await deployed()
        events = await d.init_rarity(range(1, 100))
        assert len(events) == 99
        assert all(d.staking.token_rarity(i) == RARITY for i in range(1, 100))
        assert d.staking.token_rarity(0) == 0
        assert d.staking.rarity_entry(1).proof == (PROOF,)

    @pytest.mark.asyncio
    async def test_non_owner_rejected(self):
        d = await deployed()
        with pytest.raises(NotContractOwnerError, match="not the owner"):
            await d.staking.initialize_rarity(d.alice, [(1, RARITY, PROOF)])
        assert d.staking.token_rarity(1) == 0

    @pytest.mark.asyncio
    async def test_reinit_rejected_by_default(self):
        d = await deployed()
        await d.init_rarity([1])
        with pytest.raises(RarityAlreadyInitializedError):
            await d.init_rarity([1], score=5)
        assert d.staking.token_rarity(1) == RARITY

    @pytest.mark.asyncio
    async def test_reinit_overwrite_when_configured(self):
        config = StakingConfig()
        config.rarity.reinit_policy = "overwrite"
        d = await deployed(config)
        await d.init_rarity([1])
        await d.init_rarity([1], score=5)
        assert d.staking.token_rarity(1) == 5

    @pytest.mark.asyncio
    async def test_merkle_root_enforced(self):
        dataset = [(1, 2277489), (2, 500000), (3, 900000)]
        leaves = [rarity_leaf(t, s) for t, s in dataset]
        config = StakingConfig()
        config.rarity.merkle_root = "0x" + merkle_root(leaves).hex()
        d = await deployed(config)

        await d.staking.initialize_rarity(
            d.owner, [(1, 2277489, merkle_proof(leaves, 0))]
        )
        assert d.staking.token_rarity(1) == 2277489

        with pytest.raises(InvalidRarityProofError):
            await d.staking.initialize_rarity(
                d.owner, [(2, 500000, merkle_proof(leaves, 1)), (3, 1, merkle_proof(leaves, 2))]
            )
        assert d.staking.token_rarity(2) == 0


# ══════════════════════════════════════════════════════════════════════
#  STAKING
# ══════════════════════════════════════════════════════════════════════


class TestStake:

    @pytest.mark.asyncio
    async def test_stake_takes_custody(self):
        d = await deployed()
        events = await d.staking.stake_tokens(d.owner, [1, 2, 3])

        assert all(isinstance(e, StakedEvent) for e in events)
        for token_id in (1, 2, 3):
            assert d.nft.owner_of(token_id) == d.staking.address
            info = d.staking.staked_info(token_id)
            assert info["owner"] == d.owner
            assert info.staked_at == GENESIS
            assert info.last_claimed_at == GENESIS
        assert d.staking.get_user_staked(d.owner) == [1, 2, 3]
        assert d.staking.total_staked == 3

    @pytest.mark.asyncio
    async def test_stake_with_single_token_approval(self):
        d = await Deployment().setup()
        await d.nft.transfer_from(d.owner, d.owner, d.alice, 5)
        await d.nft.approve(d.alice, d.staking.address, 5)
        await d.staking.stake_tokens(d.alice, [5])
        assert d.staking.staked_info(5).owner == d.alice

    @pytest.mark.asyncio
    async def test_stake_without_approval(self):
        d = await deployed()
        await d.nft.transfer_from(d.owner, d.owner, d.alice, 5)
        with pytest.raises(NotApprovedError):
            await d.staking.stake_tokens(d.alice, [5])
        assert d.nft.owner_of(5) == d.alice

    @pytest.mark.asyncio
    async def test_stake_someone_elses_token(self):
        d = await deployed()
        with pytest.raises(NotTokenOwnerError):
            await d.staking.stake_tokens(d.alice, [1])

    @pytest.mark.asyncio
    async def test_stake_nonexistent_token(self):
        d = await deployed()
        with pytest.raises(NotTokenOwnerError, match="#1000"):
            await d.staking.stake_tokens(d.owner, [1, 1000])
        assert d.staking.total_staked == 0
        assert d.nft.owner_of(1) == d.owner

    @pytest.mark.asyncio
    async def test_stake_twice_rejected(self):
        d = await deployed()
        await d.staking.stake_tokens(d.owner, [1])
        with pytest.raises(AlreadyStakedError, match="#1"):
            await d.staking.stake_tokens(d.owner, [1])

    @pytest.mark.asyncio
    async def test_failed_batch_stakes_nothing(self):
        d = await deployed()
        await d.give(d.alice, 3)
        with pytest.raises(NotTokenOwnerError):
            await d.staking.stake_tokens(d.owner, [1, 2, 3])

        assert d.staking.total_staked == 0
        assert d.nft.owner_of(1) == d.owner
        assert d.nft.owner_of(2) == d.owner

    @pytest.mark.parametrize("ids,match", [
        ([], "No token ids"),
        ([1, 1], "Duplicate"),
        ([-1], "Invalid token id"),
        (list(range(501)), "exceeds max"),
    ])
    @pytest.mark.asyncio
    async def test_bad_batches(self, ids, match):
        d = await deployed()
        with pytest.raises(RarityStakingError, match=match):
            await d.staking.stake_tokens(d.owner, ids)

    @pytest.mark.asyncio
    async def test_lowercase_caller_accepted(self):
        d = await deployed()
        await d.staking.stake_tokens(d.owner.lower(), [1])
        assert d.staking.get_user_staked(d.owner.lower()) == [1]


class TestUnstake:

    @pytest.mark.asyncio
    async def test_unstake_returns_nft(self):
        d = await deployed()
        await d.staking.stake_tokens(d.owner, [1, 2])
        await d.staking.unstake_tokens(d.owner, [1])

        assert d.nft.owner_of(1) == d.owner
        assert d.staking.staked_info(1).owner == NULL_ADDRESS
        assert d.staking.get_user_staked(d.owner) == [2]

    @pytest.mark.asyncio
    async def test_unstake_pays_pending_rewards(self):
        d = await deployed()
        await d.init_rarity([1])
        await d.staking.stake_tokens(d.owner, [1])
        d.chain.increase_time(SECONDS_PER_DAY)

        pending = d.staking.get_rewards(1)
        await d.staking.unstake_tokens(d.owner, [1])
        assert pending > 0
        assert d.token.balance_of(d.owner) == pending
        assert d.staking.get_rewards(1) == Decimal("0")

    @pytest.mark.asyncio
    async def test_unstake_without_claim_when_disabled(self):
        config = StakingConfig()
        config.rewards.claim_on_unstake = False
        d = await deployed(config)
        await d.staking.stake_tokens(d.owner, [1])
        d.chain.increase_time(SECONDS_PER_DAY)

        await d.staking.unstake_tokens(d.owner, [1])
        assert d.token.balance_of(d.owner) == Decimal("0")
        assert d.nft.owner_of(1) == d.owner

    @pytest.mark.asyncio
    async def test_unstake_not_staked(self):
        d = await deployed()
        with pytest.raises(NotStakedError):
            await d.staking.unstake_tokens(d.owner, [1])

    @pytest.mark.asyncio
    async def test_unstake_by_other_account(self):
        d = await deployed()
        await d.staking.stake_tokens(d.owner, [1])
        with pytest.raises(NotStakeOwnerError):
            await d.staking.unstake_tokens(d.alice, [1])
        assert d.nft.owner_of(1) == d.staking.address

    @pytest.mark.asyncio
    async def test_failed_batch_unstakes_nothing(self):
        d = await deployed()
        await d.staking.stake_tokens(d.owner, [1, 2])
        with pytest.raises(NotStakedError):
            await d.staking.unstake_tokens(d.owner, [1, 2, 3])
        assert d.staking.get_user_staked(d.owner) == [1, 2]

    @pytest.mark.asyncio
    async def test_drained_treasury_still_returns_nft(self, caplog):
        d = await deployed()
        await d.give(d.alice, 5)
        await d.staking.stake_tokens(d.alice, [5])
        d.chain.increase_time(SECONDS_PER_DAY)

        await d.staking.withdraw_tokens(d.owner, d.token, FUND)
        await d.staking.unstake_tokens(d.alice, [5])

        assert d.nft.owner_of(5) == d.alice
        assert d.staking.staked_info(5).owner == NULL_ADDRESS
        assert d.staking.get_user_staked(d.alice) == []
        assert d.token.balance_of(d.alice) == Decimal("0")
        assert "forfeiting" in caplog.text

    @pytest.mark.asyncio
    async def test_short_treasury_pays_what_it_holds(self):
        d = await deployed()
        await d.init_rarity([5])
        await d.give(d.alice, 5)
        await d.staking.stake_tokens(d.alice, [5])
        d.chain.increase_time(SECONDS_PER_DAY)

        await d.staking.withdraw_tokens(d.owner, d.token, FUND - Decimal("1"))
        assert d.staking.get_rewards(5) > Decimal("1")
        await d.staking.unstake_tokens(d.alice, [5])

        assert d.token.balance_of(d.alice) == Decimal("1")
        assert d.token.balance_of(d.staking.address) == Decimal("0")
        assert d.nft.owner_of(5) == d.alice

    @pytest.mark.asyncio
    async def test_restake_resets_accrual(self):
        d = await deployed()
        await d.staking.stake_tokens(d.owner, [1])
        d.chain.increase_time(100)
        await d.staking.unstake_tokens(d.owner, [1])
        d.chain.increase_time(100)
        await d.staking.stake_tokens(d.owner, [1])
        assert d.staking.staked_info(1).staked_at == GENESIS + 200
        assert d.staking.get_rewards(1) == Decimal("0")


# ══════════════════════════════════════════════════════════════════════
#  REWARDS
# ══════════════════════════════════════════════════════════════════════


class TestRewards:

    @pytest.mark.asyncio
    async def test_rewards_grow_with_time(self):
        d = await deployed()
        await d.init_rarity([1])
        await d.staking.stake_tokens(d.owner, [1])
        assert d.staking.get_rewards(1) == Decimal("0")

        d.chain.increase_time(3600)
        hour = d.staking.get_rewards(1)
        d.chain.increase_time(3600)
        assert d.staking.get_rewards(1) > hour > 0

    @pytest.mark.asyncio
    async def test_rarer_token_earns_more(self):
        d = await deployed()
        await d.staking.initialize_rarity(d.owner, [(1, 300000, PROOF), (2, RARITY, PROOF)])
        await d.staking.stake_tokens(d.owner, [1, 2])
        d.chain.increase_time(SECONDS_PER_DAY)
        assert d.staking.get_rewards(2) > d.staking.get_rewards(1)

    @pytest.mark.asyncio
    async def test_claim_pays_in_one_transfer(self):
        d = await deployed()
        await d.init_rarity([1, 2, 3])
        await d.staking.stake_tokens(d.owner, [1, 2, 3])
        d.chain.increase_time(SECONDS_PER_DAY)

        expected = sum(d.staking.get_rewards(i) for i in (1, 2, 3))
        transfers_before = len(d.token.events)
        event = await d.staking.claim_rewards(d.owner, [1, 2, 3])

        assert event.amount == expected
        assert event.token_ids == (1, 2, 3)
        assert d.token.balance_of(d.owner) == expected
        assert d.token.balance_of(d.staking.address) == FUND - expected
        assert len(d.token.events) == transfers_before + 1

    @pytest.mark.asyncio
    async def test_claim_resets_accrual(self):
        d = await deployed()
        await d.init_rarity([1])
        await d.staking.stake_tokens(d.owner, [1])
        d.chain.increase_time(SECONDS_PER_DAY)
        await d.staking.claim_rewards(d.owner, [1])

        assert d.staking.get_rewards(1) == Decimal("0")
        info = d.staking.staked_info(1)
        assert info.last_claimed_at == GENESIS + SECONDS_PER_DAY
        assert info.staked_at == GENESIS

    @pytest.mark.asyncio
    async def test_second_claim_same_block_pays_nothing(self):
        d = await deployed()
        await d.staking.stake_tokens(d.owner, [1])
        d.chain.increase_time(60)
        await d.staking.claim_rewards(d.owner, [1])
        event = await d.staking.claim_rewards(d.owner, [1])
        assert event.amount == Decimal("0")

    @pytest.mark.asyncio
    async def test_claim_by_non_staker(self):
        d = await deployed()
        await d.staking.stake_tokens(d.owner, [1])
        with pytest.raises(NotStakeOwnerError):
            await d.staking.claim_rewards(d.alice, [1])

    @pytest.mark.asyncio
    async def test_claim_unfunded_changes_nothing(self, caplog):
        d = await deployed(fund=Decimal("0"))
        await d.staking.stake_tokens(d.owner, [1])
        d.chain.increase_time(SECONDS_PER_DAY)

        with pytest.raises(InsufficientRewardBalanceError):
            await d.staking.claim_rewards(d.owner, [1])
        assert d.staking.staked_info(1).last_claimed_at == GENESIS
        assert "refused" in caplog.text

    @pytest.mark.asyncio
    async def test_custom_reward_strategy(self):
        class PerSecond(RewardStrategy):
            def compute(self, rarity_score, elapsed_seconds):
                return Decimal(elapsed_seconds)

        d = await deployed(reward_strategy=PerSecond())
        await d.staking.stake_tokens(d.owner, [1])
        d.chain.increase_time(42)
        assert d.staking.get_rewards(1) == Decimal("42")

    @pytest.mark.asyncio
    async def test_set_reward_strategy_owner_only(self):
        class Nothing(RewardStrategy):
            def compute(self, rarity_score, elapsed_seconds):
                return Decimal("0")

        d = await deployed()
        await d.staking.stake_tokens(d.owner, [1])
        d.chain.increase_time(SECONDS_PER_DAY)

        with pytest.raises(NotContractOwnerError):
            await d.staking.set_reward_strategy(d.alice, Nothing())
        await d.staking.set_reward_strategy(d.owner, Nothing())
        assert d.staking.get_rewards(1) == Decimal("0")
        assert isinstance(d.staking.reward_strategy, Nothing)


# ══════════════════════════════════════════════════════════════════════
#  RAFFLE
# ══════════════════════════════════════════════════════════════════════


class TestRaffle:

    @pytest.mark.asyncio
    async def test_winner_among_participants(self):
        d = await deployed()
        await d.init_rarity(range(1, 11))
        await d.staking.stake_tokens(d.owner, list(range(1, 11)))

        result = await d.staking.raffle_roll(d.owner, list(range(2, 11)))
        assert result.winner_token_id in range(2, 11)
        assert result.winner == d.owner
        assert result.prize == Decimal("100")
        assert d.nexus.balance_of(d.owner) == Decimal("100")
        assert d.staking.raffle_history() == [result]

    @pytest.mark.asyncio
    async def test_prize_goes_to_stake_owner(self):
        d = await deployed()
        await d.give(d.alice, 7)
        await d.staking.initialize_rarity(d.owner, [(7, RARITY, PROOF)])
        await d.staking.stake_tokens(d.owner, [1, 2])
        await d.staking.stake_tokens(d.alice, [7])

        # Tokens 1 and 2 have no rarity, so the weighted draw must pick 7
        result = await d.staking.raffle_roll(d.owner, [1, 2, 7])
        assert result.winner_token_id == 7
        assert result.winner == d.alice
        assert d.nexus.balance_of(d.alice) == Decimal("100")

    @pytest.mark.asyncio
    async def test_stake_records_untouched(self):
        d = await deployed()
        await d.init_rarity([1, 2, 3])
        await d.staking.stake_tokens(d.owner, [1, 2, 3])
        d.chain.increase_time(500)
        before = [d.staking.staked_info(i) for i in (1, 2, 3)]
        rewards_before = [d.staking.get_rewards(i) for i in (1, 2, 3)]

        await d.staking.raffle_roll(d.owner, [1, 2, 3])
        assert [d.staking.staked_info(i) for i in (1, 2, 3)] == before
        assert [d.staking.get_rewards(i) for i in (1, 2, 3)] == rewards_before

    @pytest.mark.asyncio
    async def test_non_owner_rejected(self):
        d = await deployed()
        await d.staking.stake_tokens(d.owner, [1])
        with pytest.raises(NotContractOwnerError):
            await d.staking.raffle_roll(d.alice, [1])

    @pytest.mark.asyncio
    async def test_unstaked_participant_rejected(self):
        d = await deployed()
        await d.staking.stake_tokens(d.owner, [1])
        with pytest.raises(NotStakedError, match="#2"):
            await d.staking.raffle_roll(d.owner, [1, 2])
        assert d.staking.raffle_history() == []

    @pytest.mark.asyncio
    async def test_unfunded_prize_rejected(self):
        d = await deployed(fund=Decimal("0"))
        await d.staking.stake_tokens(d.owner, [1])
        with pytest.raises(InsufficientRewardBalanceError, match="NEXUS"):
            await d.staking.raffle_roll(d.owner, [1])

    @pytest.mark.asyncio
    async def test_zero_prize_needs_no_funding(self):
        config = StakingConfig()
        config.raffle.prize = Decimal("0")
        d = await deployed(config, fund=Decimal("0"))
        await d.staking.stake_tokens(d.owner, [1])
        result = await d.staking.raffle_roll(d.owner, [1])
        assert result.winner_token_id == 1
        assert result.prize == Decimal("0")

    @pytest.mark.asyncio
    async def test_rounds_increment(self):
        d = await deployed(raffle_strategy=UniformRaffleStrategy())
        await d.staking.stake_tokens(d.owner, [1, 2])
        first = await d.staking.raffle_roll(d.owner, [1, 2])
        second = await d.staking.raffle_roll(d.owner, [1, 2])
        assert (first.round, second.round) == (1, 2)
        assert d.nexus.balance_of(d.staking.address) == FUND - Decimal("200")


# ══════════════════════════════════════════════════════════════════════
#  OWNERSHIP & TREASURY
# ══════════════════════════════════════════════════════════════════════


class TestOwnership:

    @pytest.mark.asyncio
    async def test_transfer_ownership(self):
        d = await deployed()
        event = await d.staking.transfer_ownership(d.owner, d.bob)
        assert event.previous_owner == d.owner
        assert d.staking.owner == d.bob

        with pytest.raises(NotContractOwnerError):
            await d.staking.initialize_rarity(d.owner, [(1, 1, PROOF)])
        await d.staking.initialize_rarity(d.bob, [(1, 1, PROOF)])

    @pytest.mark.asyncio
    async def test_transfer_to_null_rejected(self):
        d = await deployed()
        with pytest.raises(RarityStakingError, match="zero address"):
            await d.staking.transfer_ownership(d.owner, NULL_ADDRESS)
        with pytest.raises(RarityStakingError, match="zero address"):
            await d.staking.transfer_ownership(d.owner, "0x" + "0" * 40)
        assert d.staking.owner == d.owner

    @pytest.mark.asyncio
    async def test_withdraw_tokens(self):
        d = await deployed()
        await d.staking.withdraw_tokens(d.owner, d.nexus, Decimal("400"))
        assert d.nexus.balance_of(d.owner) == Decimal("400")
        assert d.nexus.balance_of(d.staking.address) == FUND - Decimal("400")

    @pytest.mark.asyncio
    async def test_withdraw_guards(self):
        d = await deployed()
        with pytest.raises(NotContractOwnerError):
            await d.staking.withdraw_tokens(d.alice, d.token, Decimal("1"))
        with pytest.raises(RarityStakingError, match="positive"):
            await d.staking.withdraw_tokens(d.owner, d.token, Decimal("0"))
        with pytest.raises(InsufficientRewardBalanceError):
            await d.staking.withdraw_tokens(d.owner, d.token, FUND + 1)


# ══════════════════════════════════════════════════════════════════════
#  END TO END
# ══════════════════════════════════════════════════════════════════════


class TestScenario:

    @pytest.mark.asyncio
    async def test_stake_claim_unstake_raffle(self):
        d = await deployed()
        ids = list(range(1, 100))

        await d.init_rarity(ids)
        await d.staking.stake_tokens(d.owner, ids)
        assert d.staking.staked_info(1)["owner"] == d.owner
        assert len(d.staking.get_user_staked(d.owner)) == 99

        d.chain.increase_time(SECONDS_PER_DAY)
        assert d.staking.get_rewards(1) > 0

        await d.staking.claim_rewards(d.owner, [1])
        assert d.token.balance_of(d.owner) > 0

        await d.staking.unstake_tokens(d.owner, [1])
        assert d.nft.owner_of(1) == d.owner
        assert d.staking.staked_info(1)["owner"] == NULL_ADDRESS
        assert 1 not in d.staking.get_user_staked(d.owner)

        result = await d.staking.raffle_roll(d.owner, ids[1:])
        assert result.winner_token_id in ids[1:]
        assert d.nexus.balance_of(d.owner) == Decimal("100")
        assert len(d.staking.get_user_staked(d.owner)) == 98

    @pytest.mark.asyncio
    async def test_event_log(self):
        d = await deployed()
        await d.init_rarity([1])
        await d.staking.stake_tokens(d.owner, [1])
        d.chain.increase_time(10)
        await d.staking.claim_rewards(d.owner, [1])
        await d.staking.unstake_tokens(d.owner, [1])

        names = [e.to_dict()["event"] for e in d.staking.events]
        assert names == ["RarityInitialized", "Staked", "RewardsClaimed", "Unstaked"]
