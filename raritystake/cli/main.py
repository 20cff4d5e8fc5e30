#!/usr/bin/env python3
"""
RarityStaking CLI

Usage:
    raritystake simulate [--tokens N] [--days D] [--rarity SCORE] [--fund AMOUNT] [--config FILE]
    raritystake show-config [--config FILE]
"""

import asyncio
import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

import click

from .. import __version__
from ..chain.local import LocalChain
from ..config.loader import StakingConfig, load_config
from ..constants import SECONDS_PER_DAY
from ..exceptions import ConfigurationError, RarityStakingError
from ..tokens.erc20 import ERC20Error
from ..tokens.erc721 import ERC721Error

SAMPLE_PROOF = "0x91369e121087da8ce3a93a8fb3130ad45da79788fda60bb017eef42ff61fc49d"


class TokenAmount(click.ParamType):
    """Positive decimal token amount."""

    name = "amount"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            self.fail(f"{value!r} is not a number", param, ctx)
        if not amount.is_finite() or amount <= 0:
            self.fail(f"{value!r} must be a positive amount", param, ctx)
        return amount


def _load(config_path: Optional[str]) -> StakingConfig:
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        raise click.ClickException(f"Invalid configuration: {e}")
    logging.getLogger().setLevel(config.log.level)
    return config


async def run_simulation(
    config: StakingConfig,
    tokens: int,
    days: int,
    rarity: int,
    fund: Decimal,
) -> dict:
    """
    Deploy NFT, reward token, Nexus and the staking contract on a local
    chain, then stake, wait, claim, unstake and raffle.
    """
    chain = LocalChain()
    owner = chain.deployer

    nft = chain.deploy_erc721("Test NFT", "TNFT")
    token = chain.deploy_erc20("Test Token", "TTK")
    nexus = chain.deploy_erc20("Nexus", "NEXUS")
    staking = chain.deploy_staking(nft, token, nexus, config=config)

    await nft.mint(owner, tokens + 1)
    await nft.set_approval_for_all(owner, staking.address, True)
    await token.mint(owner, fund)
    await nexus.mint(owner, fund)
    await token.transfer(owner, staking.address, fund)
    await nexus.transfer(owner, staking.address, fund)

    ids = list(range(1, tokens + 1))
    await staking.initialize_rarity(owner, [(i, rarity, SAMPLE_PROOF) for i in ids])
    await staking.stake_tokens(owner, ids)

    chain.increase_time(days * SECONDS_PER_DAY)
    pending = staking.get_rewards(ids[0])
    claim = await staking.claim_rewards(owner, [ids[0]])
    await staking.unstake_tokens(owner, [ids[0]])

    raffle = None
    if len(ids) > 1:
        raffle = await staking.raffle_roll(owner, ids[1:])

    return {
        "owner": owner,
        "contract": staking.to_dict(),
        "pendingBeforeClaim": str(pending),
        "claimed": str(claim.amount),
        "ownerRewardBalance": str(token.balance_of(owner)),
        "ownerNexusBalance": str(nexus.balance_of(owner)),
        "token1Owner": nft.owner_of(ids[0]),
        "stillStaked": len(staking.get_user_staked(owner)),
        "raffle": raffle.to_dict() if raffle else None,
    }


@click.group()
@click.version_option(version=__version__, prog_name="raritystake")
def cli():
    """Rarity-weighted NFT staking."""
    pass


@cli.command()
@click.option("--tokens", default=99, show_default=True, type=click.IntRange(1, 500),
              help="Number of NFTs to stake")
@click.option("--days", default=1, show_default=True, type=click.IntRange(0),
              help="Days to advance before claiming")
@click.option("--rarity", default=2277489, show_default=True, type=click.IntRange(0),
              help="Rarity score assigned to every token")
@click.option("--fund", default="10000", show_default=True, type=TokenAmount(),
              help="Reward and Nexus tokens funded to the contract")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Path to config.toml")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
def simulate(tokens, days, rarity, fund, config_path, as_json):
    """Run the stake → claim → unstake → raffle scenario on a local chain."""
    config = _load(config_path)
    try:
        report = asyncio.run(run_simulation(config, tokens, days, rarity, fund))
    except (RarityStakingError, ERC20Error, ERC721Error) as e:
        raise click.ClickException(f"Simulation failed: {e}")

    if as_json:
        click.echo(json.dumps(report, indent=2))
        return

    click.echo(click.style("═══════════════════════════════════════", fg="cyan"))
    click.echo(click.style("  RarityStaking simulation", fg="cyan", bold=True))
    click.echo(click.style("═══════════════════════════════════════", fg="cyan"))
    click.echo(f"Contract:            {report['contract']['address']}")
    click.echo(f"Owner:               {report['owner']}")
    click.echo(f"Pending before claim {report['pendingBeforeClaim']}")
    click.echo(f"Claimed:             {report['claimed']}")
    click.echo(f"Owner reward bal.:   {report['ownerRewardBalance']}")
    click.echo(f"Owner Nexus bal.:    {report['ownerNexusBalance']}")
    click.echo(f"Token #1 owner:      {report['token1Owner']}")
    click.echo(f"Still staked:        {report['stillStaked']}")
    if report["raffle"]:
        raffle = report["raffle"]
        click.echo(
            f"Raffle round {raffle['round']}: token #{raffle['winnerTokenId']} "
            f"won {raffle['prize']}"
        )
    click.echo(click.style("✓ Simulation complete", fg="green"))


@cli.command("show-config")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Path to config.toml")
def show_config(config_path):
    """Print the resolved configuration (file + environment)."""
    click.echo(json.dumps(_load(config_path).to_dict(), indent=2))


if __name__ == "__main__":
    cli()
