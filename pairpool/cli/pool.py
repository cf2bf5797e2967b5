#!/usr/bin/env python3
"""
PairPool CLI

Diagnostic command-line interface for the two-asset pool.

Usage:
    pairpool quote <liquidity_in> <liquidity_out> <amount_in> [--input-slot N]
    pairpool simulate [--liquidity AMOUNT AMOUNT] [--swap AMOUNT] [--input-slot N] [--json]
    pairpool show-config [--validate]
"""

import asyncio
import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click

from pairpool.config import PairPoolConfig, load_config
from pairpool.exceptions import CallAborted, PoolError
from pairpool.logger import configure_logging
from pairpool.pool import PoolContract, Slot, invariant, swap_amount_out
from pairpool.tokens import AssetRegistry, FungibleToken, TransferError

SIMULATION_OWNER = "owner.pairpool"
SIMULATION_TRADER = "trader.pairpool"
SIMULATION_TOKENS = ("usdt.tokens", "usdc.tokens")
SWAP_MESSAGE = json.dumps({"type": "swap"})


@click.group()
@click.version_option(version="0.1.0", prog_name="pairpool")
@click.option("--config", "-c", "config_path", type=click.Path(), help="Path to pairpool.toml")
@click.option("--log-level", "-l", default=None, help="Override the configured log level")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], log_level: Optional[str]):
    """PairPool Command Line Interface

    Quote and simulate swaps on a two-asset constant-product pool.
    """
    config = load_config(config_path)
    if log_level:
        config.logging.level = log_level.upper()
    configure_logging(
        log_level=config.logging.level,
        log_file=Path(config.logging.file),
        file_output=config.logging.file_output,
    )
    ctx.obj = config


@cli.command("quote")
@click.argument("liquidity_in", type=int)
@click.argument("liquidity_out", type=int)
@click.argument("amount_in", type=int)
@click.option("--input-slot", type=click.IntRange(1, 2), default=1, show_default=True, help="Slot of the input asset")
def quote_cmd(liquidity_in: int, liquidity_out: int, amount_in: int, input_slot: int):
    """Quote the output of a swap against the given reserves.

    Examples:

        pairpool quote 50000000000 50000000000 1000000000

        pairpool quote 1000 1000 10 --input-slot 2
    """
    try:
        amount_out = swap_amount_out(liquidity_in, liquidity_out, amount_in, Slot(input_slot))
        product_before = invariant(liquidity_in, liquidity_out)
        product_after = invariant(liquidity_in + amount_in, liquidity_out - amount_out)
    except PoolError as e:
        raise click.ClickException(f"{e.kind.value}: {e}")

    click.echo(f"Amount out:        {amount_out}")
    click.echo(f"Reserves after:    {liquidity_in + amount_in} / {liquidity_out - amount_out}")
    click.echo(f"Product before:    {product_before}")
    click.echo(f"Product after:     {product_after}")


@cli.command("simulate")
@click.option(
    "--liquidity",
    nargs=2,
    type=int,
    default=(50_000_000_000, 50_000_000_000),
    show_default=True,
    help="Liquidity committed to each slot",
)
@click.option("--swap", "swap_amount", type=int, default=1_000_000_000, show_default=True, help="Amount the trader swaps")
@click.option("--input-slot", type=click.IntRange(1, 2), default=1, show_default=True, help="Slot of the input asset")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_obj
def simulate_cmd(config: PairPoolConfig, liquidity: Tuple[int, int], swap_amount: int, input_slot: int, as_json: bool):
    """Run a full pool scenario on in-memory tokens.

    Provisions both wallets, deposits and commits the owner's liquidity,
    then swaps the trader's tokens through transfer-and-notify.
    """
    try:
        result = asyncio.run(run_simulation(config, liquidity, swap_amount, input_slot))
    except (PoolError, CallAborted, TransferError, ValueError) as e:
        raise click.ClickException(f"Simulation failed: {e}")

    if as_json:
        click.echo(json.dumps(result, indent=2))
        return

    pool = result["pool"]
    click.echo()
    click.echo(click.style("═══════════════════════════════════════", fg="cyan"))
    click.echo(click.style("          PairPool Simulation           ", fg="cyan", bold=True))
    click.echo(click.style("═══════════════════════════════════════", fg="cyan"))
    click.echo()
    click.echo(f"Assets:     {pool['asset_ids'][0]} / {pool['asset_ids'][1]}")
    click.echo(f"Liquidity:  {pool['liquidity_amounts'][0]} / {pool['liquidity_amounts'][1]}")
    click.echo(f"Ratio:      {pool['ratio']}")
    click.echo()
    click.echo(f"Swapped in:  {result['swap']['amount_in']} {result['swap']['asset_in']}")
    click.echo(f"Received:    {result['swap']['amount_out']} {result['swap']['asset_out']}")
    if result["swap"]["refund"]:
        click.echo(click.style(f"Refunded:    {result['swap']['refund']}", fg="yellow"))


async def run_simulation(
    config: PairPoolConfig,
    liquidity: Tuple[int, int],
    swap_amount: int,
    input_slot: int = 1,
) -> Dict[str, Any]:
    """
    Drive a pool end to end on reference tokens and report the outcome.

    The pool trades ``[pool] tokens`` from *config*, or USDT/USDC when unset.
    """
    config = replace(
        config,
        pool=replace(
            config.pool,
            owner_id=config.pool.owner_id or SIMULATION_OWNER,
            tokens=list(config.pool.token_pair or SIMULATION_TOKENS),
        ),
    )
    owner = config.pool.owner_id
    pool_id = config.pool.account_id

    assets = AssetRegistry()
    tokens = [
        assets.register(FungibleToken(asset_id, asset_id.split(".")[0].upper(), decimals=6))
        for asset_id in config.pool.tokens
    ]

    contract = await PoolContract.from_config(config, assets)

    for token, amount in zip(tokens, liquidity):
        token.attach_receiver(pool_id, contract)
        await token.register_receiver(owner)
        token.mint(owner, amount)
        await token.transfer_and_notify(owner, pool_id, amount, "")
    contract.add_liquidity(owner, list(liquidity))

    token_in, token_out = tokens[input_slot - 1], tokens[2 - input_slot]
    await token_in.register_receiver(SIMULATION_TRADER)
    await token_out.register_receiver(SIMULATION_TRADER)
    token_in.mint(SIMULATION_TRADER, swap_amount)

    kept = await token_in.transfer_and_notify(SIMULATION_TRADER, pool_id, swap_amount, SWAP_MESSAGE)

    return {
        "pool": contract.get_pool().to_dict(),
        "swap": {
            "asset_in": token_in.asset_id,
            "asset_out": token_out.asset_id,
            "amount_in": swap_amount,
            "amount_out": token_out.balance_of(SIMULATION_TRADER),
            "refund": swap_amount - kept,
        },
        "state_root": contract.state_root(),
    }


@cli.command("show-config")
@click.option("--validate", "do_validate", is_flag=True, help="Validate the configuration")
@click.pass_obj
def show_config_cmd(config: PairPoolConfig, do_validate: bool):
    """Print the effective configuration (TOML + environment)."""
    if do_validate:
        try:
            config.validate()
        except ValueError as e:
            raise click.ClickException(f"Invalid configuration: {e}")
        click.echo(click.style("✓ Configuration is valid", fg="green"), err=True)
    click.echo(json.dumps(config.to_dict(), indent=2))


if __name__ == "__main__":
    cli()
