"""
chainsheet CLI

Command-line walkthrough of an EVM client: read chain state, send native
currency, and read / write / watch an ERC-20 token.

Commands:
  run       - Full walkthrough (ends by watching Transfer events forever)
  block     - Latest block and RPC freshness check
  balance   - Native balance of an address
  send      - Send native currency
  token     - ERC-20 info / balance / transfer / watch
  whoami    - Show the PRIVATE_KEY address
  chains    - List known chains
"""

from __future__ import annotations

import logging
import sys

import click

from .accounts import get_address
from .client.chains import CHAINS
from .errors import AccountError

# ============ Constants ============

VERSION = "0.3.0"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="chainsheet")
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic and transactions")
def cli(verbose: bool) -> None:
    """chainsheet - EVM client cheat sheet."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )
    logging.getLogger("httpx").setLevel(logging.INFO if verbose else logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# ============ Top-level Commands ============

from .commands.cheatsheet import run
from .commands.native import balance, block, send
from .commands.token import token

cli.add_command(run)
cli.add_command(block)
cli.add_command(balance)
cli.add_command(send)
cli.add_command(token)


# ============ Identity ============


@cli.command()
def whoami() -> None:
    """Show the address derived from PRIVATE_KEY."""
    try:
        click.echo(f"Address: {get_address()}")
    except AccountError as exc:
        click.secho(f"ERROR: {exc}", fg="red", err=True)
        sys.exit(exc.exit_code)


# ============ Chains ============


@cli.command()
def chains() -> None:
    """List known chains."""
    for name, chain in sorted(CHAINS.items()):
        tag = click.style(" (testnet)", dim=True) if chain.testnet else ""
        click.echo(
            click.style(f"  {name:<16}", fg="bright_white", bold=True)
            + click.style(f"{chain.id:<8}", fg="cyan")
            + chain.rpc_url
            + tag
        )


# ============ Entry Points ============


def main() -> None:
    """chainsheet CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
