"""
Native currency - block freshness, balances and value transfers.
"""

from __future__ import annotations

import datetime

import click

from ..accounts import get_account
from ..client.public import check_freshness
from ..config import Settings
from ..units import format_units, parse_units
from .common import (
    build_public_client,
    build_wallet_client,
    chain_options,
    connect,
    reports_errors,
)


@click.command()
@chain_options
@reports_errors
def block(settings: Settings) -> None:
    """Show the latest block and check the RPC is in sync."""
    with connect(settings) as transport:
        latest = build_public_client(settings, transport).get_block()
    ts = datetime.datetime.fromtimestamp(latest.timestamp, tz=datetime.timezone.utc)

    click.echo(f"  Chain:     {settings.chain.name} ({settings.chain.id})")
    click.echo(f"  RPC:       {settings.endpoint}")
    click.echo(f"  Block:     {latest.number}")
    click.echo(f"  Timestamp: {ts.isoformat()}")

    skew = check_freshness(latest)
    click.secho(f"  In sync ({skew}s behind)", fg="green")


@click.command()
@chain_options
@reports_errors
@click.argument("address")
def balance(settings: Settings, address: str) -> None:
    """Show the native balance of ADDRESS."""
    with connect(settings) as transport:
        wei = build_public_client(settings, transport).get_balance(address)
    chain = settings.chain
    click.echo(f"balance: {format_units(wei, chain.native_decimals)} {chain.native_symbol}")


@click.command()
@chain_options
@reports_errors
@click.option("--to", "recipient", required=True, help="Recipient address (0x...)")
@click.option("--amount", required=True, help="Amount in native units (e.g. 0.5)")
def send(settings: Settings, recipient: str, amount: str) -> None:
    """Send native currency from the PRIVATE_KEY account.

    Returns as soon as the node accepts the transaction.
    """
    chain = settings.chain
    try:
        value = parse_units(amount, chain.native_decimals)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--amount")

    account = get_account()
    with connect(settings) as transport:
        wallet = build_wallet_client(settings, transport)
        tx_hash = wallet.send_transaction(to=recipient, value=value, account=account)
    click.echo(f"send {chain.native_symbol.lower()} tx: {tx_hash}")
