"""
Token - ERC-20 operations on a single token contract.

The token address comes from --token (or TOKEN_ADDRESS, default cUSD on
Alfajores).

Commands:
- info:     name, symbol and decimals
- balance:  formatted balance of a holder
- transfer: send tokens from the PRIVATE_KEY account
- watch:    print Transfer events until interrupted
"""

from __future__ import annotations

from typing import Callable, Optional

import click

from ..accounts import get_account
from ..client.abi import ERC20_ABI, DecodedLog
from ..client.contract import Contract, get_contract
from ..client.rpc import HttpTransport
from ..client.watch import wait_forever
from ..config import TOKEN_ADDRESS, Settings
from ..units import format_units, parse_units
from .common import (
    build_clients,
    build_public_client,
    chain_options,
    connect,
    reports_errors,
)


def print_transfer_logs(
    logs: list[DecodedLog],
    symbol: str,
    decimals: int,
    echo: Callable[[str], None] = click.echo,
) -> None:
    for log in logs:
        args = log.args
        echo(
            f"Transfer {format_units(args['value'], decimals)} {symbol} "
            f"from {args['from']} to {args['to']} "
            f"(block {log.block_number}, tx {log.transaction_hash})"
        )


def _token_contract(
    settings: Settings,
    token_address: str,
    transport: HttpTransport,
    with_wallet: bool = False,
) -> Contract:
    if with_wallet:
        public, wallet = build_clients(settings, transport)
        return get_contract(token_address, ERC20_ABI, public=public, wallet=wallet)
    return get_contract(
        token_address, ERC20_ABI, public=build_public_client(settings, transport)
    )


def _token_meta(contract: Contract) -> tuple[str, int]:
    symbol, decimals = contract.read_many(
        contract.read.symbol.call(), contract.read.decimals.call()
    )
    return symbol, decimals


def token_option(func: Callable) -> Callable:
    return click.option(
        "--token",
        "token_address",
        envvar="TOKEN_ADDRESS",
        default=TOKEN_ADDRESS,
        show_default=True,
        help="ERC-20 token contract address",
    )(func)


@click.group()
def token() -> None:
    """ERC-20 token operations.

    \b
    Examples:
      chainsheet token info
      chainsheet token balance 0xcEe2...180d
      chainsheet token transfer --to 0x8E3D...1092 --amount 0.5
      chainsheet token watch
    """


@token.command()
@chain_options
@reports_errors
@token_option
def info(settings: Settings, token_address: str) -> None:
    """Show token name, symbol and decimals."""
    with connect(settings) as transport:
        contract = _token_contract(settings, token_address, transport)
        name, symbol, decimals = contract.read_many(
            contract.read.name.call(),
            contract.read.symbol.call(),
            contract.read.decimals.call(),
        )
    click.echo(click.style("  Token:    ", dim=True) + contract.address)
    click.echo(click.style("  Name:     ", dim=True) + str(name))
    click.echo(click.style("  Symbol:   ", dim=True) + str(symbol))
    click.echo(click.style("  Decimals: ", dim=True) + str(decimals))


@token.command()
@chain_options
@reports_errors
@token_option
@click.argument("holder")
def balance(settings: Settings, token_address: str, holder: str) -> None:
    """Show the token balance of HOLDER."""
    with connect(settings) as transport:
        contract = _token_contract(settings, token_address, transport)
        symbol, decimals, raw = contract.read_many(
            contract.read.symbol.call(),
            contract.read.decimals.call(),
            contract.read.balanceOf.call(holder),
        )
    click.echo(f"{symbol} balance of {holder}: {format_units(raw, decimals)}")


@token.command()
@chain_options
@reports_errors
@token_option
@click.option("--to", "recipient", required=True, help="Recipient address (0x...)")
@click.option("--amount", required=True, help="Amount in token units (e.g. 0.5)")
def transfer(
    settings: Settings,
    token_address: str,
    recipient: str,
    amount: str,
) -> None:
    """Transfer tokens from the PRIVATE_KEY account.

    Returns as soon as the node accepts the transaction.
    """
    account = get_account()
    with connect(settings) as transport:
        contract = _token_contract(settings, token_address, transport, with_wallet=True)
        symbol, decimals = _token_meta(contract)

        try:
            raw_amount = parse_units(amount, decimals)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--amount")
        if raw_amount <= 0:
            raise click.BadParameter("Amount must be positive", param_hint="--amount")

        click.echo(click.style("  From:   ", dim=True) + account.address)
        click.echo(click.style("  To:     ", dim=True) + recipient)
        click.echo(
            click.style("  Amount: ", dim=True)
            + f"{amount} {symbol} ({raw_amount} raw, {decimals} decimals)"
        )

        tx = contract.write.transfer(recipient, raw_amount, account=account)
    click.echo(f"transfer erc20 tx: {tx}")


@token.command()
@chain_options
@reports_errors
@token_option
@click.option("--from", "sender", default=None, help="Only transfers from this address")
@click.option("--to", "recipient", default=None, help="Only transfers to this address")
@click.option("--interval", default=4.0, type=float, show_default=True, help="Poll interval in seconds")
def watch(
    settings: Settings,
    token_address: str,
    sender: Optional[str],
    recipient: Optional[str],
    interval: float,
) -> None:
    """Print Transfer events until interrupted."""
    args = {}
    if sender:
        args["from"] = sender
    if recipient:
        args["to"] = recipient

    with connect(settings) as transport:
        contract = _token_contract(settings, token_address, transport)
        symbol, decimals = _token_meta(contract)
        contract.watch_event.Transfer(
            args=args,
            on_logs=lambda logs: print_transfer_logs(logs, symbol, decimals),
            poll_interval=interval,
        )
        click.echo(f"Watching {symbol} Transfer events on {contract.address} (Ctrl-C to exit)...")
        wait_forever()
