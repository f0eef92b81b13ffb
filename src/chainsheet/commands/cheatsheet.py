"""
Cheatsheet - the full client walkthrough.

Flow:
1. Create a public (read, multicall batched) and a wallet (write) client
2. Read the latest block and abort if the RPC is out of sync
3. Read a native balance
4. Derive the account from PRIVATE_KEY and send 0.5 native units
5. Bind the ERC-20 ABI to the token address
6. Single read (name), then a batch of symbol / decimals / balanceOf
7. Transfer 0.5 tokens
8. Watch Transfer events, then block forever
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import click

from ..accounts import load_private_key, private_key_to_account
from ..client.abi import ERC20_SIGNATURES, parse_abi
from ..client.contract import get_contract
from ..client.public import PublicClient, check_freshness
from ..client.wallet import WalletClient
from ..client.watch import EventWatcher, wait_forever
from ..config import NATIVE_AMOUNT, TOKEN_AMOUNT, Settings
from ..units import format_ether, format_units, parse_ether, parse_units
from .common import build_clients, chain_options, connect, reports_errors
from .token import print_transfer_logs

logger = logging.getLogger(__name__)


def run_walkthrough(
    settings: Settings,
    public: PublicClient,
    wallet: WalletClient,
    watch: bool = True,
    now: Optional[int] = None,
    echo: Callable[[str], None] = click.echo,
) -> Optional[EventWatcher]:
    """
    Run every step of the walkthrough in order.

    Args:
        now: Wall-clock override for the freshness check (unix seconds)
        watch: Start the Transfer watcher at the end

    Returns:
        The running watcher, or ``None`` when ``watch`` is off
    """
    # basic: read block, check rpc out of sync
    block = public.get_block()
    skew = check_freshness(block, now=now)
    logger.debug("block %d is %ds old", block.number, skew)

    # basic: read native balance
    address = settings.balance_address
    balance = public.get_balance(address)
    echo(f"balance: {format_ether(balance)}")

    # basic: send native currency
    account = private_key_to_account(load_private_key())
    tx_hash = wallet.send_transaction(
        account=account,
        to=settings.recipient_address,
        value=parse_ether(NATIVE_AMOUNT),
    )
    echo(f"send ether tx: {tx_hash}")

    # contract: abi and instance
    abi = parse_abi(ERC20_SIGNATURES)
    contract = get_contract(settings.token_address, abi, public=public, wallet=wallet)

    # contract: single query
    name = contract.read.name()
    echo(f"token name: {name}")

    # contract: batch queries
    holder = settings.token_holder_address
    symbol, decimals, token_balance = contract.read_many(
        contract.read.symbol.call(),
        contract.read.decimals.call(),
        contract.read.balanceOf.call(holder),
    )
    # Labelled with the holder queried, not the native-balance address.
    echo(f"{symbol} balance of {holder}: {format_units(token_balance, decimals)}")

    # contract: write
    tx = contract.write.transfer(
        settings.recipient_address, parse_units(TOKEN_AMOUNT, decimals), account=account
    )
    echo(f"transfer erc20 tx: {tx}")

    if not watch:
        return None

    # contract: watch events
    return contract.watch_event.Transfer(
        on_logs=lambda logs: print_transfer_logs(logs, symbol, decimals, echo)
    )


@click.command()
@chain_options
@reports_errors
@click.option(
    "--watch/--no-watch",
    default=True,
    help="Watch Transfer events and block forever after the walkthrough",
)
def run(settings: Settings, watch: bool) -> None:
    """
    Run the full walkthrough.

    Reads the chain, sends 0.5 native units and 0.5 tokens from the
    PRIVATE_KEY account, then watches token transfers until interrupted.
    """
    with connect(settings) as transport:
        public, wallet = build_clients(settings, transport)
        watcher = run_walkthrough(settings, public, wallet, watch=watch)
        if watcher is not None:
            click.echo("Watching Transfer events (Ctrl-C to exit)...")
            wait_forever()
