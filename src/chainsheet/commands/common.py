"""
Shared CLI plumbing: chain/RPC options, client construction and the
top-level error report.
"""

from __future__ import annotations

import contextlib
import functools
import logging
import sys
from typing import Any, Callable, Iterator

import click
import httpx

from ..client.public import PublicClient, create_public_client
from ..client.rpc import HttpTransport
from ..client.wallet import WalletClient, create_wallet_client
from ..config import Settings, load_settings
from ..errors import ChainsheetError

logger = logging.getLogger(__name__)


def chain_options(func: Callable) -> Callable:
    """Add ``--chain`` and ``--rpc-url`` and pass resolved ``settings``."""

    @click.option(
        "--chain",
        envvar="CHAIN",
        default=None,
        help="Chain name or id (default: celo-alfajores)",
    )
    @click.option(
        "--rpc-url",
        envvar="RPC_URL",
        default=None,
        help="RPC URL override (default: the chain's public RPC)",
    )
    @functools.wraps(func)
    def wrapper(*args: Any, chain: str, rpc_url: str, **kwargs: Any) -> Any:
        try:
            settings = load_settings(chain=chain, rpc_url=rpc_url)
        except KeyError as exc:
            raise click.BadParameter(str(exc.args[0]), param_hint="--chain")
        return func(*args, settings=settings, **kwargs)

    return wrapper


def reports_errors(func: Callable) -> Callable:
    """Print library and HTTP failures to stderr and exit with their code."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ChainsheetError as exc:
            logger.debug("command failed", exc_info=True)
            click.secho(f"ERROR: {exc}", fg="red", err=True)
            sys.exit(exc.exit_code)
        except httpx.HTTPError as exc:
            logger.debug("command failed", exc_info=True)
            click.secho(f"ERROR: {exc}", fg="red", err=True)
            sys.exit(1)

    return wrapper


def make_transport(settings: Settings) -> HttpTransport:
    return HttpTransport(settings.endpoint)


@contextlib.contextmanager
def connect(settings: Settings) -> Iterator[HttpTransport]:
    """One transport to the configured endpoint, closed on exit."""
    transport = make_transport(settings)
    try:
        yield transport
    finally:
        transport.close()


def build_public_client(settings: Settings, transport: HttpTransport) -> PublicClient:
    """Read client with multicall batching enabled."""
    return create_public_client(settings.chain, batch_multicall=True, transport=transport)


def build_wallet_client(settings: Settings, transport: HttpTransport) -> WalletClient:
    return create_wallet_client(settings.chain, transport=transport)


def build_clients(
    settings: Settings, transport: HttpTransport
) -> tuple[PublicClient, WalletClient]:
    """Read and wallet clients sharing one transport."""
    return build_public_client(settings, transport), build_wallet_client(settings, transport)
