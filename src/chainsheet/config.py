"""
Runtime settings.

Values come from the environment, optionally seeded from ``./.env``.
Command-line options override them (see ``cli.py``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .client.chains import Chain, get_chain

DEFAULT_CHAIN = "celo-alfajores"

# Fixed walkthrough parties on Celo Alfajores
BALANCE_ADDRESS = "0x303C22e6ef01CbA9d03259248863836CB91336D5"
RECIPIENT_ADDRESS = "0x8E3DC120aa9e34cA55b572324AB8Ef73ca211092"
TOKEN_ADDRESS = "0x874069Fa1Eb16D44d622F2e0Ca25eeA172369bC1"  # cUSD
TOKEN_HOLDER_ADDRESS = "0xcEe284F754E854890e311e3280b767F80797180d"

NATIVE_AMOUNT = "0.5"
TOKEN_AMOUNT = "0.5"


@dataclass(frozen=True)
class Settings:
    chain: Chain
    rpc_url: Optional[str] = None
    balance_address: str = BALANCE_ADDRESS
    recipient_address: str = RECIPIENT_ADDRESS
    token_address: str = TOKEN_ADDRESS
    token_holder_address: str = TOKEN_HOLDER_ADDRESS

    @property
    def endpoint(self) -> str:
        """Transport URL: the override if set, else the chain default."""
        return self.rpc_url or self.chain.rpc_url


def load_settings(
    chain: Optional[str] = None,
    rpc_url: Optional[str] = None,
    token_address: Optional[str] = None,
) -> Settings:
    """
    Resolve settings from arguments, then environment, then defaults.

    Environment variables: CHAIN, RPC_URL, TOKEN_ADDRESS.
    """
    load_dotenv(find_dotenv(usecwd=True))
    chain_name = chain or os.environ.get("CHAIN") or DEFAULT_CHAIN
    return Settings(
        chain=get_chain(chain_name),
        rpc_url=rpc_url or os.environ.get("RPC_URL") or None,
        token_address=token_address or os.environ.get("TOKEN_ADDRESS") or TOKEN_ADDRESS,
    )
