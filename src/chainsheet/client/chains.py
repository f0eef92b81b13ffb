"""
Chain definitions.

Each ``Chain`` pins the network identity (chain id), native currency and
default public RPC endpoint that the clients bind to.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

MULTICALL3_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"


@dataclass(frozen=True)
class Chain:
    id: int
    name: str
    network: str
    native_symbol: str
    rpc_url: str
    native_decimals: int = 18
    multicall3_address: Optional[str] = MULTICALL3_ADDRESS
    explorer_url: Optional[str] = None
    testnet: bool = False


celo_alfajores = Chain(
    id=44787,
    name="Alfajores",
    network="celo-alfajores",
    native_symbol="CELO",
    rpc_url="https://alfajores-forno.celo-testnet.org",
    explorer_url="https://celo-alfajores.blockscout.com",
    testnet=True,
)

celo = Chain(
    id=42220,
    name="Celo",
    network="celo",
    native_symbol="CELO",
    rpc_url="https://forno.celo.org",
    explorer_url="https://celoscan.io",
)

base_sepolia = Chain(
    id=84532,
    name="Base Sepolia",
    network="base-sepolia",
    native_symbol="ETH",
    rpc_url="https://sepolia.base.org",
    explorer_url="https://sepolia.basescan.org",
    testnet=True,
)

mainnet = Chain(
    id=1,
    name="Ethereum",
    network="mainnet",
    native_symbol="ETH",
    rpc_url="https://eth.merkle.io",
    explorer_url="https://etherscan.io",
)

CHAINS: dict[str, Chain] = {
    chain.network: chain for chain in (celo_alfajores, celo, base_sepolia, mainnet)
}


def get_chain(name_or_id: Union[str, int]) -> Chain:
    """Look up a chain by network name or numeric chain id."""
    key = str(name_or_id).strip().lower()
    if key in CHAINS:
        return CHAINS[key]
    for chain in CHAINS.values():
        if key == str(chain.id):
            return chain
    raise KeyError(
        f"Unknown chain {name_or_id!r}. Known chains: {', '.join(sorted(CHAINS))}"
    )
