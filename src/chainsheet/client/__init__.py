"""
On-chain interaction layer.

Provides the JSON-RPC transport, ABI handling, public (read) and wallet
(write) clients, contract sessions and event watchers.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""

from .abi import ERC20_ABI, DecodedLog, parse_abi
from .chains import Chain, get_chain
from .contract import Contract, get_contract
from .public import MAX_BLOCK_AGE_SECONDS, Block, ContractCall, PublicClient, check_freshness, create_public_client
from .rpc import HttpTransport
from .wallet import WalletClient, create_wallet_client
from .watch import EventWatcher, wait_forever

__all__ = [
    "Block",
    "Chain",
    "Contract",
    "ContractCall",
    "DecodedLog",
    "ERC20_ABI",
    "EventWatcher",
    "HttpTransport",
    "MAX_BLOCK_AGE_SECONDS",
    "PublicClient",
    "WalletClient",
    "check_freshness",
    "create_public_client",
    "create_wallet_client",
    "get_chain",
    "get_contract",
    "parse_abi",
    "wait_forever",
]
