__all__ = [
    # Chains
    "Chain",
    "get_chain",
    # Clients
    "HttpTransport",
    "PublicClient",
    "WalletClient",
    "create_public_client",
    "create_wallet_client",
    "Block",
    "ContractCall",
    "check_freshness",
    "MAX_BLOCK_AGE_SECONDS",
    # Contracts
    "Contract",
    "get_contract",
    "parse_abi",
    "ERC20_ABI",
    "DecodedLog",
    "EventWatcher",
    "wait_forever",
    # Accounts
    "generate_private_key",
    "get_address",
    "load_private_key",
    "private_key_to_account",
    # Units
    "format_units",
    "parse_units",
    "format_ether",
    "parse_ether",
    "format_gwei",
    "parse_gwei",
    # Errors
    "ChainsheetError",
    "RpcError",
    "RpcOutOfSyncError",
    "AbiError",
    "AccountError",
    "ContractCallError",
]

from .accounts import (
    generate_private_key,
    get_address,
    load_private_key,
    private_key_to_account,
)
from .client.abi import ERC20_ABI, DecodedLog, parse_abi
from .client.chains import Chain, get_chain
from .client.contract import Contract, get_contract
from .client.public import (
    MAX_BLOCK_AGE_SECONDS,
    Block,
    ContractCall,
    PublicClient,
    check_freshness,
    create_public_client,
)
from .client.rpc import HttpTransport
from .client.wallet import WalletClient, create_wallet_client
from .client.watch import EventWatcher, wait_forever
from .errors import (
    AbiError,
    AccountError,
    ChainsheetError,
    ContractCallError,
    RpcError,
    RpcOutOfSyncError,
)
from .units import format_ether, format_gwei, format_units, parse_ether, parse_gwei, parse_units
