"""
Wallet client - build, sign and submit transactions.

Signing is local (eth-account); nonce, gas and fees come from the node.
Submission returns the transaction hash without waiting for inclusion.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from eth_account.signers.local import LocalAccount

from ..errors import AccountError
from .abi import encode_function_call, to_checksum_address
from .chains import Chain
from .public import PublicClient
from .rpc import HttpTransport

logger = logging.getLogger(__name__)

# maxFeePerGas = baseFee * 1.2 + priority fee
BASE_FEE_MULTIPLIER_NUM = 12
BASE_FEE_MULTIPLIER_DEN = 10


class WalletClient:
    """
    Signing client bound to one chain and endpoint.

    Args:
        chain: Chain the endpoint serves
        transport: JSON-RPC transport
        account: Default signer for ``send_transaction`` / ``write_contract``
    """

    def __init__(
        self,
        chain: Chain,
        transport: HttpTransport,
        account: Optional[LocalAccount] = None,
    ) -> None:
        self.chain = chain
        self.transport = transport
        self.account = account
        # Node reads needed to fill in transactions; never batched.
        self._reader = PublicClient(chain, transport, batch_multicall=False)

    def _resolve_account(self, account: Optional[LocalAccount]) -> LocalAccount:
        account = account or self.account
        if account is None:
            raise AccountError("No account given and none bound to the wallet client")
        return account

    def _fees(self) -> dict[str, int]:
        block = self._reader.get_block("latest")
        if block.base_fee_per_gas is None:
            return {"gasPrice": self._reader.get_gas_price()}

        priority = self._reader.get_max_priority_fee_per_gas()
        max_fee = block.base_fee_per_gas * BASE_FEE_MULTIPLIER_NUM // BASE_FEE_MULTIPLIER_DEN + priority
        return {"maxFeePerGas": max_fee, "maxPriorityFeePerGas": priority}

    def prepare_transaction(
        self,
        account: LocalAccount,
        to: Optional[str],
        value: int = 0,
        data: str = "0x",
        gas: Optional[int] = None,
        nonce: Optional[int] = None,
    ) -> dict[str, Any]:
        """
        Build an unsigned transaction with nonce, gas and fees filled in.

        Returns:
            Transaction dict accepted by ``Account.sign_transaction``
        """
        tx: dict[str, Any] = {
            "chainId": self.chain.id,
            "value": int(value),
            "data": data,
        }
        if to is not None:
            tx["to"] = to_checksum_address(to)

        if nonce is None:
            nonce = self._reader.get_transaction_count(account.address, "pending")
        tx["nonce"] = nonce

        if gas is None:
            estimate_tx = {"from": account.address, "value": hex(tx["value"]), "data": data}
            if "to" in tx:
                estimate_tx["to"] = tx["to"]
            gas = self._reader.estimate_gas(estimate_tx)
        tx["gas"] = gas

        fees = self._fees()
        if "maxFeePerGas" in fees:
            tx["type"] = 2
        tx.update(fees)
        return tx

    def send_transaction(
        self,
        to: Optional[str],
        value: int = 0,
        data: str = "0x",
        account: Optional[LocalAccount] = None,
        gas: Optional[int] = None,
        nonce: Optional[int] = None,
    ) -> str:
        """
        Sign a transaction and send it.

        Args:
            to: Recipient address (``None`` deploys ``data`` as a contract)
            value: Native amount in base units (wei)
            data: 0x-prefixed calldata
            account: Signer (default: the bound account)

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        account = self._resolve_account(account)
        tx = self.prepare_transaction(account, to, value, data, gas, nonce)

        signed = account.sign_transaction(tx)
        raw_tx = "0x" + bytes(signed.raw_transaction).hex()
        tx_hash = self.transport.request("eth_sendRawTransaction", [raw_tx])
        logger.info(
            "sent tx %s from %s to %s (nonce %d)", tx_hash, account.address, tx.get("to"), tx["nonce"]
        )
        return tx_hash

    def write_contract(
        self,
        address: str,
        abi: list,
        function_name: str,
        args: Optional[Sequence[Any]] = None,
        account: Optional[LocalAccount] = None,
        value: int = 0,
        gas: Optional[int] = None,
    ) -> str:
        """Send a contract call transaction and return its hash."""
        account = self._resolve_account(account)
        calldata = encode_function_call(abi, function_name, list(args or ()))
        return self.send_transaction(
            to=address, value=value, data=calldata, account=account, gas=gas
        )


def create_wallet_client(
    chain: Chain,
    rpc_url: Optional[str] = None,
    account: Optional[LocalAccount] = None,
    transport: Optional[HttpTransport] = None,
) -> WalletClient:
    """Build a wallet client for ``chain``, on its default RPC unless overridden."""
    transport = transport or HttpTransport(rpc_url or chain.rpc_url)
    return WalletClient(chain, transport, account=account)
