"""
Public client - read-only access to a chain.

Wraps an ``HttpTransport`` with typed helpers for blocks, balances, contract
reads, logs and receipts. Independent contract reads can be batched into a
single round trip, either through the chain's Multicall3 contract or as a
JSON-RPC batch array.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence, Union

from eth_abi import decode, encode

from ..errors import ContractCallError, RpcOutOfSyncError
from .abi import (
    DecodedLog,
    decode_function_result,
    decode_log,
    encode_function_call,
    encode_topics,
    find_event,
    to_checksum_address,
)
from .chains import Chain
from .rpc import HttpTransport, from_hex, to_hex

logger = logging.getLogger(__name__)

# Reject reads from a node whose head is older than this many seconds.
MAX_BLOCK_AGE_SECONDS = 30

# aggregate3((address target, bool allowFailure, bytes callData)[])
_AGGREGATE3_SELECTOR = bytes.fromhex("82ad56cb")

BlockTag = Union[int, str]


def _block_param(block: BlockTag) -> str:
    return to_hex(block) if isinstance(block, int) else block


@dataclass(frozen=True)
class Block:
    number: int
    hash: Optional[str]
    parent_hash: str
    timestamp: int
    gas_limit: int
    gas_used: int
    base_fee_per_gas: Optional[int] = None
    miner: Optional[str] = None
    transactions: tuple = field(default_factory=tuple)

    @classmethod
    def from_rpc(cls, data: dict[str, Any]) -> "Block":
        return cls(
            number=from_hex(data["number"]),
            hash=data.get("hash"),
            parent_hash=data.get("parentHash", ""),
            timestamp=from_hex(data["timestamp"]),
            gas_limit=from_hex(data.get("gasLimit", "0x0")),
            gas_used=from_hex(data.get("gasUsed", "0x0")),
            base_fee_per_gas=from_hex(data.get("baseFeePerGas")),
            miner=data.get("miner"),
            transactions=tuple(data.get("transactions") or ()),
        )


@dataclass(frozen=True)
class ContractCall:
    """One pending contract read, used to build batches."""

    address: str
    abi: list
    function_name: str
    args: tuple = ()

    def calldata(self) -> str:
        return encode_function_call(self.abi, self.function_name, list(self.args))

    def decode(self, data: Union[str, bytes]) -> Any:
        return decode_function_result(self.abi, self.function_name, data, list(self.args))


def check_freshness(
    block: Block,
    now: Optional[int] = None,
    max_age: int = MAX_BLOCK_AGE_SECONDS,
) -> int:
    """
    Verify the node is in sync with wall-clock time.

    Args:
        block: Latest block from the node
        now: Unix time in seconds (default: current time)
        max_age: Largest acceptable ``now - block.timestamp``

    Returns:
        The observed skew in seconds

    Raises:
        RpcOutOfSyncError: If the skew exceeds ``max_age``
    """
    if now is None:
        now = int(time.time())
    skew = now - block.timestamp
    if skew > max_age:
        raise RpcOutOfSyncError(skew, max_age)
    return skew


class PublicClient:
    """
    Read-only client bound to one chain and endpoint.

    Args:
        chain: Chain the endpoint serves
        transport: JSON-RPC transport
        batch_multicall: Batch ``read_contracts`` through Multicall3
    """

    def __init__(
        self,
        chain: Chain,
        transport: HttpTransport,
        batch_multicall: bool = True,
    ) -> None:
        self.chain = chain
        self.transport = transport
        self.batch_multicall = batch_multicall

    def request(self, method: str, params: Sequence[Any] = ()) -> Any:
        return self.transport.request(method, params)

    # ---- chain state ----

    def get_block(self, number: BlockTag = "latest") -> Block:
        data = self.request("eth_getBlockByNumber", [_block_param(number), False])
        if data is None:
            raise ContractCallError(f"Block {number} not found")
        return Block.from_rpc(data)

    def get_block_number(self) -> int:
        return from_hex(self.request("eth_blockNumber"))

    def get_balance(self, address: str, block: BlockTag = "latest") -> int:
        """Native balance in base units (wei)."""
        result = self.request(
            "eth_getBalance", [to_checksum_address(address), _block_param(block)]
        )
        return from_hex(result)

    def get_transaction_count(self, address: str, block: BlockTag = "pending") -> int:
        result = self.request(
            "eth_getTransactionCount", [to_checksum_address(address), _block_param(block)]
        )
        return from_hex(result)

    def get_gas_price(self) -> int:
        return from_hex(self.request("eth_gasPrice"))

    def get_max_priority_fee_per_gas(self) -> int:
        return from_hex(self.request("eth_maxPriorityFeePerGas"))

    def get_chain_id(self) -> int:
        return from_hex(self.request("eth_chainId"))

    def estimate_gas(self, tx: dict[str, Any]) -> int:
        return from_hex(self.request("eth_estimateGas", [tx]))

    def call(self, tx: dict[str, Any], block: BlockTag = "latest") -> str:
        return self.request("eth_call", [tx, _block_param(block)])

    # ---- contract reads ----

    def read_contract(
        self,
        address: str,
        abi: list,
        function_name: str,
        args: Optional[Sequence[Any]] = None,
        block: BlockTag = "latest",
    ) -> Any:
        """
        Read from a smart contract (eth_call).

        Raises:
            ContractCallError: If the call returns no data
        """
        call = ContractCall(to_checksum_address(address), abi, function_name, tuple(args or ()))
        result = self.call({"to": call.address, "data": call.calldata()}, block)
        if result is None or result == "0x":
            raise ContractCallError(
                f"{function_name} returned no data at {call.address}"
            )
        return call.decode(result)

    def read_contracts(self, calls: Sequence[ContractCall]) -> list[Any]:
        """
        Run independent contract reads as one batch.

        Uses a single Multicall3 ``aggregate3`` call when multicall batching
        is enabled and the chain has Multicall3, otherwise a JSON-RPC batch
        of ``eth_call`` requests. A failure in any call fails the batch.

        Returns:
            Decoded results in the order of ``calls``
        """
        if not calls:
            return []
        if self.batch_multicall and self.chain.multicall3_address:
            return self._multicall(calls)

        requests = [
            ("eth_call", [{"to": to_checksum_address(c.address), "data": c.calldata()}, "latest"])
            for c in calls
        ]
        results = self.transport.batch(requests)
        decoded = []
        for call, result in zip(calls, results):
            if result is None or result == "0x":
                raise ContractCallError(
                    f"{call.function_name} returned no data at {call.address}"
                )
            decoded.append(call.decode(result))
        return decoded

    def _multicall(self, calls: Sequence[ContractCall]) -> list[Any]:
        packed = [
            (to_checksum_address(c.address), False, bytes.fromhex(c.calldata()[2:]))
            for c in calls
        ]
        data = _AGGREGATE3_SELECTOR + encode(["(address,bool,bytes)[]"], [packed])
        logger.debug("multicall of %d call(s) via %s", len(calls), self.chain.multicall3_address)

        result = self.call(
            {"to": self.chain.multicall3_address, "data": "0x" + data.hex()}
        )
        if result is None or result == "0x":
            raise ContractCallError(
                f"Multicall3 returned no data at {self.chain.multicall3_address}"
            )

        (returned,) = decode(["(bool,bytes)[]"], bytes.fromhex(result[2:]))
        if len(returned) != len(calls):
            raise ContractCallError(
                f"Multicall3 returned {len(returned)} result(s) for {len(calls)} call(s)"
            )

        decoded = []
        for call, (success, return_data) in zip(calls, returned):
            if not success or not return_data:
                raise ContractCallError(
                    f"{call.function_name} failed at {call.address}"
                )
            decoded.append(call.decode(return_data))
        return decoded

    # ---- logs ----

    def get_logs(
        self,
        address: Optional[str] = None,
        topics: Optional[list] = None,
        from_block: BlockTag = "latest",
        to_block: BlockTag = "latest",
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "fromBlock": _block_param(from_block),
            "toBlock": _block_param(to_block),
        }
        if address:
            params["address"] = to_checksum_address(address)
        if topics:
            params["topics"] = topics
        return self.request("eth_getLogs", [params]) or []

    def get_contract_events(
        self,
        address: str,
        abi: list,
        event_name: str,
        args: Optional[dict[str, Any]] = None,
        from_block: BlockTag = "latest",
        to_block: BlockTag = "latest",
    ) -> list[DecodedLog]:
        event = find_event(abi, event_name)
        logs = self.get_logs(address, encode_topics(event, args), from_block, to_block)
        return [decode_log([event], log) for log in logs]

    def watch_contract_event(
        self,
        address: str,
        abi: list,
        event_name: str,
        on_logs: Callable[[list[DecodedLog]], None],
        args: Optional[dict[str, Any]] = None,
        poll_interval: float = 4.0,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        """
        Start watching a contract event.

        Returns:
            A started ``EventWatcher``; call ``unwatch()`` to stop it
        """
        from .watch import EventWatcher

        watcher = EventWatcher(
            client=self,
            address=address,
            event=find_event(abi, event_name),
            on_logs=on_logs,
            args=args,
            poll_interval=poll_interval,
            on_error=on_error,
        )
        return watcher.start()

    # ---- receipts ----

    def wait_for_transaction_receipt(
        self,
        tx_hash: str,
        timeout: float = 120,
        poll_interval: float = 2.0,
    ) -> dict[str, Any]:
        """
        Wait for a transaction receipt.

        Raises:
            TimeoutError: If receipt not found within timeout
        """
        start = time.time()
        while time.time() - start < timeout:
            receipt = self.request("eth_getTransactionReceipt", [tx_hash])
            if receipt is not None:
                return receipt
            time.sleep(poll_interval)

        raise TimeoutError(f"Transaction {tx_hash} not confirmed within {timeout}s")


def create_public_client(
    chain: Chain,
    rpc_url: Optional[str] = None,
    batch_multicall: bool = True,
    transport: Optional[HttpTransport] = None,
) -> PublicClient:
    """Build a public client for ``chain``, on its default RPC unless overridden."""
    transport = transport or HttpTransport(rpc_url or chain.rpc_url)
    return PublicClient(chain, transport, batch_multicall=batch_multicall)
