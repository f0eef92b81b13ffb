"""
Shared fixtures: an in-process fake JSON-RPC node.

The node answers the ``eth_*`` methods the clients use, including JSON-RPC
batch arrays and Multicall3 ``aggregate3`` calls, and serves a single
ERC-20 token. No network access is needed.
"""

from __future__ import annotations

import json
import time
from typing import Any, Optional

import httpx
import pytest
from eth_abi import decode, encode
from eth_account import Account
from eth_hash.auto import keccak

from chainsheet.client.chains import MULTICALL3_ADDRESS, celo_alfajores
from chainsheet.client.public import create_public_client
from chainsheet.client.rpc import HttpTransport
from chainsheet.client.wallet import create_wallet_client

# Well-known throwaway test key (eth-account docs); never funded.
PRIVATE_KEY_HEX = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"

TOKEN = "0x874069Fa1Eb16D44d622F2e0Ca25eeA172369bC1"
HOLDER = "0xcEe284F754E854890e311e3280b767F80797180d"
RECIPIENT = "0x8E3DC120aa9e34cA55b572324AB8Ef73ca211092"
BALANCE_ADDRESS = "0x303C22e6ef01CbA9d03259248863836CB91336D5"

TRANSFER_TOPIC = "0x" + keccak(b"Transfer(address,address,uint256)").hex()


def selector(signature: str) -> bytes:
    return keccak(signature.encode("utf-8"))[:4]


AGGREGATE3 = selector("aggregate3((address,bool,bytes)[])")


def address_topic(address: str) -> str:
    return "0x" + "0" * 24 + address.lower().replace("0x", "")


def make_transfer_log(
    sender: str,
    recipient: str,
    value: int,
    block_number: int = 101,
    token: str = TOKEN,
    log_index: int = 0,
) -> dict[str, Any]:
    return {
        "address": token.lower(),
        "topics": [TRANSFER_TOPIC, address_topic(sender), address_topic(recipient)],
        "data": "0x" + encode(["uint256"], [value]).hex(),
        "blockNumber": hex(block_number),
        "transactionHash": "0x" + f"{block_number:064x}",
        "logIndex": hex(log_index),
        "removed": False,
    }


class NodeError(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class FakeNode:
    """Minimal JSON-RPC node backed by in-memory state."""

    def __init__(self) -> None:
        self.block_number = 100
        self.block_timestamp = int(time.time())
        self.base_fee: Optional[int] = 1_000_000_000
        self.balances: dict[str, int] = {BALANCE_ADDRESS.lower(): 1_500_000_000_000_000_000}
        self.token_name = "Celo Dollar"
        self.token_symbol = "cUSD"
        self.token_decimals = 18
        self.token_balances: dict[str, int] = {HOLDER.lower(): 500_000_000_000_000_000}
        self.filters_supported = True
        self.pending_logs: list[dict[str, Any]] = []
        self.fail_methods: dict[str, NodeError] = {}
        self.requests: list[tuple[str, list]] = []
        self.batches: list[int] = []
        self.sent_raw: list[str] = []

    @property
    def methods(self) -> list[str]:
        return [method for method, _ in self.requests]

    # ---- HTTP ----

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        if isinstance(payload, list):
            self.batches.append(len(payload))
            # Answer out of order; clients must match by id.
            return httpx.Response(200, json=[self._respond(p) for p in reversed(payload)])
        return httpx.Response(200, json=self._respond(payload))

    def _respond(self, payload: dict[str, Any]) -> dict[str, Any]:
        method, params = payload["method"], payload.get("params", [])
        self.requests.append((method, params))
        try:
            if method in self.fail_methods:
                raise self.fail_methods[method]
            handler = getattr(self, "rpc_" + method, None)
            if handler is None:
                raise NodeError(-32601, f"the method {method} does not exist")
            result = handler(*params)
        except NodeError as exc:
            return {
                "jsonrpc": "2.0",
                "id": payload["id"],
                "error": {"code": exc.code, "message": exc.message},
            }
        return {"jsonrpc": "2.0", "id": payload["id"], "result": result}

    # ---- eth_* ----

    def rpc_eth_chainId(self) -> str:
        return hex(celo_alfajores.id)

    def rpc_eth_blockNumber(self) -> str:
        return hex(self.block_number)

    def rpc_eth_getBlockByNumber(self, tag: str, full: bool) -> dict[str, Any]:
        block = {
            "number": hex(self.block_number),
            "hash": "0x" + "ab" * 32,
            "parentHash": "0x" + "cd" * 32,
            "timestamp": hex(self.block_timestamp),
            "gasLimit": hex(30_000_000),
            "gasUsed": hex(0),
            "miner": "0x" + "00" * 20,
            "transactions": [],
        }
        if self.base_fee is not None:
            block["baseFeePerGas"] = hex(self.base_fee)
        return block

    def rpc_eth_getBalance(self, address: str, tag: str) -> str:
        return hex(self.balances.get(address.lower(), 0))

    def rpc_eth_getTransactionCount(self, address: str, tag: str) -> str:
        return hex(7)

    def rpc_eth_estimateGas(self, tx: dict[str, Any]) -> str:
        return hex(21_000 if tx.get("data", "0x") == "0x" else 60_000)

    def rpc_eth_gasPrice(self) -> str:
        return hex(2_000_000_000)

    def rpc_eth_maxPriorityFeePerGas(self) -> str:
        return hex(1_000_000_000)

    def rpc_eth_sendRawTransaction(self, raw: str) -> str:
        self.sent_raw.append(raw)
        return "0x" + keccak(bytes.fromhex(raw[2:])).hex()

    def rpc_eth_call(self, tx: dict[str, Any], tag: str) -> str:
        data = bytes.fromhex(tx["data"][2:])
        if tx["to"].lower() == MULTICALL3_ADDRESS.lower() and data[:4] == AGGREGATE3:
            (calls,) = decode(["(address,bool,bytes)[]"], data[4:])
            results = [self._token_call(target, call_data) for target, _, call_data in calls]
            return "0x" + encode(["(bool,bytes)[]"], [results]).hex()
        ok, returned = self._token_call(tx["to"], data)
        return "0x" + returned.hex() if ok else "0x"

    def _token_call(self, target: str, data: bytes) -> tuple[bool, bytes]:
        if target.lower() != TOKEN.lower():
            return False, b""
        sel = data[:4]
        if sel == selector("name()"):
            return True, encode(["string"], [self.token_name])
        if sel == selector("symbol()"):
            return True, encode(["string"], [self.token_symbol])
        if sel == selector("decimals()"):
            return True, encode(["uint8"], [self.token_decimals])
        if sel == selector("balanceOf(address)"):
            (holder,) = decode(["address"], data[4:])
            return True, encode(["uint256"], [self.token_balances.get(holder.lower(), 0)])
        return False, b""

    def rpc_eth_newFilter(self, params: dict[str, Any]) -> str:
        if not self.filters_supported:
            raise NodeError(-32601, "the method eth_newFilter does not exist")
        return "0x1"

    def rpc_eth_getFilterChanges(self, filter_id: str) -> list[dict[str, Any]]:
        logs, self.pending_logs = self.pending_logs, []
        return logs

    def rpc_eth_getLogs(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        logs, self.pending_logs = self.pending_logs, []
        return logs

    def rpc_eth_uninstallFilter(self, filter_id: str) -> bool:
        return True


def make_transport(node: FakeNode) -> HttpTransport:
    client = httpx.Client(transport=httpx.MockTransport(node.handler))
    return HttpTransport("http://fake-node.test", client=client)


@pytest.fixture()
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture()
def transport(node: FakeNode) -> HttpTransport:
    return make_transport(node)


@pytest.fixture()
def public(node: FakeNode):
    return create_public_client(celo_alfajores, transport=make_transport(node))


@pytest.fixture()
def wallet(node: FakeNode):
    return create_wallet_client(celo_alfajores, transport=make_transport(node))


@pytest.fixture()
def account():
    return Account.from_key("0x" + PRIVATE_KEY_HEX)
