"""Tests for the JSON-RPC HTTP transport."""

from __future__ import annotations

import json

import httpx
import pytest

from chainsheet.client.rpc import HttpTransport, from_hex, to_hex
from chainsheet.errors import RpcError


def _transport(handler) -> HttpTransport:
    return HttpTransport("http://node.test", client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestHexHelpers:
    def test_roundtrip_quantity(self) -> None:
        assert to_hex(255) == "0xff"
        assert from_hex("0xff") == 255
        assert from_hex(None) is None


class TestRequest:
    def test_returns_result(self, transport, node) -> None:
        assert transport.request("eth_blockNumber") == hex(node.block_number)
        assert node.methods == ["eth_blockNumber"]

    def test_error_object_raises(self, transport) -> None:
        with pytest.raises(RpcError) as exc_info:
            transport.request("eth_unknownMethod", [])
        assert exc_info.value.code == -32601
        assert exc_info.value.method == "eth_unknownMethod"

    def test_http_error_propagates(self) -> None:
        transport = _transport(lambda request: httpx.Response(503, text="unavailable"))
        with pytest.raises(httpx.HTTPStatusError):
            transport.request("eth_blockNumber")

    def test_ids_increase(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            seen.append(payload["id"])
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": "0x1"})

        transport = _transport(handler)
        transport.request("eth_chainId")
        transport.request("eth_chainId")
        assert seen == [1, 2]


class TestBatch:
    def test_results_follow_call_order(self, transport, node) -> None:
        results = transport.batch([("eth_chainId", []), ("eth_blockNumber", [])])
        assert results == ["0xaef3", hex(node.block_number)]
        assert node.batches == [2]

    def test_empty_batch_sends_nothing(self, transport, node) -> None:
        assert transport.batch([]) == []
        assert node.requests == []

    def test_any_error_fails_batch(self, transport) -> None:
        with pytest.raises(RpcError):
            transport.batch([("eth_chainId", []), ("eth_bogus", [])])

    def test_missing_response_fails_batch(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            first = payload[0]
            return httpx.Response(200, json=[{"jsonrpc": "2.0", "id": first["id"], "result": "0x1"}])

        with pytest.raises(RpcError, match="missing response"):
            _transport(handler).batch([("eth_chainId", []), ("eth_blockNumber", [])])

    def test_single_error_object_for_batch(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "id": None, "error": {"code": -32600, "message": "batch disabled"}}
            )

        with pytest.raises(RpcError, match="batch disabled"):
            _transport(handler).batch([("eth_chainId", [])])
