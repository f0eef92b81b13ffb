"""
JSON-RPC transport over HTTP.

Thin httpx wrapper: single requests and JSON-RPC batch arrays. Everything
above this layer speaks in ``method``/``params`` pairs and decoded results.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Optional, Sequence

import httpx

from ..errors import RpcError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


def to_hex(value: int) -> str:
    """Encode an integer as a JSON-RPC quantity (``0x``-prefixed, no padding)."""
    return hex(int(value))


def from_hex(value: Optional[str]) -> Optional[int]:
    """Decode a JSON-RPC quantity. ``None`` passes through."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    return int(value, 16)


class HttpTransport:
    """
    JSON-RPC client bound to one endpoint URL.

    Args:
        url: RPC endpoint URL
        timeout: Request timeout in seconds
        client: Pre-built httpx client (tests inject one with a MockTransport)
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.url = url
        self._client = client or httpx.Client(timeout=timeout)
        self._ids = itertools.count(1)

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _post(self, payload: Any) -> Any:
        response = self._client.post(self.url, json=payload)
        response.raise_for_status()
        return response.json()

    def _payload(self, method: str, params: Sequence[Any]) -> dict:
        return {
            "jsonrpc": "2.0",
            "method": method,
            "params": list(params),
            "id": next(self._ids),
        }

    @staticmethod
    def _unwrap(method: str, data: Any) -> Any:
        if not isinstance(data, dict):
            raise RpcError(f"unexpected response: {data!r}", method=method)
        if "error" in data and data["error"] is not None:
            error = data["error"]
            if isinstance(error, dict):
                raise RpcError(
                    error.get("message", "unknown error"),
                    code=error.get("code"),
                    data=error.get("data"),
                    method=method,
                )
            raise RpcError(str(error), method=method)
        return data.get("result")

    def request(self, method: str, params: Sequence[Any] = ()) -> Any:
        """
        Make a single JSON-RPC call.

        Returns:
            The ``result`` field of the response

        Raises:
            RpcError: If the node returns an error object
            httpx.HTTPStatusError: On a non-2xx HTTP status
        """
        logger.debug("rpc %s %s", method, params)
        return self._unwrap(method, self._post(self._payload(method, params)))

    def batch(self, calls: Sequence[tuple[str, Sequence[Any]]]) -> list[Any]:
        """
        Send several calls as one JSON-RPC batch array.

        Responses are matched back to calls by id, so the node may answer
        in any order. Any error fails the whole batch.

        Returns:
            Results in the same order as ``calls``
        """
        if not calls:
            return []

        payloads = [self._payload(method, params) for method, params in calls]
        logger.debug("rpc batch of %d: %s", len(payloads), [p["method"] for p in payloads])

        data = self._post(payloads)
        if not isinstance(data, list):
            # Some nodes answer a batch with a single error object
            self._unwrap("batch", data)
            raise RpcError(f"unexpected batch response: {data!r}", method="batch")

        by_id = {item.get("id"): item for item in data if isinstance(item, dict)}
        results = []
        for payload in payloads:
            item = by_id.get(payload["id"])
            if item is None:
                raise RpcError(
                    f"missing response for id {payload['id']}", method=payload["method"]
                )
            results.append(self._unwrap(payload["method"], item))
        return results
