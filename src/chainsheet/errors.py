"""
Error hierarchy for chainsheet.

Every error raised by the library derives from ``ChainsheetError`` so the
CLI can report it uniformly and exit with ``exit_code``.
"""

from __future__ import annotations

from typing import Any, Optional


class ChainsheetError(RuntimeError):
    exit_code: int = 1


class RpcError(ChainsheetError):
    """JSON-RPC error object or malformed response from the node."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Any = None,
        method: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.data = data
        self.method = method
        prefix = f"{method}: " if method else ""
        suffix = f" (code {code})" if code is not None else ""
        super().__init__(f"RPC error: {prefix}{message}{suffix}")


class RpcOutOfSyncError(ChainsheetError):
    """Latest block is older than the allowed tolerance."""

    def __init__(self, skew: int, max_age: int) -> None:
        self.skew = skew
        self.max_age = max_age
        super().__init__(
            f"rpc out of sync: latest block is {skew}s old (max {max_age}s)"
        )


class AbiError(ChainsheetError, ValueError):
    pass


class AccountError(ChainsheetError, ValueError):
    pass


class ContractCallError(ChainsheetError):
    pass
