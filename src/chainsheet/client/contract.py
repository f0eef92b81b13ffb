"""
Contract session - an ABI and address bound to public and wallet clients.

    contract = get_contract(address, abi, public=read, wallet=write)
    contract.read.name()
    contract.read_many(contract.read.symbol.call(), contract.read.decimals.call())
    contract.write.transfer(to, amount, account=account)
    contract.watch_event.Transfer(on_logs=print)
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from eth_account.signers.local import LocalAccount

from ..errors import ChainsheetError
from .abi import DecodedLog, to_checksum_address
from .public import ContractCall, PublicClient
from .wallet import WalletClient


class _ReadMethod:
    def __init__(self, contract: "Contract", name: str) -> None:
        self._contract = contract
        self.name = name

    def call(self, *args: Any) -> ContractCall:
        """Describe the read without sending it, for ``Contract.read_many``."""
        return ContractCall(self._contract.address, self._contract.abi, self.name, args)

    def __call__(self, *args: Any) -> Any:
        return self._contract._public().read_contract(
            self._contract.address, self._contract.abi, self.name, args
        )


class _WriteMethod:
    def __init__(self, contract: "Contract", name: str) -> None:
        self._contract = contract
        self.name = name

    def __call__(
        self,
        *args: Any,
        account: Optional[LocalAccount] = None,
        value: int = 0,
        gas: Optional[int] = None,
    ) -> str:
        return self._contract._wallet().write_contract(
            self._contract.address,
            self._contract.abi,
            self.name,
            args,
            account=account,
            value=value,
            gas=gas,
        )


class _EventMethod:
    def __init__(self, contract: "Contract", name: str) -> None:
        self._contract = contract
        self.name = name

    def __call__(
        self,
        args: Optional[dict[str, Any]] = None,
        on_logs: Optional[Callable[[list[DecodedLog]], None]] = None,
        poll_interval: float = 4.0,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        if on_logs is None:
            raise TypeError("on_logs callback is required")
        return self._contract._public().watch_contract_event(
            self._contract.address,
            self._contract.abi,
            self.name,
            on_logs,
            args=args,
            poll_interval=poll_interval,
            on_error=on_error,
        )


class _Namespace:
    def __init__(self, contract: "Contract", names: set[str], factory: type, kind: str) -> None:
        self._contract = contract
        self._names = names
        self._factory = factory
        self._kind = kind

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_") or name not in self._names:
            raise AttributeError(f"Contract has no {self._kind} {name!r}")
        return self._factory(self._contract, name)

    def __dir__(self) -> list[str]:
        return sorted(self._names)


class Contract:
    """Callable proxy over a deployed contract."""

    def __init__(
        self,
        address: str,
        abi: list,
        public: Optional[PublicClient] = None,
        wallet: Optional[WalletClient] = None,
    ) -> None:
        self.address = to_checksum_address(address)
        self.abi = abi
        self.public = public
        self.wallet = wallet

        functions = [e for e in abi if e.get("type") == "function"]
        readonly = {f["name"] for f in functions if f.get("stateMutability") in ("view", "pure")}
        writable = {f["name"] for f in functions if f.get("stateMutability") not in ("view", "pure")}
        events = {e["name"] for e in abi if e.get("type") == "event"}

        self.read = _Namespace(self, readonly, _ReadMethod, "read function")
        self.write = _Namespace(self, writable, _WriteMethod, "write function")
        self.watch_event = _Namespace(self, events, _EventMethod, "event")

    def __repr__(self) -> str:
        return f"Contract({self.address})"

    def _public(self) -> PublicClient:
        if self.public is None:
            raise ChainsheetError("Contract has no public client for reads")
        return self.public

    def _wallet(self) -> WalletClient:
        if self.wallet is None:
            raise ChainsheetError("Contract has no wallet client for writes")
        return self.wallet

    def read_many(self, *calls: ContractCall) -> list[Any]:
        """Run several reads as one batch; results follow argument order."""
        return self._public().read_contracts(list(calls))

    def get_events(
        self,
        event_name: str,
        args: Optional[dict[str, Any]] = None,
        from_block: Any = "latest",
        to_block: Any = "latest",
    ) -> list[DecodedLog]:
        return self._public().get_contract_events(
            self.address, self.abi, event_name, args, from_block, to_block
        )


def get_contract(
    address: str,
    abi: list,
    public: Optional[PublicClient] = None,
    wallet: Optional[WalletClient] = None,
) -> Contract:
    return Contract(address, abi, public=public, wallet=wallet)
