"""
ABI helpers - human-readable signatures, call encoding and log decoding.

ABIs are kept in the standard JSON form (list of dicts) so that artifacts
from Foundry or Hardhat and parsed human-readable signatures are
interchangeable. Encoding and decoding go through eth-abi.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from eth_abi import decode, encode
from eth_hash.auto import keccak

from ..errors import AbiError

_HEADER_RE = re.compile(r"^(function|event)\s+([A-Za-z_$][\w$]*)\s*\(")
_ARRAY_SUFFIX_RE = re.compile(r"^((?:\[\d*\])*)")
_PARAM_MODIFIERS = {"indexed", "memory", "calldata", "storage"}
_MUTABILITY = {"view", "pure", "payable", "nonpayable"}
_VISIBILITY = {"public", "external", "internal", "private"}

ERC20_SIGNATURES = (
    "function name() public view returns (string memory)",
    "function symbol() view returns (string memory)",
    "function decimals() view returns (uint8)",
    "function balanceOf(address account) public view returns (uint256)",
    "function transfer(address to, uint256 value) public returns (bool)",
    "event Transfer(address indexed from, address indexed to, uint256 value)",
)


def keccak256(data: bytes) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak(data)


def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksummed format.

    Raises:
        AbiError: If ``address`` is not 20 bytes of hex
    """
    addr = str(address).lower()
    if addr.startswith("0x"):
        addr = addr[2:]
    if not re.fullmatch(r"[0-9a-f]{40}", addr):
        raise AbiError(f"Invalid address: {address!r}")
    addr_hash = keccak256(addr.encode("utf-8")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


# ---------------------------------------------------------------------------
# Human-readable parsing
# ---------------------------------------------------------------------------

def _matching_paren(text: str, start: int) -> int:
    """Index of the ``)`` closing the ``(`` at ``start``."""
    depth = 0
    for i in range(start, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return i
    raise AbiError(f"Unbalanced parentheses in {text!r}")


def _split_top_level(text: str) -> list[str]:
    parts, depth, current = [], 0, []
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    tail = "".join(current).strip()
    if tail or parts:
        parts.append(tail)
    if any(not p for p in parts):
        raise AbiError(f"Empty parameter in {text!r}")
    return parts


def _normalize_type(type_name: str) -> str:
    base = re.match(r"^[a-z]+\d*", type_name)
    if base is None:
        raise AbiError(f"Invalid type: {type_name!r}")
    head, suffix = base.group(0), type_name[base.end():]
    if head == "uint":
        head = "uint256"
    elif head == "int":
        head = "int256"
    if not _ARRAY_SUFFIX_RE.fullmatch(suffix):
        raise AbiError(f"Invalid type: {type_name!r}")
    return head + suffix


def _parse_param(text: str, allow_indexed: bool) -> dict[str, Any]:
    text = text.strip()
    if text.startswith("tuple("):
        text = text[len("tuple"):]

    param: dict[str, Any] = {}
    if text.startswith("("):
        end = _matching_paren(text, 0)
        inner = text[1:end]
        rest = text[end + 1:]
        suffix = _ARRAY_SUFFIX_RE.match(rest).group(1)
        rest = rest[len(suffix):]
        param["type"] = "tuple" + suffix
        param["components"] = _parse_params(inner, allow_indexed=False)
    else:
        tokens = text.split()
        param["type"] = _normalize_type(tokens[0])
        rest = text[len(tokens[0]):]

    indexed = False
    name = ""
    for token in rest.split():
        if token == "indexed":
            if not allow_indexed:
                raise AbiError(f"'indexed' is only valid on event parameters: {text!r}")
            indexed = True
        elif token in _PARAM_MODIFIERS:
            continue
        elif not name:
            name = token
        else:
            raise AbiError(f"Unexpected token {token!r} in parameter {text!r}")

    param["name"] = name
    if allow_indexed:
        param["indexed"] = indexed
    return param


def _parse_params(text: str, allow_indexed: bool) -> list[dict[str, Any]]:
    return [_parse_param(p, allow_indexed) for p in _split_top_level(text)]


def parse_abi_item(signature: str) -> dict[str, Any]:
    """
    Parse one human-readable signature into a JSON ABI entry.

    Examples:
        "function balanceOf(address account) view returns (uint256)"
        "event Transfer(address indexed from, address indexed to, uint256 value)"
    """
    text = " ".join(signature.strip().rstrip(";").split())
    match = _HEADER_RE.match(text)
    if match is None:
        raise AbiError(f"Unsupported signature: {signature!r}")

    kind, name = match.group(1), match.group(2)
    open_at = match.end() - 1
    close_at = _matching_paren(text, open_at)
    inputs = _parse_params(text[open_at + 1:close_at], allow_indexed=kind == "event")
    tail = text[close_at + 1:].strip()

    if kind == "event":
        anonymous = tail == "anonymous"
        if tail and not anonymous:
            raise AbiError(f"Unexpected trailing text in {signature!r}")
        return {"type": "event", "name": name, "inputs": inputs, "anonymous": anonymous}

    outputs: list[dict[str, Any]] = []
    returns_at = tail.find("returns")
    if returns_at >= 0:
        ret = tail[returns_at + len("returns"):].strip()
        if not ret.startswith("("):
            raise AbiError(f"Malformed returns clause in {signature!r}")
        end = _matching_paren(ret, 0)
        outputs = _parse_params(ret[1:end], allow_indexed=False)
        tail = tail[:returns_at]

    mutability = "nonpayable"
    for token in tail.split():
        if token in _MUTABILITY:
            mutability = token
        elif token not in _VISIBILITY:
            raise AbiError(f"Unknown modifier {token!r} in {signature!r}")

    return {
        "type": "function",
        "name": name,
        "inputs": inputs,
        "outputs": outputs,
        "stateMutability": mutability,
    }


def parse_abi(signatures: Iterable[str]) -> list[dict[str, Any]]:
    """Parse a list of human-readable signatures into a JSON ABI."""
    if isinstance(signatures, str):
        raise AbiError("parse_abi expects a list of signatures, not a single string")
    return [parse_abi_item(sig) for sig in signatures]


@lru_cache(maxsize=16)
def load_abi(path: Union[str, Path]) -> list[dict[str, Any]]:
    """
    Load an ABI from a JSON file.

    Accepts a Foundry/Hardhat artifact (``{"abi": [...]}``), a plain JSON ABI
    list, or a list of human-readable signatures.
    """
    abi_path = Path(path)
    if not abi_path.exists():
        raise FileNotFoundError(f"ABI not found: {abi_path}")

    with abi_path.open("r", encoding="utf-8") as f:
        artifact = json.load(f)

    abi = artifact["abi"] if isinstance(artifact, dict) else artifact
    if not isinstance(abi, list):
        raise AbiError(f"No ABI list in {abi_path}")
    if abi and all(isinstance(item, str) for item in abi):
        return parse_abi(abi)
    return abi


ERC20_ABI = parse_abi(ERC20_SIGNATURES)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def canonical_type(param: dict[str, Any]) -> str:
    """Type string as used in signatures and by eth-abi (tuples expanded)."""
    type_name = param["type"]
    if type_name.startswith("tuple"):
        inner = ",".join(canonical_type(c) for c in param["components"])
        return f"({inner}){type_name[len('tuple'):]}"
    return type_name


def entry_signature(entry: dict[str, Any]) -> str:
    types = ",".join(canonical_type(p) for p in entry.get("inputs", []))
    return f"{entry['name']}({types})"


def function_selector(entry: dict[str, Any]) -> bytes:
    return keccak256(entry_signature(entry).encode("utf-8"))[:4]


def event_topic(entry: dict[str, Any]) -> str:
    return "0x" + keccak256(entry_signature(entry).encode("utf-8")).hex()


def find_function(
    abi: list[dict[str, Any]], name: str, args: Optional[list] = None
) -> dict[str, Any]:
    """
    Find a function entry by name.

    Overloads are told apart by argument count when ``args`` is given.
    """
    candidates = [e for e in abi if e.get("type") == "function" and e.get("name") == name]
    if not candidates:
        raise AbiError(f"Function {name} not found in ABI")
    if args is not None:
        matching = [e for e in candidates if len(e.get("inputs", [])) == len(args)]
        if not matching:
            expected = sorted({len(e.get("inputs", [])) for e in candidates})
            raise AbiError(
                f"Function {name} expects {expected} argument(s), got {len(args)}"
            )
        candidates = matching
    return candidates[0]


def find_event(abi: list[dict[str, Any]], name: str) -> dict[str, Any]:
    for entry in abi:
        if entry.get("type") == "event" and entry.get("name") == name:
            return entry
    raise AbiError(f"Event {name} not found in ABI")


def _hex_to_bytes(value: str) -> bytes:
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def _normalize_arg(param: dict[str, Any], value: Any) -> Any:
    type_name = param["type"]
    if type_name.endswith("]"):
        element = dict(param, type=type_name[: type_name.rindex("[")])
        return [_normalize_arg(element, v) for v in value]
    if type_name == "tuple":
        components = param["components"]
        if isinstance(value, dict):
            value = [value[c["name"]] for c in components]
        return tuple(_normalize_arg(c, v) for c, v in zip(components, value))
    if type_name == "address":
        return to_checksum_address(value)
    if type_name.startswith("bytes") and isinstance(value, str):
        return _hex_to_bytes(value)
    return value


def encode_arguments(params: list[dict[str, Any]], args: list) -> bytes:
    if len(params) != len(args):
        raise AbiError(f"Expected {len(params)} argument(s), got {len(args)}")
    if not params:
        return b""
    types = [canonical_type(p) for p in params]
    values = [_normalize_arg(p, a) for p, a in zip(params, args)]
    return encode(types, values)


def encode_function_call(abi: list[dict[str, Any]], function_name: str, args: list) -> str:
    """
    ABI-encode a function call.

    Returns:
        0x-prefixed hex encoded calldata
    """
    func = find_function(abi, function_name, args)
    encoded_args = encode_arguments(func.get("inputs", []), list(args))
    return "0x" + function_selector(func).hex() + encoded_args.hex()


def decode_function_result(
    abi: list[dict[str, Any]], function_name: str, data: Union[str, bytes], args: Optional[list] = None
) -> Any:
    """
    ABI-decode a function call result.

    Returns:
        ``None`` for no outputs, the bare value for one output, else a tuple
    """
    func = find_function(abi, function_name, args)
    output_types = [canonical_type(out) for out in func.get("outputs", [])]
    if not output_types:
        return None

    raw = _hex_to_bytes(data) if isinstance(data, str) else data
    decoded = decode(output_types, raw)

    if len(decoded) == 1:
        return decoded[0]
    return decoded


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

def _is_static(param: dict[str, Any]) -> bool:
    type_name = param["type"]
    if type_name in ("string", "bytes") or type_name.endswith("[]"):
        return False
    if type_name.startswith("tuple") or type_name.endswith("]"):
        return False
    return True


def _encode_topic(param: dict[str, Any], value: Any) -> str:
    if _is_static(param):
        return "0x" + encode([param["type"]], [_normalize_arg(param, value)]).hex()
    if isinstance(value, str) and param["type"] == "string":
        return "0x" + keccak256(value.encode("utf-8")).hex()
    if isinstance(value, (bytes, str)) and param["type"] == "bytes":
        raw = _hex_to_bytes(value) if isinstance(value, str) else value
        return "0x" + keccak256(raw).hex()
    raise AbiError(f"Cannot filter on indexed {param['type']} {param.get('name')!r}")


def encode_topics(
    event: dict[str, Any], args: Optional[dict[str, Any]] = None
) -> list[Optional[Union[str, list[str]]]]:
    """
    Build an ``eth_getLogs`` topics filter for an event.

    ``args`` maps indexed parameter names to a value, or a list of values
    to match any of them. Missing names match anything.
    """
    args = args or {}
    indexed = [p for p in event.get("inputs", []) if p.get("indexed")]
    unknown = set(args) - {p["name"] for p in indexed}
    if unknown:
        raise AbiError(
            f"Not indexed parameters of {event['name']}: {', '.join(sorted(unknown))}"
        )

    topics: list[Optional[Union[str, list[str]]]] = [event_topic(event)]
    for param in indexed:
        value = args.get(param["name"])
        if value is None:
            topics.append(None)
        elif isinstance(value, (list, tuple)):
            topics.append([_encode_topic(param, v) for v in value])
        else:
            topics.append(_encode_topic(param, value))

    while topics and topics[-1] is None:
        topics.pop()
    return topics


@dataclass(frozen=True)
class DecodedLog:
    event_name: str
    args: dict[str, Any]
    address: str
    block_number: Optional[int] = None
    transaction_hash: Optional[str] = None
    log_index: Optional[int] = None
    topics: tuple[str, ...] = field(default_factory=tuple)
    data: str = "0x"


def decode_log(abi: list[dict[str, Any]], log: dict[str, Any]) -> DecodedLog:
    """
    Decode a raw RPC log against the events in ``abi``.

    Indexed parameters of dynamic type are returned as their topic hash.

    Raises:
        AbiError: If no event in the ABI matches topic 0
    """
    topics = list(log.get("topics") or [])
    if not topics:
        raise AbiError("Cannot decode anonymous log without topics")

    event = None
    for entry in abi:
        if entry.get("type") == "event" and event_topic(entry) == topics[0].lower():
            event = entry
            break
    if event is None:
        raise AbiError(f"No event in ABI matches topic {topics[0]}")

    inputs = event.get("inputs", [])
    indexed = [p for p in inputs if p.get("indexed")]
    plain = [p for p in inputs if not p.get("indexed")]
    if len(topics) - 1 != len(indexed):
        raise AbiError(
            f"{event['name']} expects {len(indexed)} indexed topic(s), got {len(topics) - 1}"
        )

    values: dict[str, Any] = {}
    for param, topic in zip(indexed, topics[1:]):
        if _is_static(param):
            values[param["name"]] = decode([param["type"]], _hex_to_bytes(topic))[0]
        else:
            values[param["name"]] = topic

    data = log.get("data") or "0x"
    if plain:
        decoded = decode([canonical_type(p) for p in plain], _hex_to_bytes(data))
        for param, value in zip(plain, decoded):
            values[param["name"]] = value

    args = {p["name"]: values[p["name"]] for p in inputs}

    def _int(value: Any) -> Optional[int]:
        return int(value, 16) if isinstance(value, str) else value

    return DecodedLog(
        event_name=event["name"],
        args=args,
        address=log.get("address", ""),
        block_number=_int(log.get("blockNumber")),
        transaction_hash=log.get("transactionHash"),
        log_index=_int(log.get("logIndex")),
        topics=tuple(topics),
        data=data,
    )
