"""
Unit conversion between base-unit integers and decimal strings.

Formatting never goes through floats: ``format_units(500000000000000000, 18)``
is exactly ``"0.5"``.
"""

from __future__ import annotations

import re

ETHER_DECIMALS = 18
GWEI_DECIMALS = 9

_DECIMAL_RE = re.compile(r"^-?(\d+\.?\d*|\.\d+)$")


def format_units(value: int, decimals: int) -> str:
    """Format a base-unit integer as a decimal string.

    Trailing fractional zeros are dropped, so whole amounts have no dot.
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    value = int(value)
    negative = value < 0
    digits = str(abs(value)).rjust(decimals + 1, "0")

    integer = digits[: len(digits) - decimals] if decimals else digits
    fraction = digits[len(digits) - decimals:].rstrip("0") if decimals else ""

    text = f"{integer}.{fraction}" if fraction else integer
    return f"-{text}" if negative else text


def parse_units(text: str, decimals: int) -> int:
    """Parse a decimal string into a base-unit integer.

    Fractional digits beyond ``decimals`` are rounded half-up.

    Raises:
        ValueError: If ``text`` is not a plain decimal number
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    text = str(text).strip()
    if not _DECIMAL_RE.match(text):
        raise ValueError(f"Invalid decimal number: {text!r}")

    negative = text.startswith("-")
    if negative:
        text = text[1:]

    integer, _, fraction = text.partition(".")
    integer = integer or "0"

    if len(fraction) > decimals:
        kept, dropped = fraction[:decimals], fraction[decimals:]
        raw = int(integer + kept)
        if dropped[0] >= "5":
            raw += 1
    else:
        raw = int(integer + fraction.ljust(decimals, "0"))

    return -raw if negative else raw


def format_ether(wei: int) -> str:
    return format_units(wei, ETHER_DECIMALS)


def parse_ether(ether: str) -> int:
    return parse_units(ether, ETHER_DECIMALS)


def format_gwei(wei: int) -> str:
    return format_units(wei, GWEI_DECIMALS)


def parse_gwei(gwei: str) -> int:
    return parse_units(gwei, GWEI_DECIMALS)
