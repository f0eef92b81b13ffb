"""
ECDSA / secp256k1 key management.

The signing identity is derived from the ``PRIVATE_KEY`` environment
variable (optionally loaded from a ``.env`` file), given as hex with or
without the ``0x`` prefix.

Dependencies: eth-account (no full web3.py needed)
"""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import Optional, Union

from dotenv import find_dotenv, load_dotenv
from eth_account import Account
from eth_account.signers.local import LocalAccount

from .errors import AccountError

PRIVATE_KEY_ENV = "PRIVATE_KEY"


def generate_private_key() -> tuple[str, str]:
    """
    Generate a new ECDSA/secp256k1 keypair.

    Returns:
        Tuple of (private_key_hex, address)
    """
    private_key = "0x" + secrets.token_hex(32)
    account = Account.from_key(private_key)
    return private_key, account.address


def load_private_key(env_path: Optional[Path] = None) -> str:
    """
    Load the private key from the environment.

    Args:
        env_path: ``.env`` file to load first (default: ``./.env`` if present)

    Returns:
        0x-prefixed hex private key

    Raises:
        AccountError: If PRIVATE_KEY is not set
    """
    load_dotenv(env_path or find_dotenv(usecwd=True))

    private_key = os.environ.get(PRIVATE_KEY_ENV, "").strip()
    if not private_key:
        raise AccountError(
            f"{PRIVATE_KEY_ENV} not set. Export it or add it to a .env file."
        )

    if not private_key.startswith("0x"):
        private_key = "0x" + private_key

    return private_key


def private_key_to_account(private_key: Union[str, bytes]) -> LocalAccount:
    """
    Derive a signing account from a private key.

    Raises:
        AccountError: If the key is not a valid 32-byte secp256k1 key
    """
    try:
        return Account.from_key(private_key)
    except Exception as exc:  # eth-keys raises its own ValidationError
        raise AccountError(f"Invalid private key: {exc}") from exc


def get_account(private_key: Optional[str] = None) -> LocalAccount:
    """Signing account for ``private_key``, or for PRIVATE_KEY if omitted."""
    if private_key is None:
        private_key = load_private_key()
    return private_key_to_account(private_key)


def get_address(private_key: Optional[str] = None) -> str:
    """0x-prefixed checksummed address for a private key."""
    return get_account(private_key).address
