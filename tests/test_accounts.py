"""Tests for private key loading and account derivation."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from chainsheet.accounts import (
    generate_private_key,
    get_address,
    load_private_key,
    private_key_to_account,
)
from chainsheet.config import load_settings
from chainsheet.errors import AccountError

from conftest import PRIVATE_KEY_HEX


class TestLoadPrivateKey:
    def test_adds_hex_prefix(self) -> None:
        with patch.dict(os.environ, {"PRIVATE_KEY": PRIVATE_KEY_HEX}):
            assert load_private_key() == "0x" + PRIVATE_KEY_HEX

    def test_keeps_existing_prefix(self) -> None:
        with patch.dict(os.environ, {"PRIVATE_KEY": "0x" + PRIVATE_KEY_HEX}):
            assert load_private_key() == "0x" + PRIVATE_KEY_HEX

    def test_absent_key_raises(self) -> None:
        env = {k: v for k, v in os.environ.items() if k != "PRIVATE_KEY"}
        with patch.dict(os.environ, env, clear=True):
            with patch("chainsheet.accounts.load_dotenv"):
                with pytest.raises(AccountError, match="PRIVATE_KEY not set"):
                    load_private_key()

    def test_reads_env_file(self, tmp_path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text(f"PRIVATE_KEY={PRIVATE_KEY_HEX}\n", encoding="utf-8")
        env = {k: v for k, v in os.environ.items() if k != "PRIVATE_KEY"}
        with patch.dict(os.environ, env, clear=True):
            assert load_private_key(env_file) == "0x" + PRIVATE_KEY_HEX

    def test_reads_env_file_from_working_directory(self, tmp_path, monkeypatch) -> None:
        (tmp_path / ".env").write_text(f"PRIVATE_KEY={PRIVATE_KEY_HEX}\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        env = {k: v for k, v in os.environ.items() if k != "PRIVATE_KEY"}
        with patch.dict(os.environ, env, clear=True):
            assert load_private_key() == "0x" + PRIVATE_KEY_HEX


class TestLoadSettings:
    def test_reads_env_file_from_working_directory(self, tmp_path, monkeypatch) -> None:
        (tmp_path / ".env").write_text(
            "CHAIN=base-sepolia\nRPC_URL=http://localhost:8545\n", encoding="utf-8"
        )
        monkeypatch.chdir(tmp_path)
        env = {k: v for k, v in os.environ.items() if k not in ("CHAIN", "RPC_URL")}
        with patch.dict(os.environ, env, clear=True):
            settings = load_settings()
        assert settings.chain.id == 84532
        assert settings.endpoint == "http://localhost:8545"

    def test_arguments_override_environment(self) -> None:
        env = {k: v for k, v in os.environ.items() if k != "RPC_URL"}
        env["CHAIN"] = "base-sepolia"
        with patch.dict(os.environ, env, clear=True):
            with patch("chainsheet.config.load_dotenv"):
                settings = load_settings(chain="celo-alfajores")
        assert settings.chain.id == 44787
        assert settings.endpoint == settings.chain.rpc_url


class TestPrivateKeyToAccount:
    def test_derives_address(self, account) -> None:
        derived = private_key_to_account("0x" + PRIVATE_KEY_HEX)
        assert derived.address == account.address

    @pytest.mark.parametrize("key", ["0xnothex", "0x1234", "0x"])
    def test_malformed_key_raises(self, key: str) -> None:
        with pytest.raises(AccountError, match="Invalid private key"):
            private_key_to_account(key)

    def test_generate_private_key(self) -> None:
        key, address = generate_private_key()
        assert key.startswith("0x") and len(key) == 66
        assert get_address(key) == address
