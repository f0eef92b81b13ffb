"""Tests for the wallet (signing) client."""

from __future__ import annotations

import pytest
from eth_account import Account

from chainsheet.client.abi import ERC20_ABI
from chainsheet.errors import AccountError
from chainsheet.units import parse_ether

from conftest import RECIPIENT, TOKEN


class TestSendTransaction:
    def test_eip1559_transfer(self, wallet, node, account) -> None:
        tx_hash = wallet.send_transaction(
            to=RECIPIENT, value=parse_ether("0.5"), account=account
        )

        assert tx_hash.startswith("0x") and len(tx_hash) == 66
        assert len(node.sent_raw) == 1
        raw = node.sent_raw[0]
        assert raw.startswith("0x02")
        assert Account.recover_transaction(raw) == account.address
        assert ("eth_getTransactionCount", [account.address, "pending"]) in node.requests
        assert "eth_maxPriorityFeePerGas" in node.methods

    def test_legacy_fees_without_base_fee(self, wallet, node, account) -> None:
        node.base_fee = None
        wallet.send_transaction(to=RECIPIENT, value=1, account=account)
        assert "eth_gasPrice" in node.methods
        assert not node.sent_raw[0].startswith("0x02")
        assert Account.recover_transaction(node.sent_raw[0]) == account.address

    def test_prepared_fields(self, wallet, node, account) -> None:
        tx = wallet.prepare_transaction(account, RECIPIENT.lower(), value=5)
        assert tx["chainId"] == 44787
        assert tx["nonce"] == 7
        assert tx["gas"] == 21_000
        assert tx["maxPriorityFeePerGas"] == 1_000_000_000
        assert tx["maxFeePerGas"] == 1_200_000_000 + 1_000_000_000
        assert tx["to"].lower() == RECIPIENT.lower()

    def test_explicit_gas_skips_estimate(self, wallet, node, account) -> None:
        wallet.send_transaction(to=RECIPIENT, value=1, account=account, gas=30_000)
        assert "eth_estimateGas" not in node.methods

    def test_bound_account(self, wallet, node, account) -> None:
        wallet.account = account
        wallet.send_transaction(to=RECIPIENT, value=1)
        assert Account.recover_transaction(node.sent_raw[0]) == account.address

    def test_no_account_fails_before_rpc(self, wallet, node) -> None:
        with pytest.raises(AccountError):
            wallet.send_transaction(to=RECIPIENT, value=1)
        assert node.requests == []


class TestWriteContract:
    def test_erc20_transfer(self, wallet, node, account) -> None:
        wallet.write_contract(
            TOKEN, ERC20_ABI, "transfer", [RECIPIENT, 5 * 10**17], account=account
        )
        estimate = next(params for method, params in node.requests if method == "eth_estimateGas")
        assert estimate[0]["data"].startswith("0xa9059cbb")
        assert estimate[0]["to"].lower() == TOKEN.lower()
        assert len(node.sent_raw) == 1
