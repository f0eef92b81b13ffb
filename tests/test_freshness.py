"""Tests for the block freshness check."""

from __future__ import annotations

import time

import pytest

from chainsheet.client.public import MAX_BLOCK_AGE_SECONDS, Block, check_freshness
from chainsheet.errors import RpcOutOfSyncError


def _block(timestamp: int) -> Block:
    return Block(
        number=1,
        hash=None,
        parent_hash="0x",
        timestamp=timestamp,
        gas_limit=0,
        gas_used=0,
    )


class TestCheckFreshness:
    def test_tolerance_is_thirty_seconds(self) -> None:
        assert MAX_BLOCK_AGE_SECONDS == 30

    def test_exactly_thirty_seconds_passes(self) -> None:
        assert check_freshness(_block(1_000), now=1_030) == 30

    def test_thirty_one_seconds_fails(self) -> None:
        with pytest.raises(RpcOutOfSyncError) as exc_info:
            check_freshness(_block(1_000), now=1_031)
        assert exc_info.value.skew == 31
        assert "rpc out of sync" in str(exc_info.value)

    def test_block_ahead_of_local_clock_passes(self) -> None:
        assert check_freshness(_block(1_000), now=995) == -5

    def test_custom_tolerance(self) -> None:
        with pytest.raises(RpcOutOfSyncError):
            check_freshness(_block(1_000), now=1_006, max_age=5)

    def test_defaults_to_wall_clock(self) -> None:
        assert check_freshness(_block(int(time.time()))) <= 1

    def test_exit_code_is_one(self) -> None:
        with pytest.raises(RpcOutOfSyncError) as exc_info:
            check_freshness(_block(0), now=10_000)
        assert exc_info.value.exit_code == 1
