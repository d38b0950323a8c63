"""Integration tests against a live Base RPC endpoint.

These tests require an RPC connection and are skipped by default.
Run with: RPC_URL=https://mainnet.base.org pytest -m requires_rpc
"""

import os

import pytest

from mintclub.config import BASE, FEE_LOW
from mintclub.models.route import SwapPath

# Skip all tests in this module if RPC_URL is not set
pytestmark = [
    pytest.mark.requires_rpc,
    pytest.mark.skipif(
        not os.environ.get("RPC_URL"),
        reason="RPC_URL environment variable not set",
    ),
]

WETH = BASE.wrapped_native
USDC = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"
HUNT = "0x37f0c2915cecc7e977183b8543fc0864d03e064c"
MT = "0xff45161474c39cb00699070dd49582e417b57a7e"


@pytest.fixture
def reader():
    """Web3-backed reader on RPC_URL."""
    from mintclub.chain.client import Web3ChainReader

    return Web3ChainReader.from_url(os.environ["RPC_URL"], timeout=20)


@pytest.fixture
def quoter(reader):
    from mintclub.routing.quoter import ChainQuoter

    return ChainQuoter(reader, BASE)


class TestQuoter:
    def test_weth_to_usdc(self, quoter):
        """1 WETH should quote to a sensible USDC amount."""
        amount_out = quoter.quote_path(SwapPath((WETH, USDC), (FEE_LOW,)), 10**18)
        assert amount_out is not None
        assert 500 * 10**6 < amount_out < 20_000 * 10**6

    def test_native_pool(self, quoter):
        (pool,) = BASE.pools
        amount_out = quoter.quote_pool(pool, True, 10**16)
        assert amount_out is not None
        assert amount_out > 0


class TestBond:
    def test_mt_is_curve_token(self, reader):
        from mintclub.bond import BondClient

        bond = BondClient(reader, BASE)
        info = bond.require_bond(MT)
        assert info.reserve_token == HUNT
        price = bond.price(MT)
        assert price.price > 0

    def test_plain_token_has_no_bond(self, reader):
        from mintclub.bond import BondClient

        assert BondClient(reader, BASE).get_bond_or_none(USDC) is None
