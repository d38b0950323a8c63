"""Pytest configuration and fixtures."""

import pytest

from mintclub.config import BASE, NetworkConfig
from mintclub.routing.quoter import MockQuoter
from mintclub.service import MintClub
from tests.helpers import FakeChain, install_bond_registry, make_service


@pytest.fixture
def network() -> NetworkConfig:
    """Base network constants."""
    return BASE


@pytest.fixture
def chain() -> FakeChain:
    """Fresh fake chain with an empty bond registry."""
    fake = FakeChain()
    install_bond_registry(fake)
    return fake


@pytest.fixture
def quoter() -> MockQuoter:
    """Mock quoter with no configured quotes."""
    return MockQuoter()


@pytest.fixture
def service(chain: FakeChain, quoter: MockQuoter) -> MintClub:
    """Writable client over the fake chain and mock quoter."""
    return make_service(chain, quoter)
