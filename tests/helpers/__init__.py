"""Test helpers module for shared test utilities.

- constants: Addresses, accounts and common amounts
- fakes: FakeChain, an in-memory ChainReader/ChainWriter
- factories: Network, route and service factory functions
"""

from tests.helpers.constants import (
    BOND,
    CREATOR,
    CURVE_TOKEN,
    ETH,
    HUNT,
    MT,
    NOW,
    ONE,
    OTHER_CURVE_TOKEN,
    OTHER_USER,
    POOL_QUOTER,
    QUOTER,
    ROUTER,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    USDC,
    USER,
    WETH,
    ZAP,
)
from tests.helpers.factories import (
    NO_BOND,
    add_curve_token,
    install_bond_registry,
    make_network,
    make_path_route,
    make_service,
    set_burn_refund,
    set_mint_cost,
    set_zap_results,
)
from tests.helpers.fakes import FakeChain

__all__ = [
    # Constants
    "BOND",
    "CREATOR",
    "CURVE_TOKEN",
    "ETH",
    "HUNT",
    "MT",
    "NOW",
    "ONE",
    "OTHER_CURVE_TOKEN",
    "OTHER_USER",
    "POOL_QUOTER",
    "QUOTER",
    "ROUTER",
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "USDC",
    "USER",
    "WETH",
    "ZAP",
    # Fakes
    "FakeChain",
    # Factories
    "NO_BOND",
    "add_curve_token",
    "install_bond_registry",
    "make_network",
    "make_path_route",
    "make_service",
    "set_burn_refund",
    "set_mint_cost",
    "set_zap_results",
]
