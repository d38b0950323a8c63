"""Network constants and runtime settings.

Every contract address and routing constant lives on a NetworkConfig value
so one route search and one plan builder serve any supported network.
Runtime knobs (RPC endpoint, timeouts, slippage) come from environment
variables via Settings.from_env().
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from mintclub.models.route import PoolKey
from mintclub.models.types import NATIVE, normalize_address

# Fee tiers in hundredths of a basis point (3000 = 0.3%)
FEE_LOWEST = 100
FEE_LOW = 500
FEE_MEDIUM = 3000
FEE_HIGH = 10000

FEE_TIERS = (FEE_LOWEST, FEE_LOW, FEE_MEDIUM, FEE_HIGH)

# 1% default slippage tolerance
DEFAULT_SLIPPAGE_BPS = 100


@dataclass(frozen=True)
class Intermediary:
    """A token the route search may hop through."""

    symbol: str
    address: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", normalize_address(self.address, validate=True))


@dataclass(frozen=True)
class KnownToken:
    """A well-known token that can be referenced by symbol."""

    symbol: str
    address: str
    decimals: int = 18

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", normalize_address(self.address, validate=True))


@dataclass(frozen=True)
class NetworkConfig:
    """Addresses and routing constants for one chain.

    Attributes:
        name: Short network name used in env vars and API paths
        chain_id: EIP-155 chain id used when signing
        rpc_url: Default public RPC endpoint
        bond: Bonding-curve contract
        zap: Zap contract bundling swaps with mint/burn
        router: Execution router
        quoter: Multi-hop quoting contract
        wrapped_native: ERC-20 wrapper of the native asset
        intermediaries: Tokens tried for one-hop routes, in priority order
        fee_tiers: Fee tiers tried for every hop
        pool_quoter: Quoter for the singleton pool model (None disables it)
        pools: Allow-list of singleton pools considered by route search
        tokens: Well-known tokens resolvable by symbol
    """

    name: str
    chain_id: int
    rpc_url: str
    bond: str
    zap: str
    router: str
    quoter: str
    wrapped_native: str
    intermediaries: tuple[Intermediary, ...]
    fee_tiers: tuple[int, ...] = FEE_TIERS
    pool_quoter: str | None = None
    pools: tuple[PoolKey, ...] = ()
    tokens: tuple[KnownToken, ...] = field(default=())

    def __post_init__(self) -> None:
        for attr in ("bond", "zap", "router", "quoter", "wrapped_native"):
            object.__setattr__(self, attr, normalize_address(getattr(self, attr), validate=True))
        if self.pool_quoter is not None:
            object.__setattr__(
                self, "pool_quoter", normalize_address(self.pool_quoter, validate=True)
            )
        if not self.fee_tiers:
            raise ValueError(f"{self.name}: at least one fee tier is required")

    def to_swap_token(self, token: str) -> str:
        """Substitute wrapped-native for the native sentinel."""
        token = normalize_address(token)
        return self.wrapped_native if token == NATIVE else token

    def to_pool_currency(self, token: str) -> str:
        """Map wrapped-native back to the native sentinel for singleton pools."""
        token = normalize_address(token)
        return NATIVE if token == self.wrapped_native else token


BASE_WETH = "0x4200000000000000000000000000000000000006"
BASE_USDC = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"

BASE = NetworkConfig(
    name="base",
    chain_id=8453,
    rpc_url="https://mainnet.base.org",
    bond="0xc5a076cad94176c2996B32d8466Be1cE757FAa27",
    zap="0x7d999874eAe10f170C4813270173363468A559cD",
    router="0x6fF5693b99212Da76ad316178A184AB56D299b43",
    quoter="0x3d4e44Eb1374240CE5F1B871ab261CD16335B76a",
    wrapped_native=BASE_WETH,
    intermediaries=(
        Intermediary("WETH", BASE_WETH),
        Intermediary("USDC", BASE_USDC),
    ),
    pool_quoter="0x0d5e0f971ed27fbff6c2837bf31316121532048d",
    pools=(PoolKey(NATIVE, normalize_address(BASE_USDC), FEE_LOW, 10),),
    tokens=(
        KnownToken("ETH", NATIVE),
        KnownToken("WETH", BASE_WETH),
        KnownToken("USDC", BASE_USDC, decimals=6),
        KnownToken("HUNT", "0x37f0c2915CeCC7e977183B8543Fc0864d03E064C"),
        KnownToken("MT", "0xFf45161474C39cB00699070Dd49582e417b57a7E"),
    ),
)

NETWORKS: dict[str, NetworkConfig] = {BASE.name: BASE}


def get_network(name: str) -> NetworkConfig:
    """Look up a network by name.

    Raises:
        ValueError: If the network is not supported
    """
    try:
        return NETWORKS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unsupported network '{name}'. Supported: {', '.join(sorted(NETWORKS))}"
        ) from None


def default_token_store_path() -> Path:
    """Where saved tokens live unless MINTCLUB_TOKEN_STORE says otherwise."""
    return Path.home() / ".mintclub" / "tokens.json"


@dataclass(frozen=True)
class Settings:
    """Runtime settings, normally loaded from the environment.

    Attributes:
        network: Network constants
        rpc_url: RPC endpoint (defaults to the network's public endpoint)
        rpc_timeout: Per-request HTTP timeout in seconds
        quote_timeout: Upper bound on the whole concurrent quote fan-out
        quote_workers: Maximum concurrent quote calls
        slippage_bps: Default slippage tolerance in basis points
        receipt_timeout: Seconds to wait for a transaction receipt
        private_key: Signing key; None means read-only operation
        debug: Verbose logging
        token_store_path: JSON file of curve tokens the user has bought
    """

    network: NetworkConfig = BASE
    rpc_url: str | None = None
    rpc_timeout: float = 10.0
    quote_timeout: float = 15.0
    quote_workers: int = 16
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS
    receipt_timeout: float = 120.0
    private_key: str | None = field(default=None, repr=False)
    debug: bool = False
    token_store_path: Path = field(default_factory=default_token_store_path)

    def __post_init__(self) -> None:
        if not 0 <= self.slippage_bps <= 10_000:
            raise ValueError(f"slippage_bps must be within 0..10000, got {self.slippage_bps}")
        if self.quote_workers < 1:
            raise ValueError(f"quote_workers must be positive, got {self.quote_workers}")
        if self.rpc_timeout <= 0 or self.quote_timeout <= 0 or self.receipt_timeout <= 0:
            raise ValueError("Timeouts must be positive")

    @property
    def effective_rpc_url(self) -> str:
        return self.rpc_url or self.network.rpc_url

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Variables:
        - MINTCLUB_NETWORK: network name (default: base)
        - MINTCLUB_RPC_URL: RPC endpoint override
        - MINTCLUB_RPC_TIMEOUT: per-request timeout in seconds (default: 10)
        - MINTCLUB_QUOTE_TIMEOUT: route search quote deadline (default: 15)
        - MINTCLUB_QUOTE_WORKERS: concurrent quote calls (default: 16)
        - MINTCLUB_SLIPPAGE_BPS: default slippage tolerance (default: 100)
        - MINTCLUB_RECEIPT_TIMEOUT: receipt wait in seconds (default: 120)
        - MINTCLUB_DEBUG: verbose logging
        - MINTCLUB_TOKEN_STORE: saved-token file (default: ~/.mintclub/tokens.json)
        - PRIVATE_KEY: signing key for write operations
        """
        env: Mapping[str, str] = os.environ if environ is None else environ
        return cls(
            network=get_network(env.get("MINTCLUB_NETWORK", BASE.name)),
            rpc_url=env.get("MINTCLUB_RPC_URL") or None,
            rpc_timeout=float(env.get("MINTCLUB_RPC_TIMEOUT", "10")),
            quote_timeout=float(env.get("MINTCLUB_QUOTE_TIMEOUT", "15")),
            quote_workers=int(env.get("MINTCLUB_QUOTE_WORKERS", "16")),
            slippage_bps=int(env.get("MINTCLUB_SLIPPAGE_BPS", str(DEFAULT_SLIPPAGE_BPS))),
            receipt_timeout=float(env.get("MINTCLUB_RECEIPT_TIMEOUT", "120")),
            private_key=env.get("PRIVATE_KEY") or None,
            debug=env.get("MINTCLUB_DEBUG", "false").lower() in ("true", "1", "yes"),
            token_store_path=(
                Path(env["MINTCLUB_TOKEN_STORE"]).expanduser()
                if env.get("MINTCLUB_TOKEN_STORE")
                else default_token_store_path()
            ),
        )


__all__ = [
    "FEE_LOWEST",
    "FEE_LOW",
    "FEE_MEDIUM",
    "FEE_HIGH",
    "FEE_TIERS",
    "DEFAULT_SLIPPAGE_BPS",
    "Intermediary",
    "KnownToken",
    "NetworkConfig",
    "BASE",
    "NETWORKS",
    "get_network",
    "default_token_store_path",
    "Settings",
]
