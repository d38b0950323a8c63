"""Token resolution and the saved-token store.

Symbols of well-known tokens map to fixed addresses. Any other symbol is
resolved to the deterministic address of the curve token with that
symbol: the bond contract deploys every curve token as a minimal-proxy
clone via CREATE2 with salt keccak256(abi.encodePacked(bond, symbol)).
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Protocol

import structlog
from web3 import Web3

from mintclub.bond import BondClient
from mintclub.chain.abis import ERC20_ABI
from mintclub.chain.client import ChainReader, ContractCall
from mintclub.config import KnownToken, NetworkConfig
from mintclub.errors import InvalidArgument
from mintclub.models.types import address_bytes, is_valid_address, normalize_address

logger = structlog.get_logger()

# Minimal proxy creation code around the 20-byte implementation address
CLONE_PREFIX = bytes.fromhex("3d602d80600a3d3981f3363d3d373d3d3d363d73")
CLONE_SUFFIX = bytes.fromhex("5af43d82803e903d91602b57fd5bf3")


def find_known_token(network: NetworkConfig, symbol_or_address: str) -> KnownToken | None:
    """Well-known token by case-insensitive symbol or by address."""
    if is_valid_address(symbol_or_address):
        address = normalize_address(symbol_or_address)
        for token in network.tokens:
            if token.address == address:
                return token
        return None
    for token in network.tokens:
        if token.symbol.upper() == symbol_or_address.upper():
            return token
    return None


def token_symbol(network: NetworkConfig, address: str) -> str:
    """Known symbol for an address, or a shortened address."""
    known = find_known_token(network, address)
    if known is not None:
        return known.symbol
    return f"{address[:6]}...{address[-4:]}"


def token_decimals(network: NetworkConfig, address: str) -> int:
    """Known decimals for an address (18 if unknown)."""
    known = find_known_token(network, address)
    return known.decimals if known is not None else 18


def predict_token_address(bond: str, implementation: str, symbol: str) -> str:
    """Deterministic address of the curve token with the given symbol.

    Args:
        bond: Bond contract (the CREATE2 deployer)
        implementation: Token implementation the clone delegates to
        symbol: Exact token symbol (case-sensitive)

    Returns:
        Lowercase predicted address
    """
    salt = Web3.solidity_keccak(["address", "string"], [Web3.to_checksum_address(bond), symbol])
    init_code = CLONE_PREFIX + address_bytes(implementation) + CLONE_SUFFIX
    init_code_hash = Web3.keccak(init_code)
    digest = Web3.keccak(b"\xff" + address_bytes(bond) + bytes(salt) + bytes(init_code_hash))
    return "0x" + bytes(digest)[12:].hex()


class TokenResolver:
    """Resolves symbols to addresses, falling back to on-chain curve tokens."""

    def __init__(self, reader: ChainReader, bond: BondClient, network: NetworkConfig):
        self.reader = reader
        self.bond = bond
        self.network = network
        self._implementation: str | None = None
        self._decimals: dict[str, int] = {}

    def implementation(self) -> str:
        if self._implementation is None:
            self._implementation = self.bond.token_implementation()
        return self._implementation

    def resolve(self, value: str) -> str:
        """Resolve an address, well-known symbol or curve-token symbol.

        The exact symbol is tried first, then its uppercase form. A
        predicted address is accepted only if code is deployed there.

        Raises:
            InvalidArgument: If nothing matches
        """
        if is_valid_address(value):
            return normalize_address(value)
        known = find_known_token(self.network, value)
        if known is not None:
            return known.address

        candidates = [value]
        if value != value.upper():
            candidates.append(value.upper())

        implementation = self.implementation()
        for symbol in candidates:
            predicted = predict_token_address(self.network.bond, implementation, symbol)
            if self.reader.get_code(predicted):
                logger.debug("token_resolved", symbol=symbol, address=predicted)
                return predicted

        symbols = ", ".join(t.symbol for t in self.network.tokens)
        raise InvalidArgument(
            f'Token "{value}" not found on Mint Club. '
            f"Use a contract address, or one of: {symbols}"
        )

    def symbol(self, address: str) -> str:
        """On-chain ERC-20 symbol, falling back to the offline lookup."""
        known = find_known_token(self.network, address)
        if known is not None:
            return known.symbol
        try:
            return str(self.reader.read(ContractCall(address, ERC20_ABI, "symbol")))
        except Exception as e:
            logger.debug("symbol_read_failed", token=address, error=str(e))
            return token_symbol(self.network, address)

    def decimals(self, address: str) -> int:
        """On-chain ERC-20 decimals, falling back to the offline lookup.

        Well-known tokens (native ETH included) never touch the chain.
        """
        address = normalize_address(address)
        known = find_known_token(self.network, address)
        if known is not None:
            return known.decimals
        if address not in self._decimals:
            try:
                self._decimals[address] = int(
                    self.reader.read(ContractCall(address, ERC20_ABI, "decimals"))
                )
            except Exception as e:
                logger.debug("decimals_read_failed", token=address, error=str(e))
                return token_decimals(self.network, address)
        return self._decimals[address]


class TokenStore(Protocol):
    """Key-value store of tokens the user has interacted with."""

    def has(self, address: str) -> bool: ...

    def put(self, address: str, symbol: str) -> None: ...

    def saved(self) -> dict[str, str]: ...


class InMemoryTokenStore:
    """TokenStore kept in a dict; the default when nothing is persisted."""

    def __init__(self) -> None:
        self.tokens: dict[str, str] = {}

    def has(self, address: str) -> bool:
        return normalize_address(address) in self.tokens

    def put(self, address: str, symbol: str) -> None:
        self.tokens[normalize_address(address)] = symbol

    def saved(self) -> dict[str, str]:
        return dict(self.tokens)


class JsonTokenStore:
    """TokenStore persisted as a JSON object {address: symbol}."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open() as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Token store {self.path} is not a JSON object")
        return {normalize_address(k): str(v) for k, v in data.items()}

    def has(self, address: str) -> bool:
        with self._lock:
            return normalize_address(address) in self._load()

    def put(self, address: str, symbol: str) -> None:
        with self._lock:
            data = self._load()
            data[normalize_address(address)] = symbol
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            with tmp.open("w") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            tmp.replace(self.path)

    def saved(self) -> dict[str, str]:
        with self._lock:
            return self._load()


__all__ = [
    "find_known_token",
    "token_symbol",
    "token_decimals",
    "predict_token_address",
    "TokenResolver",
    "TokenStore",
    "InMemoryTokenStore",
    "JsonTokenStore",
]
