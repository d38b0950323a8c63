"""Chain access interfaces and their web3 implementations.

Components never hold a global client. They take a ChainReader (read-only
and simulated calls) and, when they write, a ChainWriter (holds the signing
identity), both passed in explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import structlog
from eth_account import Account
from web3 import Web3
from web3.exceptions import ContractCustomError, ContractLogicError, TimeExhausted

from mintclub.models.types import is_valid_address, normalize_address

logger = structlog.get_logger()


@dataclass(frozen=True)
class ContractCall:
    """A contract function invocation, independent of any client.

    Attributes:
        address: Target contract
        abi: ABI fragment list containing the function
        function: Function name
        args: Positional arguments; addresses may be any case
        value: Native amount attached to the call
    """

    address: str
    abi: list[dict[str, Any]] = field(repr=False, hash=False, compare=False)
    function: str
    args: tuple[Any, ...] = ()
    value: int = 0


@dataclass(frozen=True)
class Receipt:
    """The parts of a transaction receipt the executor looks at."""

    tx_hash: str
    status: int
    block_number: int
    gas_used: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == 1


class ChainReader(Protocol):
    """Read-only chain access."""

    def read(self, call: ContractCall) -> Any:
        """Execute a view call and return the decoded output."""
        ...

    def simulate(self, call: ContractCall, sender: str | None = None) -> Any:
        """Execute a state-changing call without broadcasting it.

        Raises whatever the transport raises on revert; use
        decode_revert_reason() to turn it into a readable reason.
        """
        ...

    def get_balance(self, address: str) -> int:
        """Native balance in wei."""
        ...

    def get_code(self, address: str) -> bytes:
        """Deployed bytecode (empty for accounts without code)."""
        ...

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Receipt:
        """Block until the transaction is mined."""
        ...

    def decode_revert_reason(self, error: Exception) -> str:
        """Extract a human-readable revert reason from a failed call."""
        ...


class ChainWriter(Protocol):
    """Transaction submission with a signing identity."""

    @property
    def address(self) -> str:
        """Address of the signing account."""
        ...

    def send(self, call: ContractCall) -> str:
        """Sign and broadcast a contract call. Returns the transaction hash."""
        ...

    def send_value(self, to: str, amount: int) -> str:
        """Sign and broadcast a plain native transfer. Returns the transaction hash."""
        ...


def connect(rpc_url: str, timeout: float = 10.0) -> Web3:
    """Create a Web3 instance with a bounded per-request timeout."""
    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))


def to_web3_arg(value: Any) -> Any:
    """Checksum address strings (recursively) so web3 accepts them."""
    if isinstance(value, str) and is_valid_address(value):
        return Web3.to_checksum_address(value)
    if isinstance(value, tuple):
        return tuple(to_web3_arg(v) for v in value)
    if isinstance(value, list):
        return [to_web3_arg(v) for v in value]
    return value


def decode_revert_reason(error: Exception) -> str:
    """Turn a web3 call failure into a revert reason string.

    Standard Error(string) reverts come back from web3 as
    "execution reverted: <reason>"; the prefix is stripped. Custom errors
    keep their selector data so callers can still tell them apart.
    """
    if isinstance(error, ContractCustomError):
        data = error.data if isinstance(error.data, str) else None
        return f"custom error {data}" if data else str(error)
    if isinstance(error, ContractLogicError):
        message = error.message or str(error)
        prefix = "execution reverted: "
        if message.startswith(prefix):
            return message[len(prefix) :]
        return message
    return str(error) or type(error).__name__


class Web3ChainReader:
    """ChainReader backed by a web3 HTTP provider."""

    def __init__(self, w3: Web3):
        self.w3 = w3

    @classmethod
    def from_url(cls, rpc_url: str, timeout: float = 10.0) -> Web3ChainReader:
        return cls(connect(rpc_url, timeout))

    def _function(self, call: ContractCall) -> Any:
        contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(call.address), abi=call.abi
        )
        fn = contract.get_function_by_name(call.function)
        return fn(*to_web3_arg(call.args))

    def read(self, call: ContractCall) -> Any:
        return self._function(call).call()

    def simulate(self, call: ContractCall, sender: str | None = None) -> Any:
        tx: dict[str, Any] = {"value": call.value}
        if sender is not None:
            tx["from"] = Web3.to_checksum_address(sender)
        return self._function(call).call(tx)

    def get_balance(self, address: str) -> int:
        return int(self.w3.eth.get_balance(Web3.to_checksum_address(address)))

    def get_code(self, address: str) -> bytes:
        return bytes(self.w3.eth.get_code(Web3.to_checksum_address(address)))

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Receipt:
        try:
            raw = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)  # type: ignore[arg-type]
        except TimeExhausted:
            logger.error("receipt_timeout", tx_hash=tx_hash, timeout=timeout)
            raise
        return Receipt(
            tx_hash=tx_hash,
            status=int(raw["status"]),
            block_number=int(raw["blockNumber"]),
            gas_used=int(raw.get("gasUsed", 0)),
        )

    def decode_revert_reason(self, error: Exception) -> str:
        return decode_revert_reason(error)


class Web3ChainWriter:
    """ChainWriter that signs locally with a private key."""

    def __init__(self, w3: Web3, private_key: str, chain_id: int):
        self.w3 = w3
        self.account = Account.from_key(private_key)
        self.chain_id = chain_id

    @property
    def address(self) -> str:
        return normalize_address(self.account.address)

    def _base_tx(self, value: int) -> dict[str, Any]:
        return {
            "from": self.account.address,
            "value": value,
            "nonce": self.w3.eth.get_transaction_count(self.account.address, "pending"),
            "chainId": self.chain_id,
        }

    def _sign_and_send(self, tx: dict[str, Any]) -> str:
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)

    def send(self, call: ContractCall) -> str:
        contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(call.address), abi=call.abi
        )
        fn = contract.get_function_by_name(call.function)(*to_web3_arg(call.args))
        tx = fn.build_transaction(self._base_tx(call.value))
        return self._sign_and_send(tx)

    def send_value(self, to: str, amount: int) -> str:
        tx = self._base_tx(amount)
        tx["to"] = Web3.to_checksum_address(to)
        tx["gas"] = self.w3.eth.estimate_gas(tx)  # type: ignore[arg-type]
        tx["gasPrice"] = self.w3.eth.gas_price
        return self._sign_and_send(tx)


__all__ = [
    "ContractCall",
    "Receipt",
    "ChainReader",
    "ChainWriter",
    "connect",
    "to_web3_arg",
    "decode_revert_reason",
    "Web3ChainReader",
    "Web3ChainWriter",
]
