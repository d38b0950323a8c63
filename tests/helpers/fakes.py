"""In-memory ChainReader/ChainWriter for tests.

FakeChain plays both roles: configure view results with on_read(), simulated
results with on_simulate(), and inspect what was read, simulated and sent.
ERC-20 allowances are tracked so an approve() that is sent changes what
allowance() returns afterwards.

Usage:
    chain = FakeChain()
    chain.on_read(BOND, "tokenBond", (CREATOR, 100, 100, 1, HUNT, 0))
    chain.on_simulate(ZAP, "zapMint", (10 * ONE, 5 * ONE))
"""

from __future__ import annotations

from typing import Any

from mintclub.chain.client import ContractCall, Receipt
from mintclub.models.types import normalize_address
from tests.helpers.constants import USER

# A fixed result, a callable taking the call, or an exception to raise
Handler = Any


class FakeChain:
    """ChainReader and ChainWriter backed by dicts."""

    def __init__(self, sender: str = USER):
        self._address = normalize_address(sender)
        self.views: dict[tuple[str, str], Handler] = {}
        self.simulations: dict[tuple[str, str], Handler] = {}
        self.allowances: dict[tuple[str, str, str], int] = {}
        self.code: dict[str, bytes] = {}
        self.balances: dict[str, int] = {}
        self.failing_functions: set[str] = set()
        self.bonds: dict[str, tuple] = {}

        self.read_calls: list[ContractCall] = []
        self.simulated: list[tuple[ContractCall, str | None]] = []
        self.sent: list[ContractCall] = []
        self.sent_values: list[tuple[str, int]] = []
        self._tx_functions: dict[str, str] = {}

    # -- configuration -------------------------------------------------

    def on_read(self, address: str, function: str, result: Handler) -> None:
        self.views[(normalize_address(address), function)] = result

    def on_simulate(self, address: str, function: str, result: Handler) -> None:
        self.simulations[(normalize_address(address), function)] = result

    def set_allowance(self, token: str, spender: str, amount: int, owner: str | None = None) -> None:
        owner = owner or self._address
        key = (normalize_address(token), normalize_address(owner), normalize_address(spender))
        self.allowances[key] = amount

    def get_allowance(self, token: str, spender: str, owner: str | None = None) -> int:
        owner = owner or self._address
        key = (normalize_address(token), normalize_address(owner), normalize_address(spender))
        return self.allowances.get(key, 0)

    @staticmethod
    def _resolve(handler: Handler, call: ContractCall) -> Any:
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(call)
        return handler

    # -- inspection ----------------------------------------------------

    @property
    def sent_functions(self) -> list[str]:
        return [call.function for call in self.sent]

    def sent_call(self, function: str) -> ContractCall:
        """The single sent call with the given function name."""
        matches = [call for call in self.sent if call.function == function]
        assert len(matches) == 1, f"expected one {function} call, got {len(matches)}"
        return matches[0]

    def simulated_calls(self, function: str) -> list[ContractCall]:
        return [call for call, _ in self.simulated if call.function == function]

    # -- ChainReader -----------------------------------------------------

    def read(self, call: ContractCall) -> Any:
        self.read_calls.append(call)
        if call.function == "allowance" and (normalize_address(call.address), "allowance") not in self.views:
            owner, spender = call.args
            return self.get_allowance(call.address, spender, owner)
        key = (normalize_address(call.address), call.function)
        if key not in self.views:
            raise KeyError(f"No fake view configured for {key}")
        return self._resolve(self.views[key], call)

    def simulate(self, call: ContractCall, sender: str | None = None) -> Any:
        self.simulated.append((call, sender))
        key = (normalize_address(call.address), call.function)
        if key in self.simulations:
            return self._resolve(self.simulations[key], call)
        if key in self.views:
            return self._resolve(self.views[key], call)
        if call.function in ("approve", "transfer"):
            return True
        return None

    def get_balance(self, address: str) -> int:
        return self.balances.get(normalize_address(address), 0)

    def get_code(self, address: str) -> bytes:
        return self.code.get(normalize_address(address), b"")

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Receipt:
        function = self._tx_functions[tx_hash]
        status = 0 if function in self.failing_functions else 1
        return Receipt(tx_hash=tx_hash, status=status, block_number=1000 + len(self._tx_functions))

    def decode_revert_reason(self, error: Exception) -> str:
        return str(error)

    # -- ChainWriter -----------------------------------------------------

    @property
    def address(self) -> str:
        return self._address

    def _record_tx(self, function: str) -> str:
        tx_hash = "0x" + f"{len(self._tx_functions) + 1:064x}"
        self._tx_functions[tx_hash] = function
        return tx_hash

    def send(self, call: ContractCall) -> str:
        self.sent.append(call)
        if call.function == "approve" and "approve" not in self.failing_functions:
            spender, amount = call.args
            self.set_allowance(call.address, spender, amount)
        return self._record_tx(call.function)

    def send_value(self, to: str, amount: int) -> str:
        self.sent_values.append((normalize_address(to), amount))
        return self._record_tx("transfer_native")


__all__ = ["FakeChain"]
