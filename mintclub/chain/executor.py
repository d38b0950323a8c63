"""Transaction execution: simulate, approve-if-needed, submit, confirm.

Each operation walks Built -> Simulated -> Submitted -> Confirmed | Reverted.
A simulation revert stops before anything is broadcast and is never
retried; a mined receipt with failure status is reported separately since
gas was spent.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from mintclub.chain.abis import ERC20_ABI
from mintclub.chain.client import ChainReader, ChainWriter, ContractCall, Receipt
from mintclub.errors import (
    ApprovalFailed,
    MintClubError,
    SimulationReverted,
    TransactionFailed,
)
from mintclub.models.plan import ApprovalRequirement
from mintclub.models.types import UINT256_MAX, normalize_address

logger = structlog.get_logger()

DEFAULT_RECEIPT_TIMEOUT = 120.0


class TxState(str, Enum):
    """Lifecycle of a submitted operation."""

    BUILT = "built"
    SIMULATED = "simulated"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    REVERTED = "reverted"


@dataclass
class TxResult:
    """Outcome of one executed call.

    Attributes:
        function: Contract function that was called
        state: Final lifecycle state
        simulated: Decoded return value from the pre-broadcast simulation
        tx_hash: Transaction hash once submitted
        receipt: Mined receipt once confirmed
    """

    function: str
    state: TxState = TxState.BUILT
    simulated: Any = None
    tx_hash: str | None = None
    receipt: Receipt | None = None


class TransactionExecutor:
    """Runs contract calls through simulate -> submit -> confirm."""

    def __init__(
        self,
        reader: ChainReader,
        writer: ChainWriter,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ):
        self.reader = reader
        self.writer = writer
        self.receipt_timeout = receipt_timeout

    @property
    def sender(self) -> str:
        return self.writer.address

    def simulate(self, call: ContractCall) -> Any:
        """Run the call against current state without broadcasting.

        Raises:
            SimulationReverted: With the decoded revert reason
        """
        try:
            return self.reader.simulate(call, sender=self.sender)
        except MintClubError:
            raise
        except Exception as e:
            reason = self.reader.decode_revert_reason(e)
            logger.warning(
                "simulation_reverted",
                function=call.function,
                contract=call.address,
                reason=reason,
            )
            raise SimulationReverted(reason, call.function) from e

    def execute(self, call: ContractCall) -> TxResult:
        """Simulate, submit and wait for the receipt.

        Returns:
            TxResult in CONFIRMED state

        Raises:
            SimulationReverted: If the simulation reverts (nothing sent)
            TransactionFailed: If the mined receipt reports failure
        """
        result = TxResult(function=call.function)

        result.simulated = self.simulate(call)
        result.state = TxState.SIMULATED

        result.tx_hash = self.writer.send(call)
        result.state = TxState.SUBMITTED
        logger.info(
            "tx_submitted",
            function=call.function,
            contract=call.address,
            tx_hash=result.tx_hash,
            value=call.value,
        )

        return self._confirm(result)

    def send_value(self, to: str, amount: int) -> TxResult:
        """Transfer native value; plain transfers have nothing to simulate."""
        result = TxResult(function="transfer_native", state=TxState.SIMULATED)
        result.tx_hash = self.writer.send_value(to, amount)
        result.state = TxState.SUBMITTED
        logger.info("tx_submitted", function=result.function, to=to, value=amount, tx_hash=result.tx_hash)
        return self._confirm(result)

    def _confirm(self, result: TxResult) -> TxResult:
        assert result.tx_hash is not None
        receipt = self.reader.wait_for_receipt(result.tx_hash, self.receipt_timeout)
        result.receipt = receipt
        if not receipt.succeeded:
            result.state = TxState.REVERTED
            logger.error(
                "tx_reverted",
                function=result.function,
                tx_hash=result.tx_hash,
                block=receipt.block_number,
            )
            raise TransactionFailed(result.tx_hash, receipt)
        result.state = TxState.CONFIRMED
        logger.info(
            "tx_confirmed",
            function=result.function,
            tx_hash=result.tx_hash,
            block=receipt.block_number,
            gas_used=receipt.gas_used,
        )
        return result

    def allowance(self, token: str, spender: str) -> int:
        call = ContractCall(token, ERC20_ABI, "allowance", (self.sender, spender))
        return int(self.reader.read(call))

    def ensure_approval(self, token: str, spender: str, amount: int) -> TxResult | None:
        """Approve spender for unlimited allowance if the current one is short.

        Returns:
            The approval TxResult, or None when the allowance already covers amount

        Raises:
            ApprovalFailed: If reading, simulating or submitting the approval fails
        """
        token = normalize_address(token)
        spender = normalize_address(spender)
        try:
            current = self.allowance(token, spender)
            if current >= amount:
                logger.debug("allowance_sufficient", token=token, spender=spender, allowance=current)
                return None

            logger.info("approval_required", token=token, spender=spender, allowance=current, amount=amount)
            call = ContractCall(token, ERC20_ABI, "approve", (spender, UINT256_MAX))
            return self.execute(call)
        except ApprovalFailed:
            raise
        except Exception as e:
            logger.error("approval_failed", token=token, spender=spender, error=str(e))
            raise ApprovalFailed(token, spender, e) from e

    def ensure_requirement(self, requirement: ApprovalRequirement | None) -> TxResult | None:
        """ensure_approval() for a plan's approval requirement, if it has one."""
        if requirement is None:
            return None
        return self.ensure_approval(requirement.token, requirement.spender, requirement.amount)


__all__ = [
    "DEFAULT_RECEIPT_TIMEOUT",
    "TxState",
    "TxResult",
    "TransactionExecutor",
]
