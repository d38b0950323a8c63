"""Execution plan data structures.

An ExecutionPlan is the ordered (command, payload) list handed to the
execution router, either directly via execute() or embedded in a zap call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TxIntent(str, Enum):
    """What a plan is for."""

    SWAP = "swap"
    ZAP_MINT = "zap_mint"
    ZAP_BURN = "zap_burn"


@dataclass(frozen=True)
class ExecutionStep:
    """One router command and its ABI-encoded input."""

    command: int
    payload: bytes

    def __post_init__(self) -> None:
        if not 0 <= self.command <= 0xFF:
            raise ValueError(f"Command must be a single byte, got {self.command}")


@dataclass(frozen=True)
class ApprovalRequirement:
    """An ERC-20 allowance the caller must grant before the plan can run."""

    token: str
    spender: str
    amount: int


@dataclass
class ExecutionPlan:
    """Ordered router steps plus the native value and deadline for the call.

    Attributes:
        intent: Plain swap or one of the zap flavours
        steps: Router commands in execution order
        value: Native amount attached to the outer call
        deadline: Unix timestamp after which the router rejects the call
        approval: Allowance needed before submission, if any
        spender: Contract that receives the call (router or zap contract)
    """

    intent: TxIntent
    steps: list[ExecutionStep]
    value: int
    deadline: int
    spender: str
    approval: ApprovalRequirement | None = None
    min_amount_out: int = 0
    notes: list[str] = field(default_factory=list)

    @property
    def commands(self) -> bytes:
        """Single-byte opcodes concatenated in execution order."""
        return bytes(step.command for step in self.steps)

    @property
    def inputs(self) -> list[bytes]:
        return [step.payload for step in self.steps]

    @property
    def command_codes(self) -> list[int]:
        return [step.command for step in self.steps]


__all__ = ["TxIntent", "ExecutionStep", "ApprovalRequirement", "ExecutionPlan"]
