"""Error classes for Mint Club operations.

Every failure that leaves an operation is a MintClubError. A candidate
that cannot be quoted is not an error: quoters return None for it and the
route search drops it.
"""

from __future__ import annotations

from typing import Any


class MintClubError(Exception):
    """Base error for Mint Club operations."""

    pass


class InvalidArgument(MintClubError, ValueError):
    """Malformed input: bad path string, mismatched lengths, non-positive amount."""

    pass


class NoRouteFound(MintClubError):
    """Route search exhausted every candidate without a viable quote."""

    def __init__(self, token_in: str, token_out: str, amount_in: int, candidates: int = 0):
        self.token_in = token_in
        self.token_out = token_out
        self.amount_in = amount_in
        self.candidates = candidates
        super().__init__(
            f"No swap route found from {token_in} to {token_out} "
            f"for amount {amount_in} ({candidates} candidates checked)"
        )


class NotACurveToken(MintClubError):
    """Token has no bond record on the bonding-curve contract."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"{token} is not a bonding curve token")


class PriceBoundExceeded(MintClubError):
    """Quoted amount violates a caller-supplied bound before anything is sent."""

    def __init__(self, message: str, quoted: int, bound: int):
        self.quoted = quoted
        self.bound = bound
        super().__init__(message)


class SimulationReverted(MintClubError):
    """Pre-broadcast simulation rejected the call. Nothing was sent."""

    def __init__(self, reason: str, function: str | None = None):
        self.reason = reason
        self.function = function
        prefix = f"{function}: " if function else ""
        super().__init__(f"{prefix}simulation reverted: {reason}")


class TransactionFailed(MintClubError):
    """Transaction was mined but the receipt reports failure. Gas was spent."""

    def __init__(self, tx_hash: str, receipt: Any = None):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(f"Transaction {tx_hash} failed on-chain")


class ApprovalFailed(MintClubError):
    """The approve-if-needed step failed; the main operation was not attempted."""

    def __init__(self, token: str, spender: str, cause: Exception):
        self.token = token
        self.spender = spender
        self.cause = cause
        super().__init__(f"Approval of {token} for {spender} failed: {cause}")


__all__ = [
    "MintClubError",
    "InvalidArgument",
    "NoRouteFound",
    "NotACurveToken",
    "PriceBoundExceeded",
    "SimulationReverted",
    "TransactionFailed",
    "ApprovalFailed",
]
