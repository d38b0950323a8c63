"""Bond contract read models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BondInfo:
    """The bond record of a curve token, as returned by tokenBond()."""

    token: str
    creator: str
    mint_royalty_bps: int
    burn_royalty_bps: int
    created_at: int
    reserve_token: str
    reserve_balance: int

    @property
    def exists(self) -> bool:
        """A zero creation timestamp means the token has no bond."""
        return self.created_at != 0


@dataclass(frozen=True)
class MintCost:
    """Reserve needed to mint a number of tokens."""

    tokens: int
    reserve_amount: int
    royalty: int

    @property
    def total_cost(self) -> int:
        return self.reserve_amount + self.royalty


@dataclass(frozen=True)
class BurnRefund:
    """Reserve returned for burning a number of tokens.

    refund_amount is already net of the burn royalty.
    """

    tokens: int
    refund_amount: int
    royalty: int


@dataclass(frozen=True)
class TokenPrice:
    """Price of one whole curve token in its reserve token."""

    token: str
    reserve_token: str
    price: int
    reserve_balance: int
    mint_royalty_bps: int
    burn_royalty_bps: int


__all__ = ["BondInfo", "MintCost", "BurnRefund", "TokenPrice"]
