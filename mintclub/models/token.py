"""Token metadata and wallet balance models."""

from __future__ import annotations

from dataclasses import dataclass, field

from mintclub.models.bond import BondInfo


@dataclass(frozen=True)
class CurveStep:
    """One step of a bonding curve: price per whole token up to range_to."""

    range_to: int
    price: int


@dataclass(frozen=True)
class TokenInfo:
    """ERC-20 metadata of a curve token together with its bond state.

    Attributes:
        total_supply: Current supply in base units
        max_supply: Supply cap from the bond, in base units
        price: Cost of the next whole token in reserve units, or None when
            the bond will not quote one (e.g. at max supply)
        steps: The curve's step function
    """

    token: str
    name: str
    symbol: str
    decimals: int
    total_supply: int
    max_supply: int
    bond: BondInfo
    price: int | None = None
    steps: list[CurveStep] = field(default_factory=list)


@dataclass(frozen=True)
class TokenBalance:
    token: str
    symbol: str
    decimals: int
    balance: int


__all__ = ["CurveStep", "TokenInfo", "TokenBalance"]
