"""Read interface to the bonding-curve contract.

The bond contract is ground truth for pricing; this module only reads it.
Mint and burn transactions are issued by the service layer.
"""

from __future__ import annotations

import structlog

from mintclub.chain.abis import BOND_ABI
from mintclub.chain.client import ChainReader, ContractCall
from mintclub.config import NetworkConfig
from mintclub.errors import InvalidArgument, NotACurveToken
from mintclub.models.bond import BondInfo, BurnRefund, MintCost, TokenPrice
from mintclub.models.token import CurveStep
from mintclub.models.types import normalize_address

logger = structlog.get_logger()

# One whole token in base units (curve tokens use 18 decimals)
UNIT = 10**18

# Doubling from UNIT this many times passes the uint128 supply limit
MAX_DOUBLINGS = 72


class BondClient:
    """Typed wrapper over the bond contract's read functions."""

    def __init__(self, reader: ChainReader, network: NetworkConfig):
        self.reader = reader
        self.network = network

    def _call(self, function: str, *args: object) -> ContractCall:
        return ContractCall(self.network.bond, BOND_ABI, function, args)

    def token_bond(self, token: str) -> BondInfo:
        """Read the raw bond record. A zero created_at means no bond."""
        token = normalize_address(token, validate=True)
        creator, mint_royalty, burn_royalty, created_at, reserve_token, reserve_balance = (
            self.reader.read(self._call("tokenBond", token))
        )
        return BondInfo(
            token=token,
            creator=normalize_address(creator),
            mint_royalty_bps=int(mint_royalty),
            burn_royalty_bps=int(burn_royalty),
            created_at=int(created_at),
            reserve_token=normalize_address(reserve_token),
            reserve_balance=int(reserve_balance),
        )

    def get_bond_or_none(self, token: str) -> BondInfo | None:
        """Bond record if the token is a curve token, else None."""
        bond = self.token_bond(token)
        return bond if bond.exists else None

    def require_bond(self, token: str) -> BondInfo:
        """Bond record of a curve token.

        Raises:
            NotACurveToken: If the token has no bond
        """
        bond = self.get_bond_or_none(token)
        if bond is None:
            raise NotACurveToken(normalize_address(token))
        return bond

    def mint_cost(self, token: str, tokens_to_mint: int) -> MintCost:
        """Reserve and royalty needed to mint tokens_to_mint."""
        _require_positive(tokens_to_mint, "tokens_to_mint")
        reserve_amount, royalty = self.reader.read(
            self._call("getReserveForToken", token, tokens_to_mint)
        )
        return MintCost(tokens_to_mint, int(reserve_amount), int(royalty))

    def burn_refund(self, token: str, tokens_to_burn: int) -> BurnRefund:
        """Reserve returned for burning tokens_to_burn, net of royalty."""
        _require_positive(tokens_to_burn, "tokens_to_burn")
        refund_amount, royalty = self.reader.read(
            self._call("getRefundForTokens", token, tokens_to_burn)
        )
        return BurnRefund(tokens_to_burn, int(refund_amount), int(royalty))

    def price(self, token: str) -> TokenPrice:
        """Cost of minting one whole token, in reserve token units.

        Raises:
            NotACurveToken: If the token has no bond
        """
        bond = self.require_bond(token)
        cost = self.mint_cost(bond.token, UNIT)
        return TokenPrice(
            token=bond.token,
            reserve_token=bond.reserve_token,
            price=cost.reserve_amount,
            reserve_balance=bond.reserve_balance,
            mint_royalty_bps=bond.mint_royalty_bps,
            burn_royalty_bps=bond.burn_royalty_bps,
        )

    def token_implementation(self) -> str:
        """Implementation contract that curve tokens are cloned from."""
        return normalize_address(self.reader.read(self._call("tokenImplementation")))

    def creation_fee(self) -> int:
        """Native fee charged by createToken."""
        return int(self.reader.read(self._call("creationFee")))

    def max_supply(self, token: str) -> int:
        token = normalize_address(token, validate=True)
        return int(self.reader.read(self._call("maxSupply", token)))

    def steps(self, token: str) -> list[CurveStep]:
        """The curve's step function, in order."""
        token = normalize_address(token, validate=True)
        return [
            CurveStep(int(range_to), int(price))
            for range_to, price in self.reader.read(self._call("getSteps", token))
        ]

    def _fits(self, token: str, tokens: int, reserve_amount: int) -> bool:
        try:
            cost = self.mint_cost(token, tokens)
        except Exception as e:
            # Reverts past max supply; treat as too expensive
            logger.debug("mint_cost_reverted", token=token, tokens=tokens, error=str(e))
            return False
        return cost.total_cost <= reserve_amount

    def estimate_tokens_for_reserve(self, token: str, reserve_amount: int) -> int:
        """Largest token amount whose total mint cost fits in reserve_amount.

        Doubles from one whole token until the cost exceeds reserve_amount
        (or the bond reverts), then binary searches between zero and that
        bound. Amounts are compared in the reserve token's own base units, so
        reserves with any number of decimals work. Returns 0 if not even one
        base unit of the token is affordable.
        """
        _require_positive(reserve_amount, "reserve_amount")
        token = normalize_address(token, validate=True)

        lo = 0
        hi = UNIT
        for _ in range(MAX_DOUBLINGS):
            if not self._fits(token, hi, reserve_amount):
                break
            lo = hi
            hi *= 2
        else:
            # Cost never exceeded the reserve; report the last affordable bound
            logger.warning("estimate_unbounded", token=token, tokens=lo)
            return lo

        # lo always fits (or is zero), hi never does
        while hi - lo > 1:
            mid = (lo + hi) // 2
            if self._fits(token, mid, reserve_amount):
                lo = mid
            else:
                hi = mid

        logger.debug(
            "estimate_tokens_for_reserve",
            token=token,
            reserve_amount=reserve_amount,
            tokens=lo,
        )
        return lo


def _require_positive(amount: int, name: str) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise InvalidArgument(f"{name} must be a positive integer, got {amount!r}")


__all__ = ["UNIT", "BondClient"]
