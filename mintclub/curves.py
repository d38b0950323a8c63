"""Bonding-curve step generation for new tokens.

The bond contract prices a token with a step function: stepRanges[i] is the
supply at which step i ends and stepPrices[i] the reserve cost per whole
token within it. The last range is the token's max supply.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from enum import Enum

from mintclub.errors import InvalidArgument

# Steps generated for every shaped curve; a flat curve is a single step
STEP_COUNT = 500

TOKEN_DECIMALS = 18


class CurveType(str, Enum):
    """Shape of the price curve between the initial and final price."""

    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    LOGARITHMIC = "logarithmic"
    FLAT = "flat"


@dataclass(frozen=True)
class CurveSteps:
    """Step ranges (token base units) and prices (reserve base units per token)."""

    ranges: tuple[int, ...]
    prices: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.ranges:
            raise InvalidArgument("A curve needs at least one step")
        if len(self.ranges) != len(self.prices):
            raise InvalidArgument(
                f"Got {len(self.ranges)} step ranges but {len(self.prices)} step prices"
            )
        previous = 0
        for rng in self.ranges:
            if rng <= previous:
                raise InvalidArgument("Step ranges must be positive and strictly increasing")
            previous = rng
        if any(price < 0 for price in self.prices):
            raise InvalidArgument("Step prices cannot be negative")

    @property
    def max_supply(self) -> int:
        return self.ranges[-1]


def _decimal(value: Decimal | str | int, what: str) -> Decimal:
    try:
        result = Decimal(value)
    except InvalidOperation:
        raise InvalidArgument(f"Invalid {what}: {value!r}") from None
    if not result.is_finite():
        raise InvalidArgument(f"Invalid {what}: {value!r}")
    return result


def _to_units(value: Decimal, decimals: int, what: str) -> int:
    scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise InvalidArgument(f"{what} {value} has more than {decimals} decimals")
    return int(scaled)


def _interpolate(curve: CurveType, p0: Decimal, p1: Decimal, t: Decimal) -> Decimal:
    if curve is CurveType.LINEAR:
        return p0 + (p1 - p0) * t
    if curve is CurveType.EXPONENTIAL:
        return p0 * (p1 / p0) ** t
    if curve is CurveType.LOGARITHMIC:
        # Steep early, flattening out: ln maps 1..e onto 0..1
        e = Decimal(1).exp()
        return p0 + (p1 - p0) * (1 + t * (e - 1)).ln()
    return p0


def generate_curve(
    curve: CurveType | str,
    max_supply: int,
    initial_price: Decimal | str,
    final_price: Decimal | str,
    reserve_decimals: int = TOKEN_DECIMALS,
) -> CurveSteps:
    """Build the step function of a standard curve shape.

    Supply is split into STEP_COUNT equal ranges (one for a flat curve).
    Each step is priced at the curve's value at the end of its range, so
    the last step always costs final_price.

    Args:
        curve: linear, exponential, logarithmic or flat
        max_supply: Max supply in token base units
        initial_price: Price per whole token at zero supply, in reserve tokens
        final_price: Price per whole token at max supply, in reserve tokens
        reserve_decimals: Decimals of the reserve token

    Raises:
        InvalidArgument: On an unknown curve, non-positive prices, a flat
            curve with two different prices, or a supply too small to split
    """
    try:
        curve = CurveType(curve)
    except ValueError:
        names = ", ".join(c.value for c in CurveType)
        raise InvalidArgument(f"Unknown curve {curve!r}. Use one of: {names}") from None

    p0 = _decimal(initial_price, "initial price")
    p1 = _decimal(final_price, "final price")
    if p0 <= 0 or p1 <= 0:
        raise InvalidArgument("Prices must be positive")
    if curve is CurveType.FLAT and p0 != p1:
        raise InvalidArgument("A flat curve needs the same initial and final price")

    steps = 1 if curve is CurveType.FLAT else STEP_COUNT
    if max_supply < steps:
        raise InvalidArgument(f"Max supply {max_supply} is too small for {steps} steps")

    ranges: list[int] = []
    prices: list[int] = []
    with localcontext() as ctx:
        ctx.prec = 50
        for i in range(steps):
            t = Decimal(i + 1) / steps
            price = _interpolate(curve, p0, p1, t)
            ranges.append(max_supply * (i + 1) // steps)
            prices.append(int(price.scaleb(reserve_decimals).to_integral_value()))

    return CurveSteps(tuple(ranges), tuple(prices))


def parse_steps(text: str, reserve_decimals: int = TOKEN_DECIMALS) -> CurveSteps:
    """Parse explicit steps written as "range:price,range:price,...".

    Ranges are whole-token supplies and prices are reserve tokens per whole
    token, both as decimal strings.

    Raises:
        InvalidArgument: On malformed entries or an invalid step sequence
    """
    ranges: list[int] = []
    prices: list[int] = []
    for entry in text.split(","):
        rng, sep, price = entry.strip().partition(":")
        if not sep or not rng.strip() or not price.strip():
            raise InvalidArgument(f'Invalid step "{entry.strip()}". Expected "range:price"')
        ranges.append(_to_units(_decimal(rng.strip(), "step range"), TOKEN_DECIMALS, "Range"))
        prices.append(_to_units(_decimal(price.strip(), "step price"), reserve_decimals, "Price"))
    return CurveSteps(tuple(ranges), tuple(prices))


__all__ = ["STEP_COUNT", "CurveType", "CurveSteps", "generate_curve", "parse_steps"]
