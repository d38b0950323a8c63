"""Route data structures: swap paths, singleton pool keys and search results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from mintclub.errors import InvalidArgument
from mintclub.models.types import ZERO_ADDRESS, is_native, is_valid_address, normalize_address

# Fee is encoded as uint24 in packed paths
MAX_FEE = 2**24 - 1


def format_fee(fee: int) -> str:
    """Format a fee in hundredths of a basis point as a percent string.

    100 -> '0.01%', 3000 -> '0.3%', 10000 -> '1%'
    """
    return f"{fee / 10000:g}%"


@dataclass(frozen=True)
class SwapPath:
    """An ordered token sequence with one fee tier per hop.

    Tokens are stored lowercase. The native sentinel is never allowed
    inside a path; callers substitute wrapped-native first.
    """

    tokens: tuple[str, ...]
    fees: tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.tokens) < 2:
            raise InvalidArgument("A swap path needs at least two tokens")
        if len(self.tokens) != len(self.fees) + 1:
            raise InvalidArgument(
                f"tokens.length must equal fees.length + 1 "
                f"(got {len(self.tokens)} tokens, {len(self.fees)} fees)"
            )
        for token in self.tokens:
            if not is_valid_address(token):
                raise InvalidArgument(f"Invalid token address in path: {token}")
            if is_native(token):
                raise InvalidArgument("Native asset cannot appear in a swap path")
        for fee in self.fees:
            if not isinstance(fee, int) or isinstance(fee, bool) or not 0 < fee <= MAX_FEE:
                raise InvalidArgument(f"Invalid fee tier: {fee}")
        object.__setattr__(self, "tokens", tuple(normalize_address(t) for t in self.tokens))
        object.__setattr__(self, "fees", tuple(self.fees))

    @property
    def token_in(self) -> str:
        return self.tokens[0]

    @property
    def token_out(self) -> str:
        return self.tokens[-1]

    @property
    def hops(self) -> int:
        return len(self.fees)


@dataclass(frozen=True)
class PoolKey:
    """Identity of a singleton-model pool.

    Currencies are in canonical ascending order; the native sentinel
    (address zero) always sorts first.
    """

    currency0: str
    currency1: str
    fee: int
    tick_spacing: int
    hooks: str = ZERO_ADDRESS

    def __post_init__(self) -> None:
        for currency in (self.currency0, self.currency1, self.hooks):
            if not is_valid_address(currency):
                raise InvalidArgument(f"Invalid address in pool key: {currency}")
        c0 = normalize_address(self.currency0)
        c1 = normalize_address(self.currency1)
        if int(c0, 16) >= int(c1, 16):
            raise InvalidArgument(f"Pool key currencies out of order: {c0} >= {c1}")
        if not 0 <= self.fee <= MAX_FEE:
            raise InvalidArgument(f"Invalid pool fee: {self.fee}")
        object.__setattr__(self, "currency0", c0)
        object.__setattr__(self, "currency1", c1)
        object.__setattr__(self, "hooks", normalize_address(self.hooks))

    @classmethod
    def for_pair(
        cls,
        token_a: str,
        token_b: str,
        fee: int,
        tick_spacing: int,
        hooks: str = ZERO_ADDRESS,
    ) -> PoolKey:
        """Build a pool key from an unordered token pair."""
        from mintclub.routing.codec import sort_currencies

        currency0, currency1 = sort_currencies(token_a, token_b)
        return cls(currency0, currency1, fee, tick_spacing, hooks)

    def matches(self, token_a: str, token_b: str) -> bool:
        """True if the pool's unordered currency pair is {token_a, token_b}."""
        pair = {normalize_address(token_a), normalize_address(token_b)}
        return pair == {self.currency0, self.currency1}

    def zero_for_one(self, token_in: str) -> bool:
        """Swap direction for a given input currency."""
        token_in = normalize_address(token_in)
        if token_in == self.currency0:
            return True
        if token_in == self.currency1:
            return False
        raise InvalidArgument(f"{token_in} is not a currency of this pool")


class RouteKind(str, Enum):
    """Which liquidity model a route uses."""

    PATH = "path"  # multi-hop packed path through the exact-input swap command
    POOL = "pool"  # singleton pool model


@dataclass(frozen=True)
class Route:
    """A chosen liquidity path and its quoted output.

    amount_out is None only for a manual path that could not be quoted;
    search results always carry a positive amount_out.
    """

    kind: RouteKind
    description: str
    amount_out: int | None
    path: SwapPath | None = None
    pool_key: PoolKey | None = None
    zero_for_one: bool | None = None
    candidates_evaluated: int = 0

    def __post_init__(self) -> None:
        if self.amount_out is not None and self.amount_out <= 0:
            raise InvalidArgument(f"Route output must be positive, got {self.amount_out}")
        if self.kind is RouteKind.PATH and self.path is None:
            raise InvalidArgument("Path route requires a swap path")
        if self.kind is RouteKind.POOL and (self.pool_key is None or self.zero_for_one is None):
            raise InvalidArgument("Pool route requires a pool key and direction")

    @classmethod
    def manual(cls, path: SwapPath, amount_out: int | None = None) -> Route:
        """Wrap a caller-supplied path as a route."""
        return cls(
            kind=RouteKind.PATH,
            description="Manual path",
            amount_out=amount_out,
            path=path,
        )

    @property
    def is_quoted(self) -> bool:
        return self.amount_out is not None


@dataclass(frozen=True)
class RouteCandidate:
    """One candidate evaluated by the route search."""

    description: str
    path: SwapPath | None = None
    pool_key: PoolKey | None = None
    zero_for_one: bool | None = None

    @property
    def kind(self) -> RouteKind:
        return RouteKind.POOL if self.pool_key is not None else RouteKind.PATH

    def to_route(self, amount_out: int, candidates_evaluated: int) -> Route:
        return Route(
            kind=self.kind,
            description=self.description,
            amount_out=amount_out,
            path=self.path,
            pool_key=self.pool_key,
            zero_for_one=self.zero_for_one,
            candidates_evaluated=candidates_evaluated,
        )


@dataclass
class QuotedCandidate:
    """A candidate with its quote result (None when the quote failed)."""

    candidate: RouteCandidate
    amount_out: int | None = field(default=None)

    @property
    def viable(self) -> bool:
        return self.amount_out is not None and self.amount_out > 0


__all__ = [
    "MAX_FEE",
    "format_fee",
    "SwapPath",
    "PoolKey",
    "RouteKind",
    "Route",
    "RouteCandidate",
    "QuotedCandidate",
]
