"""Quote clients for swap path and singleton-pool candidates."""

from __future__ import annotations

from typing import Protocol

import structlog

from mintclub.chain.abis import POOL_QUOTER_ABI, QUOTER_ABI
from mintclub.chain.client import ChainReader, ContractCall
from mintclub.config import NetworkConfig
from mintclub.models.route import PoolKey, SwapPath
from mintclub.models.types import normalize_address
from mintclub.routing.codec import encode_swap_path

logger = structlog.get_logger()


class Quoter(Protocol):
    """Protocol for quote clients.

    Implementations return None for any failure (revert, missing pool,
    malformed path) instead of raising; route search treats every
    candidate as independently fallible.
    """

    def quote_path(self, path: SwapPath, amount_in: int) -> int | None:
        """Get output amount for an exact-input multi-hop swap.

        Args:
            path: Token/fee hop sequence
            amount_in: Input amount

        Returns:
            Output amount, or None if the quote fails
        """
        ...

    def quote_pool(self, pool_key: PoolKey, zero_for_one: bool, amount_in: int) -> int | None:
        """Get output amount for an exact-input swap on a singleton pool.

        Args:
            pool_key: Pool identity
            zero_for_one: True when selling currency0 for currency1
            amount_in: Input amount

        Returns:
            Output amount, or None if the quote fails
        """
        ...


class ChainQuoter:
    """Quoter backed by the on-chain quoting contracts.

    Both quoting contracts are nonpayable and revert to return data, so
    they are called as simulations, never as views.
    """

    def __init__(self, reader: ChainReader, network: NetworkConfig):
        self.reader = reader
        self.network = network

    def quote_path(self, path: SwapPath, amount_in: int) -> int | None:
        call = ContractCall(
            self.network.quoter,
            QUOTER_ABI,
            "quoteExactInput",
            (encode_swap_path(path), amount_in),
        )
        try:
            result = self.reader.simulate(call)
            amount_out = int(result[0])
            logger.debug(
                "quote_path",
                tokens=list(path.tokens),
                fees=list(path.fees),
                amount_in=amount_in,
                amount_out=amount_out,
            )
            return amount_out
        except Exception as e:
            logger.debug(
                "quote_path_failed",
                tokens=list(path.tokens),
                fees=list(path.fees),
                amount_in=amount_in,
                error=str(e),
            )
            return None

    def quote_pool(self, pool_key: PoolKey, zero_for_one: bool, amount_in: int) -> int | None:
        if self.network.pool_quoter is None:
            return None

        key = (
            pool_key.currency0,
            pool_key.currency1,
            pool_key.fee,
            pool_key.tick_spacing,
            pool_key.hooks,
        )
        call = ContractCall(
            self.network.pool_quoter,
            POOL_QUOTER_ABI,
            "quoteExactInputSingle",
            ((key, zero_for_one, amount_in, b""),),
        )
        try:
            result = self.reader.simulate(call)
            deltas = result[0]
            # Output leg is currency1 when zero_for_one, else currency0
            amount_out = abs(int(deltas[1] if zero_for_one else deltas[0]))
            logger.debug(
                "quote_pool",
                currency0=pool_key.currency0,
                currency1=pool_key.currency1,
                fee=pool_key.fee,
                zero_for_one=zero_for_one,
                amount_in=amount_in,
                amount_out=amount_out,
            )
            return amount_out
        except Exception as e:
            logger.debug(
                "quote_pool_failed",
                currency0=pool_key.currency0,
                currency1=pool_key.currency1,
                fee=pool_key.fee,
                zero_for_one=zero_for_one,
                error=str(e),
            )
            return None


PathKey = tuple[tuple[str, ...], tuple[int, ...]]
PoolQuoteKey = tuple[PoolKey, bool]


class MockQuoter:
    """Mock quoter for testing without RPC calls.

    Configure with expected quotes, and track calls for assertions.
    Quotes are fixed outputs keyed by path (tokens, fees) or by
    (pool key, direction), independent of the input amount.
    """

    def __init__(
        self,
        path_quotes: dict[PathKey, int] | None = None,
        pool_quotes: dict[PoolQuoteKey, int] | None = None,
        default_rate: tuple[int, int] | None = None,
    ):
        """Initialize mock quoter.

        Args:
            path_quotes: Mapping of (tokens, fees) -> output amount
            pool_quotes: Mapping of (pool_key, zero_for_one) -> output amount
            default_rate: If set, (numerator, denominator) ratio for any
                unconfigured path: amount_out = amount_in * num // denom.
                Pools never fall back to the default rate.
        """
        self.path_quotes = {
            (tuple(normalize_address(t) for t in tokens), tuple(fees)): amount
            for (tokens, fees), amount in (path_quotes or {}).items()
        }
        self.pool_quotes = dict(pool_quotes or {})
        self.default_rate = default_rate
        self.calls: list[tuple[str, object, int]] = []  # (method, path or pool, amount_in)

    def set_path_quote(self, tokens: tuple[str, ...], fees: tuple[int, ...], amount_out: int) -> None:
        key = (tuple(normalize_address(t) for t in tokens), tuple(fees))
        self.path_quotes[key] = amount_out

    def quote_path(self, path: SwapPath, amount_in: int) -> int | None:
        """Get output amount for exact input."""
        self.calls.append(("path", path, amount_in))

        key = (path.tokens, path.fees)
        if key in self.path_quotes:
            return self.path_quotes[key]

        if self.default_rate is not None:
            num, denom = self.default_rate
            return amount_in * num // denom

        return None

    def quote_pool(self, pool_key: PoolKey, zero_for_one: bool, amount_in: int) -> int | None:
        """Get output amount for a singleton pool."""
        self.calls.append(("pool", pool_key, amount_in))
        return self.pool_quotes.get((pool_key, zero_for_one))


__all__ = ["Quoter", "ChainQuoter", "MockQuoter"]
