"""Best-route search across fee tiers, intermediaries and singleton pools.

The search is brute force: with T fee tiers and K
intermediaries it quotes T direct paths, K*T*T one-hop paths and every
matching allow-listed pool. All quotes run concurrently and the search
joins on all of them (bounded by a timeout) before selecting.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait

import structlog

from mintclub.config import NetworkConfig
from mintclub.errors import InvalidArgument
from mintclub.models.route import (
    QuotedCandidate,
    Route,
    RouteCandidate,
    SwapPath,
    format_fee,
)
from mintclub.models.types import normalize_address
from mintclub.routing.quoter import Quoter

logger = structlog.get_logger()

DEFAULT_MAX_WORKERS = 16
DEFAULT_QUOTE_TIMEOUT = 15.0


class RouteFinder:
    """Finds the output-maximizing route between two tokens.

    Args:
        quoter: Quote client used for every candidate
        network: Fee tiers, intermediaries, wrapped-native and pool allow-list
        max_workers: Maximum concurrent quote calls
        timeout: Seconds to wait for the whole quote fan-out; unfinished
            quotes count as failed candidates
    """

    def __init__(
        self,
        quoter: Quoter,
        network: NetworkConfig,
        max_workers: int = DEFAULT_MAX_WORKERS,
        timeout: float = DEFAULT_QUOTE_TIMEOUT,
    ):
        self.quoter = quoter
        self.network = network
        self.max_workers = max_workers
        self.timeout = timeout

    def candidates(
        self, token_in: str, token_out: str, *, include_pools: bool = False
    ) -> list[RouteCandidate]:
        """Enumerate candidates in selection-priority order.

        Direct paths come first (one per fee tier), then one-hop paths per
        intermediary, then allow-listed singleton pools. Native inputs are
        expected to already be substituted with wrapped-native.
        """
        token_in = normalize_address(token_in)
        token_out = normalize_address(token_out)
        tiers = self.network.fee_tiers
        result: list[RouteCandidate] = []

        for fee in tiers:
            result.append(
                RouteCandidate(
                    description=f"Direct (fee: {format_fee(fee)})",
                    path=SwapPath((token_in, token_out), (fee,)),
                )
            )

        for hub in self.network.intermediaries:
            if hub.address in (token_in, token_out):
                continue
            for fee1 in tiers:
                for fee2 in tiers:
                    result.append(
                        RouteCandidate(
                            description=(
                                f"via {hub.symbol} "
                                f"(fees: {format_fee(fee1)} → {format_fee(fee2)})"
                            ),
                            path=SwapPath((token_in, hub.address, token_out), (fee1, fee2)),
                        )
                    )

        if include_pools:
            # Singleton pools hold the true native asset, not its wrapper
            pool_in = self.network.to_pool_currency(token_in)
            pool_out = self.network.to_pool_currency(token_out)
            for pool_key in self.network.pools:
                if pool_key.matches(pool_in, pool_out):
                    result.append(
                        RouteCandidate(
                            description=f"Pool (fee: {format_fee(pool_key.fee)})",
                            pool_key=pool_key,
                            zero_for_one=pool_key.zero_for_one(pool_in),
                        )
                    )

        return result

    def quote_candidates(
        self, candidates: Sequence[RouteCandidate], amount_in: int
    ) -> list[QuotedCandidate]:
        """Quote every candidate concurrently.

        Results are returned in candidate order. A quote that raises or
        does not finish within the timeout has amount_out None.
        """
        if not candidates:
            return []

        executor = ThreadPoolExecutor(max_workers=min(self.max_workers, len(candidates)))
        try:
            futures: list[Future[int | None]] = [
                executor.submit(self._quote, candidate, amount_in) for candidate in candidates
            ]
            _, not_done = wait(futures, timeout=self.timeout)
            if not_done:
                logger.warning(
                    "quote_timeout",
                    pending=len(not_done),
                    total=len(futures),
                    timeout=self.timeout,
                )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        quoted: list[QuotedCandidate] = []
        for candidate, future in zip(candidates, futures, strict=True):
            amount_out: int | None = None
            if future.done() and not future.cancelled():
                error = future.exception()
                if error is None:
                    amount_out = future.result()
                else:
                    logger.warning(
                        "quote_raised",
                        route=candidate.description,
                        error=str(error),
                    )
            quoted.append(QuotedCandidate(candidate, amount_out))
        return quoted

    def _quote(self, candidate: RouteCandidate, amount_in: int) -> int | None:
        if candidate.pool_key is not None:
            assert candidate.zero_for_one is not None
            return self.quoter.quote_pool(candidate.pool_key, candidate.zero_for_one, amount_in)
        assert candidate.path is not None
        return self.quoter.quote_path(candidate.path, amount_in)

    def find_best_route(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        *,
        include_pools: bool = False,
    ) -> Route | None:
        """Search all candidates and return the one with the greatest output.

        Args:
            token_in: Input token (native sentinel allowed)
            token_out: Output token (native sentinel allowed)
            amount_in: Exact input amount
            include_pools: Also consider allow-listed singleton pools

        Returns:
            The best Route, or None if the tokens are the same or no
            candidate produced a positive quote.

        Raises:
            InvalidArgument: If amount_in is not positive
        """
        if not isinstance(amount_in, int) or isinstance(amount_in, bool) or amount_in <= 0:
            raise InvalidArgument(f"amount_in must be a positive integer, got {amount_in!r}")

        swap_in = self.network.to_swap_token(token_in)
        swap_out = self.network.to_swap_token(token_out)
        if swap_in == swap_out:
            logger.debug("route_search_degenerate", token=swap_in)
            return None

        candidates = self.candidates(swap_in, swap_out, include_pools=include_pools)
        quoted = self.quote_candidates(candidates, amount_in)

        best: QuotedCandidate | None = None
        viable = 0
        for item in quoted:
            if not item.viable:
                continue
            viable += 1
            # Strictly greater: the earliest candidate wins ties
            if best is None or item.amount_out > best.amount_out:  # type: ignore[operator]
                best = item

        if best is None:
            logger.info(
                "route_search_no_route",
                token_in=swap_in,
                token_out=swap_out,
                amount_in=amount_in,
                candidates=len(candidates),
            )
            return None

        assert best.amount_out is not None
        route = best.candidate.to_route(best.amount_out, candidates_evaluated=len(candidates))
        logger.info(
            "route_search_complete",
            token_in=swap_in,
            token_out=swap_out,
            amount_in=amount_in,
            route=route.description,
            amount_out=route.amount_out,
            candidates=len(candidates),
            viable=viable,
        )
        return route


__all__ = ["DEFAULT_MAX_WORKERS", "DEFAULT_QUOTE_TIMEOUT", "RouteFinder"]
