"""Execution plan building for plain swaps and zaps.

Plans are ordered router steps. Native handling follows the router's
conventions: native input is wrapped into the router first (value attached
to the outer call), native output is swapped to the router itself and then
unwrapped to the caller.
"""

from __future__ import annotations

import time
from collections.abc import Callable

import structlog

from mintclub.config import NetworkConfig
from mintclub.errors import InvalidArgument
from mintclub.models.plan import ApprovalRequirement, ExecutionPlan, ExecutionStep, TxIntent
from mintclub.models.route import Route, RouteKind
from mintclub.models.types import is_native, normalize_address
from mintclub.routing.codec import (
    ADDRESS_THIS,
    UNWRAP_WETH,
    V3_SWAP_EXACT_IN,
    V4_SWAP,
    WRAP_ETH,
    encode_unwrap_weth_input,
    encode_v3_swap_input,
    encode_v4_swap_input,
    encode_wrap_eth_input,
)

logger = structlog.get_logger()

BPS = 10_000

ZAP_DEADLINE_SECONDS = 20 * 60
SWAP_DEADLINE_SECONDS = 30 * 60


def min_output(quoted: int | None, slippage_bps: int, explicit: int | None = None) -> int:
    """Minimum acceptable output for a plan.

    An explicit minimum is used verbatim. Otherwise the minimum is derived
    from the quote: quoted * (10000 - slippage_bps) // 10000.

    Raises:
        InvalidArgument: If there is neither an explicit minimum nor a quote,
            or slippage is outside 0..10000
    """
    if explicit is not None:
        if explicit < 0:
            raise InvalidArgument(f"Minimum output cannot be negative: {explicit}")
        return explicit
    if not 0 <= slippage_bps <= BPS:
        raise InvalidArgument(f"Slippage must be within 0..{BPS} bps, got {slippage_bps}")
    if quoted is None:
        raise InvalidArgument(
            "No quote available for this path; supply an explicit minimum output"
        )
    return quoted * (BPS - slippage_bps) // BPS


def deadline(window_seconds: int, clock: Callable[[], float] = time.time) -> int:
    """Unix timestamp window_seconds from now."""
    return int(clock()) + window_seconds


class PlanBuilder:
    """Builds router command lists for swaps and zaps on one network."""

    def __init__(self, network: NetworkConfig, clock: Callable[[], float] = time.time):
        self.network = network
        self.clock = clock

    def _check_endpoints(self, route: Route, token_in: str, token_out: str) -> None:
        if route.kind is not RouteKind.PATH:
            return
        assert route.path is not None
        swap_in = self.network.to_swap_token(token_in)
        swap_out = self.network.to_swap_token(token_out)
        if route.path.token_in != swap_in or route.path.token_out != swap_out:
            raise InvalidArgument(
                f"Path runs {route.path.token_in} -> {route.path.token_out}, "
                f"expected {swap_in} -> {swap_out}"
            )

    def build_swap_plan(
        self,
        route: Route,
        token_in: str,
        token_out: str,
        amount_in: int,
        min_amount_out: int,
        recipient: str,
    ) -> ExecutionPlan:
        """Plan a plain router swap.

        Args:
            route: Chosen route (path or singleton pool)
            token_in: Logical input token (native sentinel allowed)
            token_out: Logical output token (native sentinel allowed)
            amount_in: Exact input amount
            min_amount_out: Minimum output the caller accepts
            recipient: Address receiving the output

        Returns:
            ExecutionPlan targeting the router

        Raises:
            InvalidArgument: On non-positive amount, mismatched path
                endpoints, or a pool route with ERC-20 input
        """
        _require_positive(amount_in)
        native_in = is_native(token_in)
        native_out = is_native(token_out)
        recipient = normalize_address(recipient, validate=True)
        router = self.network.router
        steps: list[ExecutionStep] = []
        value = 0
        approval = None

        if route.kind is RouteKind.POOL:
            assert route.pool_key is not None and route.zero_for_one is not None
            if not native_in:
                raise InvalidArgument("Singleton-pool routes only support native input")
            steps.append(
                ExecutionStep(
                    V4_SWAP,
                    encode_v4_swap_input(
                        route.pool_key,
                        route.zero_for_one,
                        amount_in,
                        min_amount_out,
                        recipient,
                    ),
                )
            )
            value = amount_in
        else:
            assert route.path is not None
            self._check_endpoints(route, token_in, token_out)
            if native_in:
                steps.append(ExecutionStep(WRAP_ETH, encode_wrap_eth_input(amount_in)))
                value = amount_in
            else:
                approval = ApprovalRequirement(normalize_address(token_in), router, amount_in)

            swap_recipient = ADDRESS_THIS if native_out else recipient
            steps.append(
                ExecutionStep(
                    V3_SWAP_EXACT_IN,
                    encode_v3_swap_input(
                        swap_recipient,
                        amount_in,
                        min_amount_out,
                        route.path,
                        payer_is_user=not native_in,
                    ),
                )
            )
            if native_out:
                steps.append(
                    ExecutionStep(UNWRAP_WETH, encode_unwrap_weth_input(recipient, min_amount_out))
                )

        plan = ExecutionPlan(
            intent=TxIntent.SWAP,
            steps=steps,
            value=value,
            deadline=deadline(SWAP_DEADLINE_SECONDS, self.clock),
            spender=router,
            approval=approval,
            min_amount_out=min_amount_out,
            notes=[route.description],
        )
        logger.debug("swap_plan_built", commands=plan.commands.hex(), value=value, route=route.description)
        return plan

    def build_zap_mint_plan(
        self,
        route: Route,
        input_token: str,
        reserve_token: str,
        amount_in: int,
    ) -> ExecutionPlan:
        """Plan the swap half of a zap-mint (input token -> reserve token).

        The swap output goes to the zap contract, which mints with it in the
        same transaction. The slippage bound is enforced by the zap's own
        minimum-tokens argument, so the swap step carries a zero minimum.
        """
        _require_positive(amount_in)
        if route.kind is not RouteKind.PATH:
            raise InvalidArgument("Zap routes must be swap paths")
        assert route.path is not None
        self._check_endpoints(route, input_token, reserve_token)

        zap = self.network.zap
        native_in = is_native(input_token)
        steps: list[ExecutionStep] = []
        approval = None
        value = 0

        if native_in:
            steps.append(ExecutionStep(WRAP_ETH, encode_wrap_eth_input(amount_in)))
            value = amount_in
        else:
            approval = ApprovalRequirement(normalize_address(input_token), zap, amount_in)

        steps.append(
            ExecutionStep(
                V3_SWAP_EXACT_IN,
                encode_v3_swap_input(zap, amount_in, 0, route.path, payer_is_user=False),
            )
        )

        return ExecutionPlan(
            intent=TxIntent.ZAP_MINT,
            steps=steps,
            value=value,
            deadline=deadline(ZAP_DEADLINE_SECONDS, self.clock),
            spender=zap,
            approval=approval,
            notes=[route.description],
        )

    def build_zap_burn_plan(
        self,
        route: Route,
        reserve_token: str,
        output_token: str,
        curve_token: str,
        tokens_to_burn: int,
        refund_amount: int,
        min_amount_out: int,
        recipient: str,
    ) -> ExecutionPlan:
        """Plan the swap half of a zap-burn (reserve token -> output token).

        Args:
            route: Path from the reserve token to the output token
            reserve_token: Reserve token released by the burn
            output_token: Token the caller wants (native sentinel allowed)
            curve_token: Token being burned (approved to the zap contract)
            tokens_to_burn: Curve tokens to burn
            refund_amount: Quoted burn refund; the swap consumes exactly this
            min_amount_out: Minimum output the caller accepts
            recipient: Address receiving the output
        """
        _require_positive(tokens_to_burn)
        _require_positive(refund_amount)
        if route.kind is not RouteKind.PATH:
            raise InvalidArgument("Zap routes must be swap paths")
        assert route.path is not None
        self._check_endpoints(route, reserve_token, output_token)

        zap = self.network.zap
        recipient = normalize_address(recipient, validate=True)
        native_out = is_native(output_token)
        swap_recipient = ADDRESS_THIS if native_out else recipient

        steps = [
            ExecutionStep(
                V3_SWAP_EXACT_IN,
                encode_v3_swap_input(
                    swap_recipient, refund_amount, min_amount_out, route.path, payer_is_user=False
                ),
            )
        ]
        if native_out:
            steps.append(ExecutionStep(UNWRAP_WETH, encode_unwrap_weth_input(recipient, min_amount_out)))

        return ExecutionPlan(
            intent=TxIntent.ZAP_BURN,
            steps=steps,
            value=0,
            deadline=deadline(ZAP_DEADLINE_SECONDS, self.clock),
            spender=zap,
            approval=ApprovalRequirement(normalize_address(curve_token), zap, tokens_to_burn),
            min_amount_out=min_amount_out,
            notes=[route.description],
        )

    def build_zap_wrap_plan(self, amount_in: int) -> ExecutionPlan:
        """Plan a zap-mint from native input into a wrapped-native reserve.

        No swap is needed: the router wraps the attached value straight to
        the zap contract, which mints with it.
        """
        _require_positive(amount_in)
        zap = self.network.zap
        return ExecutionPlan(
            intent=TxIntent.ZAP_MINT,
            steps=[ExecutionStep(WRAP_ETH, encode_wrap_eth_input(amount_in, zap))],
            value=amount_in,
            deadline=deadline(ZAP_DEADLINE_SECONDS, self.clock),
            spender=zap,
            notes=["wrap"],
        )

    def build_zap_unwrap_plan(
        self,
        curve_token: str,
        tokens_to_burn: int,
        min_amount_out: int,
        recipient: str,
    ) -> ExecutionPlan:
        """Plan a zap-burn from a wrapped-native reserve into native output.

        The zap hands the wrapped refund to the router, which unwraps all of
        it to the recipient.
        """
        _require_positive(tokens_to_burn)
        zap = self.network.zap
        recipient = normalize_address(recipient, validate=True)
        return ExecutionPlan(
            intent=TxIntent.ZAP_BURN,
            steps=[ExecutionStep(UNWRAP_WETH, encode_unwrap_weth_input(recipient, min_amount_out))],
            value=0,
            deadline=deadline(ZAP_DEADLINE_SECONDS, self.clock),
            spender=zap,
            approval=ApprovalRequirement(normalize_address(curve_token), zap, tokens_to_burn),
            min_amount_out=min_amount_out,
            notes=["unwrap"],
        )


def _require_positive(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise InvalidArgument(f"Amount must be a positive integer, got {amount!r}")


__all__ = [
    "BPS",
    "ZAP_DEADLINE_SECONDS",
    "SWAP_DEADLINE_SECONDS",
    "min_output",
    "deadline",
    "PlanBuilder",
]
