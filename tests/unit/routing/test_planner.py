"""Tests for execution plan building and output bounds."""

import pytest
from eth_abi import decode  # type: ignore[attr-defined]

from mintclub.config import BASE
from mintclub.errors import InvalidArgument
from mintclub.models.plan import TxIntent
from mintclub.models.route import PoolKey, Route, RouteKind
from mintclub.models.types import NATIVE
from mintclub.routing.codec import (
    ADDRESS_THIS,
    UNWRAP_WETH,
    V3_SWAP_EXACT_IN,
    V4_SWAP,
    WRAP_ETH,
    encode_path,
)
from mintclub.routing.planner import (
    SWAP_DEADLINE_SECONDS,
    ZAP_DEADLINE_SECONDS,
    PlanBuilder,
    deadline,
    min_output,
)
from tests.helpers import CURVE_TOKEN, HUNT, NOW, ROUTER, TOKEN_A, USDC, USER, WETH, ZAP, make_path_route

SWAP_TYPES = ["address", "uint256", "uint256", "bytes", "bool"]


@pytest.fixture
def builder() -> PlanBuilder:
    return PlanBuilder(BASE, clock=lambda: NOW)


class TestMinOutput:
    def test_derived_from_quote(self) -> None:
        assert min_output(10_000, 100) == 9_900
        assert min_output(1_000_000, 50) == 995_000

    def test_rounds_down(self) -> None:
        assert min_output(999, 100) == 989

    def test_explicit_used_verbatim(self) -> None:
        assert min_output(10_000, 100, explicit=12_345) == 12_345
        assert min_output(None, 100, explicit=0) == 0

    def test_no_quote_without_explicit_rejected(self) -> None:
        with pytest.raises(InvalidArgument, match="explicit minimum"):
            min_output(None, 100)

    @pytest.mark.parametrize("slippage", [-1, 10_001])
    def test_slippage_range(self, slippage: int) -> None:
        with pytest.raises(InvalidArgument):
            min_output(100, slippage)

    def test_negative_explicit_rejected(self) -> None:
        with pytest.raises(InvalidArgument):
            min_output(100, 100, explicit=-1)


class TestDeadline:
    def test_windows(self) -> None:
        assert ZAP_DEADLINE_SECONDS == 1200
        assert SWAP_DEADLINE_SECONDS == 1800
        assert deadline(ZAP_DEADLINE_SECONDS, lambda: NOW + 0.9) == NOW + 1200


class TestSwapPlanNativeInput:
    """Native in: wrap first, value equals the wrap amount."""

    def test_wrap_then_swap(self, builder: PlanBuilder) -> None:
        route = make_path_route([WETH, HUNT], [3000], amount_out=5_000)
        plan = builder.build_swap_plan(route, NATIVE, HUNT, 10**17, 4_950, USER)

        assert plan.intent is TxIntent.SWAP
        assert plan.command_codes == [WRAP_ETH, V3_SWAP_EXACT_IN]
        assert plan.value == 10**17
        assert plan.approval is None
        assert plan.spender == ROUTER
        assert plan.deadline == NOW + SWAP_DEADLINE_SECONDS

        _, wrap_amount = decode(["address", "uint256"], plan.inputs[0])
        assert wrap_amount == plan.value

        recipient, amount_in, amount_min, path, payer_is_user = decode(SWAP_TYPES, plan.inputs[1])
        assert recipient.lower() == USER
        assert amount_in == 10**17
        assert amount_min == 4_950
        assert path == encode_path([WETH, HUNT], [3000])
        assert payer_is_user is False


class TestSwapPlanNativeOutput:
    """Native out: swap to the router, unwrap to the caller last."""

    def test_swap_then_unwrap(self, builder: PlanBuilder) -> None:
        route = make_path_route([USDC, WETH], [500])
        plan = builder.build_swap_plan(route, USDC, NATIVE, 2_000_000, 900, USER)

        assert plan.command_codes == [V3_SWAP_EXACT_IN, UNWRAP_WETH]
        assert plan.value == 0

        recipient, _, amount_min, _, payer_is_user = decode(SWAP_TYPES, plan.inputs[0])
        assert recipient.lower() == ADDRESS_THIS
        assert amount_min == 900
        assert payer_is_user is True

        unwrap_recipient, unwrap_min = decode(["address", "uint256"], plan.inputs[-1])
        assert unwrap_recipient.lower() == USER
        assert unwrap_min == 900

    def test_erc20_input_needs_router_approval(self, builder: PlanBuilder) -> None:
        route = make_path_route([USDC, WETH], [500])
        plan = builder.build_swap_plan(route, USDC, NATIVE, 2_000_000, 900, USER)

        assert plan.approval is not None
        assert plan.approval.token == USDC
        assert plan.approval.spender == ROUTER
        assert plan.approval.amount == 2_000_000


class TestSwapPlanTokens:
    def test_single_swap_payer_is_user(self, builder: PlanBuilder) -> None:
        route = make_path_route([USDC, WETH, HUNT], [500, 3000])
        plan = builder.build_swap_plan(route, USDC, HUNT, 10**6, 1, USER)

        assert plan.command_codes == [V3_SWAP_EXACT_IN]
        assert plan.commands == b"\x00"
        recipient, _, _, _, payer_is_user = decode(SWAP_TYPES, plan.inputs[0])
        assert recipient.lower() == USER
        assert payer_is_user is True

    def test_path_endpoints_must_match(self, builder: PlanBuilder) -> None:
        route = make_path_route([USDC, WETH], [500])
        with pytest.raises(InvalidArgument, match="expected"):
            builder.build_swap_plan(route, USDC, HUNT, 10**6, 1, USER)

    def test_zero_amount_rejected(self, builder: PlanBuilder) -> None:
        route = make_path_route([USDC, WETH], [500])
        with pytest.raises(InvalidArgument):
            builder.build_swap_plan(route, USDC, WETH, 0, 1, USER)


class TestSwapPlanPool:
    POOL = PoolKey(NATIVE, USDC, 500, 10)

    def pool_route(self, zero_for_one: bool = True) -> Route:
        return Route(
            kind=RouteKind.POOL,
            description="Pool (fee: 0.05%)",
            amount_out=2_000,
            pool_key=self.POOL,
            zero_for_one=zero_for_one,
        )

    def test_single_v4_command_with_value(self, builder: PlanBuilder) -> None:
        plan = builder.build_swap_plan(self.pool_route(), NATIVE, USDC, 10**18, 1_980, USER)

        assert plan.command_codes == [V4_SWAP]
        assert plan.value == 10**18
        assert plan.approval is None

        actions, params = decode(["bytes", "bytes[]"], plan.inputs[0])
        assert actions == bytes([0x06, 0x0B, 0x0E])
        _, recipient, _ = decode(["address", "address", "uint256"], params[2])
        assert recipient.lower() == USER

    def test_erc20_input_rejected(self, builder: PlanBuilder) -> None:
        with pytest.raises(InvalidArgument, match="native input"):
            builder.build_swap_plan(self.pool_route(False), USDC, NATIVE, 10**6, 1, USER)


class TestZapMintPlan:
    def test_native_input_wraps_and_pays_zap(self, builder: PlanBuilder) -> None:
        route = make_path_route([WETH, HUNT], [3000])
        plan = builder.build_zap_mint_plan(route, NATIVE, HUNT, 10**16)

        assert plan.intent is TxIntent.ZAP_MINT
        assert plan.command_codes == [WRAP_ETH, V3_SWAP_EXACT_IN]
        assert plan.value == 10**16
        assert plan.approval is None
        assert plan.spender == ZAP
        assert plan.deadline == NOW + ZAP_DEADLINE_SECONDS

        recipient, amount_in, amount_min, _, payer_is_user = decode(SWAP_TYPES, plan.inputs[1])
        assert recipient.lower() == ZAP
        assert amount_in == 10**16
        assert amount_min == 0
        assert payer_is_user is False

    def test_erc20_input_requires_zap_approval(self, builder: PlanBuilder) -> None:
        route = make_path_route([USDC, WETH, HUNT], [500, 3000])
        plan = builder.build_zap_mint_plan(route, USDC, HUNT, 10**6)

        assert plan.command_codes == [V3_SWAP_EXACT_IN]
        assert plan.value == 0
        assert plan.approval.token == USDC
        assert plan.approval.spender == ZAP

    def test_route_must_end_at_reserve(self, builder: PlanBuilder) -> None:
        route = make_path_route([USDC, WETH], [500])
        with pytest.raises(InvalidArgument):
            builder.build_zap_mint_plan(route, USDC, HUNT, 10**6)


class TestZapBurnPlan:
    def test_swap_consumes_refund(self, builder: PlanBuilder) -> None:
        route = make_path_route([HUNT, USDC], [3000])
        plan = builder.build_zap_burn_plan(
            route, HUNT, USDC, CURVE_TOKEN, 10 * 10**18, 7 * 10**18, 12_000_000, USER
        )

        assert plan.intent is TxIntent.ZAP_BURN
        assert plan.command_codes == [V3_SWAP_EXACT_IN]
        recipient, amount_in, amount_min, _, payer_is_user = decode(SWAP_TYPES, plan.inputs[0])
        assert recipient.lower() == USER
        assert amount_in == 7 * 10**18
        assert amount_min == 12_000_000
        assert payer_is_user is False

        assert plan.approval.token == CURVE_TOKEN
        assert plan.approval.spender == ZAP
        assert plan.approval.amount == 10 * 10**18

    def test_native_output_unwraps_to_caller(self, builder: PlanBuilder) -> None:
        route = make_path_route([HUNT, WETH], [3000])
        plan = builder.build_zap_burn_plan(route, HUNT, NATIVE, CURVE_TOKEN, 10**18, 10**17, 5, USER)

        assert plan.command_codes == [V3_SWAP_EXACT_IN, UNWRAP_WETH]
        recipient, *_ = decode(SWAP_TYPES, plan.inputs[0])
        assert recipient.lower() == ADDRESS_THIS
        unwrap_recipient, unwrap_min = decode(["address", "uint256"], plan.inputs[1])
        assert unwrap_recipient.lower() == USER
        assert unwrap_min == 5

    def test_zero_refund_rejected(self, builder: PlanBuilder) -> None:
        route = make_path_route([HUNT, USDC], [3000])
        with pytest.raises(InvalidArgument):
            builder.build_zap_burn_plan(route, HUNT, USDC, CURVE_TOKEN, 10**18, 0, 0, USER)

    def test_wrong_start_token_rejected(self, builder: PlanBuilder) -> None:
        route = make_path_route([TOKEN_A, USDC], [3000])
        with pytest.raises(InvalidArgument):
            builder.build_zap_burn_plan(route, HUNT, USDC, CURVE_TOKEN, 10**18, 10**18, 0, USER)


class TestWrapOnlyZapPlans:
    def test_wrap_pays_zap_directly(self, builder: PlanBuilder) -> None:
        plan = builder.build_zap_wrap_plan(3 * 10**17)

        assert plan.intent is TxIntent.ZAP_MINT
        assert plan.command_codes == [WRAP_ETH]
        assert plan.value == 3 * 10**17
        assert plan.approval is None
        assert plan.spender == ZAP
        assert plan.deadline == NOW + ZAP_DEADLINE_SECONDS
        recipient, amount = decode(["address", "uint256"], plan.inputs[0])
        assert recipient.lower() == ZAP
        assert amount == 3 * 10**17

    def test_unwrap_to_caller(self, builder: PlanBuilder) -> None:
        plan = builder.build_zap_unwrap_plan(CURVE_TOKEN, 10**18, 42, USER)

        assert plan.intent is TxIntent.ZAP_BURN
        assert plan.command_codes == [UNWRAP_WETH]
        assert plan.value == 0
        assert plan.min_amount_out == 42
        assert plan.approval.token == CURVE_TOKEN
        assert plan.approval.spender == ZAP
        recipient, amount_min = decode(["address", "uint256"], plan.inputs[0])
        assert recipient.lower() == USER
        assert amount_min == 42

    def test_zero_amounts_rejected(self, builder: PlanBuilder) -> None:
        with pytest.raises(InvalidArgument):
            builder.build_zap_wrap_plan(0)
        with pytest.raises(InvalidArgument):
            builder.build_zap_unwrap_plan(CURVE_TOKEN, 0, 0, USER)
