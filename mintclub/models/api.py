"""Pydantic models for the HTTP API.

Amounts travel as decimal strings so uint256 values survive JSON.
"""

from pydantic import BaseModel, Field

from mintclub.models.plan import ExecutionPlan
from mintclub.models.route import Route
from mintclub.models.types import Address, Bytes, Uint256


class PriceResponse(BaseModel):
    """Price of one whole curve token."""

    token: Address
    reserve_token: Address = Field(alias="reserveToken")
    price: Uint256 = Field(description="Reserve units to mint one whole token")
    reserve_balance: Uint256 = Field(alias="reserveBalance")
    mint_royalty_bps: int = Field(alias="mintRoyaltyBps")
    burn_royalty_bps: int = Field(alias="burnRoyaltyBps")

    model_config = {"populate_by_name": True}


class RouteRequest(BaseModel):
    """Best-route query."""

    token_in: str = Field(alias="tokenIn", description="Address or symbol; ETH for native")
    token_out: str = Field(alias="tokenOut", description="Address or symbol; ETH for native")
    amount_in: Uint256 = Field(alias="amountIn")
    include_pools: bool = Field(default=False, alias="includePools")

    model_config = {"populate_by_name": True}


class RouteResponse(BaseModel):
    """A chosen route and its quote."""

    kind: str
    description: str
    amount_out: Uint256 | None = Field(default=None, alias="amountOut")
    tokens: list[Address] | None = None
    fees: list[int] | None = None
    candidates_evaluated: int = Field(alias="candidatesEvaluated")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_route(cls, route: Route) -> "RouteResponse":
        return cls(
            kind=route.kind.value,
            description=route.description,
            amount_out=str(route.amount_out) if route.amount_out is not None else None,
            tokens=list(route.path.tokens) if route.path is not None else None,
            fees=list(route.path.fees) if route.path is not None else None,
            candidates_evaluated=route.candidates_evaluated,
        )


class SwapPlanRequest(BaseModel):
    """Plain swap plan preview."""

    token_in: str = Field(alias="tokenIn")
    token_out: str = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    recipient: Address
    min_amount_out: Uint256 | None = Field(default=None, alias="minAmountOut")
    path: str | None = Field(
        default=None, description="Manual path: token,fee,token[,fee,token...]"
    )

    model_config = {"populate_by_name": True}


class PlanStep(BaseModel):
    """One router command."""

    command: int
    input: Bytes


class PlanResponse(BaseModel):
    """Router call data for a planned swap."""

    route: RouteResponse
    to: Address
    commands: Bytes
    steps: list[PlanStep]
    value: Uint256
    deadline: int
    min_amount_out: Uint256 = Field(alias="minAmountOut")
    approval_token: Address | None = Field(default=None, alias="approvalToken")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_plan(cls, route: Route, plan: ExecutionPlan) -> "PlanResponse":
        return cls(
            route=RouteResponse.from_route(route),
            to=plan.spender,
            commands="0x" + plan.commands.hex(),
            steps=[PlanStep(command=s.command, input="0x" + s.payload.hex()) for s in plan.steps],
            value=str(plan.value),
            deadline=plan.deadline,
            min_amount_out=str(plan.min_amount_out),
            approval_token=plan.approval.token if plan.approval is not None else None,
        )


__all__ = [
    "PriceResponse",
    "RouteRequest",
    "RouteResponse",
    "SwapPlanRequest",
    "PlanStep",
    "PlanResponse",
]
