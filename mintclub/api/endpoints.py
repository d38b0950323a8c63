"""Read-only API endpoints: token price, route quotes and swap plan previews."""

from __future__ import annotations

import asyncio
from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends, HTTPException

from mintclub.config import Settings
from mintclub.errors import InvalidArgument, MintClubError, NoRouteFound, NotACurveToken
from mintclub.models.api import (
    PlanResponse,
    PriceResponse,
    RouteRequest,
    RouteResponse,
    SwapPlanRequest,
)
from mintclub.service import MintClub

logger = structlog.get_logger()

router = APIRouter()


@lru_cache(maxsize=1)
def get_default_service() -> MintClub:
    """Read-only client built from environment settings."""
    settings = Settings.from_env()
    logger.info(
        "service_created",
        network=settings.network.name,
        rpc_url=settings.effective_rpc_url[:50],
    )
    return MintClub.from_settings(settings)


def get_service() -> MintClub:
    """Dependency provider for the client instance.

    Override this in tests to inject a client backed by fakes:
        app.dependency_overrides[get_service] = lambda: service
    """
    return get_default_service()


def _check_network(network: str, service: MintClub) -> None:
    if network.lower() != service.network.name:
        raise HTTPException(status_code=404, detail=f"Unsupported network: {network}")


def _to_http_error(error: MintClubError) -> HTTPException:
    if isinstance(error, InvalidArgument):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, (NoRouteFound, NotACurveToken)):
        return HTTPException(status_code=404, detail=str(error))
    return HTTPException(status_code=502, detail=str(error))


@router.get("/{network}/price/{token}", response_model=PriceResponse)
async def price(
    network: str,
    token: str,
    service: MintClub = Depends(get_service),
) -> PriceResponse:
    """Price of one whole curve token in its reserve token."""
    _check_network(network, service)
    loop = asyncio.get_running_loop()
    try:
        address = await loop.run_in_executor(None, service.resolve, token)
        result = await loop.run_in_executor(None, service.price, address)
    except MintClubError as e:
        logger.info("price_failed", token=token, error=str(e))
        raise _to_http_error(e) from e

    return PriceResponse(
        token=result.token,
        reserve_token=result.reserve_token,
        price=str(result.price),
        reserve_balance=str(result.reserve_balance),
        mint_royalty_bps=result.mint_royalty_bps,
        burn_royalty_bps=result.burn_royalty_bps,
    )


@router.post("/{network}/route", response_model=RouteResponse, response_model_exclude_none=True)
async def route(
    network: str,
    request: RouteRequest,
    service: MintClub = Depends(get_service),
) -> RouteResponse:
    """Best route for an exact-input swap.

    Error Handling:
        - Unknown token or zero amount: 422
        - No viable candidate: 404
    """
    _check_network(network, service)
    loop = asyncio.get_running_loop()

    def search() -> RouteResponse:
        token_in = service.resolve(request.token_in)
        token_out = service.resolve(request.token_out)
        found = service.quote_route(
            token_in, token_out, int(request.amount_in), include_pools=request.include_pools
        )
        return RouteResponse.from_route(found)

    try:
        response = await loop.run_in_executor(None, search)
    except MintClubError as e:
        logger.info(
            "route_failed",
            token_in=request.token_in,
            token_out=request.token_out,
            error=str(e),
        )
        raise _to_http_error(e) from e

    logger.info(
        "route_found",
        token_in=request.token_in,
        token_out=request.token_out,
        route=response.description,
        candidates=response.candidates_evaluated,
    )
    return response


@router.post("/{network}/plan/swap", response_model=PlanResponse, response_model_exclude_none=True)
async def plan_swap(
    network: str,
    request: SwapPlanRequest,
    service: MintClub = Depends(get_service),
) -> PlanResponse:
    """Router calldata for a plain swap, without sending anything."""
    _check_network(network, service)
    loop = asyncio.get_running_loop()

    def build() -> PlanResponse:
        token_in = service.resolve(request.token_in)
        token_out = service.resolve(request.token_out)
        min_out = int(request.min_amount_out) if request.min_amount_out is not None else None
        found, plan = service.plan_swap(
            token_in,
            token_out,
            int(request.amount_in),
            min_out,
            request.path,
            request.recipient,
        )
        return PlanResponse.from_plan(found, plan)

    try:
        return await loop.run_in_executor(None, build)
    except MintClubError as e:
        logger.info("plan_failed", token_in=request.token_in, token_out=request.token_out, error=str(e))
        raise _to_http_error(e) from e


__all__ = ["router", "get_service", "get_default_service"]
