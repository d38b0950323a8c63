"""Data models for routes, execution plans and bond state."""

from mintclub.models.bond import BondInfo, BurnRefund, MintCost, TokenPrice
from mintclub.models.plan import ApprovalRequirement, ExecutionPlan, ExecutionStep, TxIntent
from mintclub.models.route import PoolKey, Route, RouteCandidate, RouteKind, SwapPath
from mintclub.models.token import CurveStep, TokenBalance, TokenInfo
from mintclub.models.types import NATIVE, Address, Bytes, Uint256

__all__ = [
    # Types
    "Address",
    "Bytes",
    "NATIVE",
    "Uint256",
    # Routes
    "PoolKey",
    "Route",
    "RouteCandidate",
    "RouteKind",
    "SwapPath",
    # Plans
    "ApprovalRequirement",
    "ExecutionPlan",
    "ExecutionStep",
    "TxIntent",
    # Bond
    "BondInfo",
    "BurnRefund",
    "MintCost",
    "TokenPrice",
    # Tokens
    "CurveStep",
    "TokenBalance",
    "TokenInfo",
]
