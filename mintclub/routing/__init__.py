"""Swap routing: path codec, quote clients, route search and plan building.

Module structure:
- codec.py: packed path and router command payload encoding
- quoter.py: Quoter protocol with chain-backed and mock implementations
- search.py: RouteFinder, the concurrent best-route search
- planner.py: PlanBuilder for plain swaps and zaps, min-output and deadline helpers
"""

from mintclub.routing.codec import encode_path, parse_user_path
from mintclub.routing.planner import PlanBuilder, min_output
from mintclub.routing.quoter import ChainQuoter, MockQuoter, Quoter
from mintclub.routing.search import RouteFinder

__all__ = [
    "ChainQuoter",
    "MockQuoter",
    "PlanBuilder",
    "Quoter",
    "RouteFinder",
    "encode_path",
    "min_output",
    "parse_user_path",
]
