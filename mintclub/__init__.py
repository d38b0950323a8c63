"""Mint Club client - bonding-curve tokens and swap routing."""

from mintclub.config import BASE, NetworkConfig, Settings
from mintclub.service import MintClub, OperationResult

__version__ = "0.1.0"
__all__ = ["BASE", "MintClub", "NetworkConfig", "OperationResult", "Settings", "__version__"]
