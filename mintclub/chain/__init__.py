"""Chain access: contract ABIs, reader/writer clients and the transaction executor."""

from mintclub.chain.client import (
    ChainReader,
    ChainWriter,
    ContractCall,
    Receipt,
    Web3ChainReader,
    Web3ChainWriter,
    decode_revert_reason,
)
from mintclub.chain.executor import TransactionExecutor, TxResult, TxState

__all__ = [
    "ChainReader",
    "ChainWriter",
    "ContractCall",
    "Receipt",
    "Web3ChainReader",
    "Web3ChainWriter",
    "decode_revert_reason",
    "TransactionExecutor",
    "TxResult",
    "TxState",
]
